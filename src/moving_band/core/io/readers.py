"""
Mesh I/O readers module.

This module contains functions for loading machine meshes:
- Native HDF5 format
- Any format understood by meshio (gmsh .msh, .vtu, ...)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List

import numpy as np

from moving_band.core.mesh import MachineMesh

logger = logging.getLogger(__name__)

#: meshio cell block types read as triangles
MESHIO_TRIANGLE_TYPES = ("triangle",)


def load_mesh(filepath, format: str = "auto") -> MachineMesh:
    """
    Load a machine mesh from disk.

    Parameters
    ----------
    filepath : str or Path
        Path to the mesh file.
    format : str, optional
        File format: "auto", "hdf5" or "meshio". Default is "auto", which
        picks HDF5 for .h5/.hdf5 files and meshio for everything else.

    Returns
    -------
    MachineMesh
        The loaded mesh.

    Raises
    ------
    FileNotFoundError
        If the file does not exist.
    ValueError
        If format is not recognized.
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Mesh file not found: {filepath}")

    if format == "auto":
        format = "hdf5" if path.suffix.lower() in (".h5", ".hdf5") else "meshio"

    if format == "hdf5":
        return load_hdf5(path)
    elif format == "meshio":
        return load_meshio(path)
    raise ValueError(f"Unknown format '{format}'. Use 'hdf5' or 'meshio'.")


def load_meshio(filepath) -> MachineMesh:
    """
    Load a mesh using the meshio library.

    Only triangle cells are kept. Every gmsh physical group carried by the
    file becomes an element set named after the group (or ``"physical_<tag>"``
    for unnamed groups).
    """
    import meshio

    mio = meshio.read(filepath)

    physical = mio.cell_data.get("gmsh:physical")
    tag_names: Dict[int, str] = {
        int(data[0]): name for name, data in (mio.field_data or {}).items()
    }

    blocks: List[np.ndarray] = []
    set_members: Dict[str, List[np.ndarray]] = {}
    offset = 0
    for i, cell_block in enumerate(mio.cells):
        if cell_block.type not in MESHIO_TRIANGLE_TYPES:
            logger.debug("Skipping unsupported cell block '%s'", cell_block.type)
            continue
        data = np.asarray(cell_block.data, dtype=np.int64)
        blocks.append(data)
        if physical is not None:
            tags = np.asarray(physical[i], dtype=np.int64)
            for tag in np.unique(tags):
                name = tag_names.get(int(tag), f"physical_{int(tag)}")
                set_members.setdefault(name, []).append(offset + np.flatnonzero(tags == tag))
        offset += data.shape[0]

    if not blocks:
        raise ValueError(f"No triangle cells found in {filepath}")

    mesh = MachineMesh(
        mio.points,
        np.vstack(blocks),
        element_sets={name: np.concatenate(parts) for name, parts in set_members.items()},
    )
    logger.info("Mesh loaded from %s (meshio format): %r", filepath, mesh)
    return mesh


def load_hdf5(filepath) -> MachineMesh:
    """Load mesh from the native HDF5 format written by :func:`write_hdf5`."""
    import h5py

    with h5py.File(filepath, "r") as f:
        coords = f["nodes"]["coords"][:]
        connectivity = f["elements"]["connectivity"][:]

        element_sets = {}
        if "element_sets" in f:
            for name in f["element_sets"]:
                element_sets[name] = f["element_sets"][name]["element_ids"][:]

        symmetry_sectors = None
        if "symmetry_sectors" in f.attrs:
            symmetry_sectors = int(f.attrs["symmetry_sectors"])

        periodicity_coeff = None
        if "periodicity_coeff_real" in f.attrs:
            real = float(f.attrs["periodicity_coeff_real"])
            imag = float(f.attrs.get("periodicity_coeff_imag", 0.0))
            periodicity_coeff = complex(real, imag) if imag else real

    mesh = MachineMesh(
        coords,
        connectivity,
        symmetry_sectors=symmetry_sectors,
        periodicity_coeff=periodicity_coeff,
        element_sets=element_sets,
    )
    logger.info("Mesh loaded from %s (HDF5 format): %r", filepath, mesh)
    return mesh

"""
Mesh I/O writers module.

This module contains functions for writing machine meshes:
- Native HDF5 format (keeps element sets and symmetry metadata)
- meshio export (geometry only)
"""

from __future__ import annotations

import logging

import numpy as np

from moving_band.core.mesh import MachineMesh

logger = logging.getLogger(__name__)


def write_meshio(mesh: MachineMesh, filename: str, **kwargs) -> None:
    """Write mesh using meshio library (geometry only, no metadata)."""
    import meshio

    points = np.column_stack([mesh.p, np.zeros(mesh.n_nodes)])
    mesh_io = meshio.Mesh(points=points, cells=[("triangle", mesh.t)])
    meshio.write(filename, mesh_io, **kwargs)
    logger.info("Mesh written to %s.", filename)


def write_hdf5(mesh: MachineMesh, filepath, compression: str = "gzip") -> None:
    """Write mesh to HDF5 format."""
    import h5py

    comp_opts = {"compression": compression} if compression else {}

    with h5py.File(filepath, "w") as f:
        # Metadata
        f.attrs["mesh_format_version"] = "1.0"
        f.attrs["node_count"] = mesh.n_nodes
        f.attrs["element_count"] = mesh.n_elements
        if mesh.symmetry_sectors is not None:
            f.attrs["symmetry_sectors"] = mesh.symmetry_sectors
        if mesh.periodicity_coeff is not None:
            kappa = complex(mesh.periodicity_coeff)
            f.attrs["periodicity_coeff_real"] = kappa.real
            f.attrs["periodicity_coeff_imag"] = kappa.imag

        nodes_grp = f.create_group("nodes")
        nodes_grp.create_dataset("coords", data=mesh.p, **comp_opts)

        elements_grp = f.create_group("elements")
        elements_grp.create_dataset("connectivity", data=mesh.t, **comp_opts)

        if mesh.element_sets:
            esets_grp = f.create_group("element_sets")
            for name, elements in mesh.element_sets.items():
                set_grp = esets_grp.create_group(name)
                set_grp.create_dataset(
                    "element_ids", data=np.asarray(elements, dtype=np.int64), **comp_opts
                )

    logger.info("Mesh saved to %s (HDF5 format)", filepath)

"""
HDF5 persistence of band descriptors.

The file holds one dataset per array field and the scalar fields as file
attributes. The ``kind`` attribute records which descriptor variant was
written so :func:`load_band_hdf5` restores the same class.
"""

import logging
from dataclasses import fields

import numpy as np

from moving_band.band.descriptor import PlainBandDescriptor, SymmetricBandDescriptor

logger = logging.getLogger(__name__)

BAND_FORMAT_VERSION = "1.0"

_KINDS = {
    "plain": PlainBandDescriptor,
    "symmetric": SymmetricBandDescriptor,
}


def write_band_hdf5(band: PlainBandDescriptor, filepath, compression: str = "gzip") -> None:
    """Write a band descriptor to HDF5 format."""
    import h5py

    comp_opts = {"compression": compression} if compression else {}

    with h5py.File(filepath, "w") as f:
        f.attrs["band_format_version"] = BAND_FORMAT_VERSION
        f.attrs["kind"] = "symmetric" if band.is_symmetric else "plain"

        for name, value in band.as_dict().items():
            if isinstance(value, np.ndarray):
                f.create_dataset(name, data=value, **comp_opts)
            elif isinstance(value, complex):
                f.attrs[f"{name}_real"] = value.real
                f.attrs[f"{name}_imag"] = value.imag
            else:
                f.attrs[name] = value

    logger.info("Band descriptor saved to %s (HDF5 format)", filepath)


def load_band_hdf5(filepath) -> PlainBandDescriptor:
    """Load a band descriptor written by :func:`write_band_hdf5`."""
    import h5py

    with h5py.File(filepath, "r") as f:
        kind = f.attrs["kind"]
        if isinstance(kind, bytes):
            kind = kind.decode()
        if kind not in _KINDS:
            raise ValueError(f"Unknown band descriptor kind '{kind}' in {filepath}")
        cls = _KINDS[kind]

        values = {}
        for fld in fields(cls):
            name = fld.name
            if name in f:
                values[name] = f[name][()]
            elif name in f.attrs:
                values[name] = f.attrs[name].item() if hasattr(f.attrs[name], "item") else f.attrs[name]
            elif f"{name}_real" in f.attrs:
                values[name] = complex(f.attrs[f"{name}_real"], f.attrs[f"{name}_imag"])

    for name in ("n_elements", "n_stator", "n_rotor", "symmetry_sectors"):
        if name in values:
            values[name] = int(values[name])
    if "shift_tol" in values:
        values["shift_tol"] = float(values["shift_tol"])

    band = cls(**values)
    logger.info("Band descriptor loaded from %s (%s)", filepath, kind)
    return band

"""
Mesh I/O subpackage.

This package provides functions for reading and writing machine meshes.
"""

from moving_band.core.io.readers import load_hdf5, load_mesh, load_meshio
from moving_band.core.io.writers import write_hdf5, write_meshio

__all__ = [
    # Writers
    "write_hdf5",
    "write_meshio",
    # Readers
    "load_mesh",
    "load_meshio",
    "load_hdf5",
]

"""
Core module for moving-band.

Provides the machine mesh, its I/O and the YAML configuration.
"""

from .mesh import MachineMesh
from .config import BandConfig

__all__ = [
    "MachineMesh",
    "BandConfig",
]

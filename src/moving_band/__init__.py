"""
moving-band: air-gap moving-band descriptors for rotating machine FE models.
"""

from moving_band.core.mesh import MachineMesh
from moving_band.band import (
    ExplicitTriangulation,
    PlainBandDescriptor,
    SymmetricBandDescriptor,
    build_band_descriptor,
    initialize_band_data,
)

__version__ = "0.1.0"

__all__ = [
    "MachineMesh",
    "ExplicitTriangulation",
    "PlainBandDescriptor",
    "SymmetricBandDescriptor",
    "build_band_descriptor",
    "initialize_band_data",
]

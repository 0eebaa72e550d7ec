"""
Moving-band package.

Builds the precomputed air-gap tables that let a time-stepping solver slide
the rotor side of the mesh against the stator side without re-meshing.

Usage
-----
>>> from moving_band.band import ExplicitTriangulation, build_band_descriptor
>>> band = build_band_descriptor(mesh, stator_elements, rotor_elements,
...                              ExplicitTriangulation(t_ag))
"""

from moving_band.band.angular import angular_order, node_angles, rotation_matrix_2d
from moving_band.band.builder import (
    AutoGenerate,
    ExplicitTriangulation,
    build_band_descriptor,
    build_from_config,
    initialize_band_data,
)
from moving_band.band.classifier import NodeClassification, classify_air_gap_nodes
from moving_band.band.descriptor import (
    PlainBandDescriptor,
    SymmetricBandDescriptor,
    assemble_descriptor,
)
from moving_band.band.errors import (
    AutoTriangulationNotImplementedError,
    BandConfigurationError,
    BandError,
    InconsistentBandInputError,
)
from moving_band.band.storage import load_band_hdf5, write_band_hdf5
from moving_band.band.symmetry import SymmetryExpansion, expand_symmetry, periodicity_table

__all__ = [
    # Builder
    "AutoGenerate",
    "ExplicitTriangulation",
    "build_band_descriptor",
    "build_from_config",
    "initialize_band_data",
    # Stages
    "NodeClassification",
    "classify_air_gap_nodes",
    "node_angles",
    "angular_order",
    "rotation_matrix_2d",
    "SymmetryExpansion",
    "expand_symmetry",
    "periodicity_table",
    "assemble_descriptor",
    # Descriptors
    "PlainBandDescriptor",
    "SymmetricBandDescriptor",
    # Errors
    "BandError",
    "BandConfigurationError",
    "InconsistentBandInputError",
    "AutoTriangulationNotImplementedError",
    # Storage
    "write_band_hdf5",
    "load_band_hdf5",
]

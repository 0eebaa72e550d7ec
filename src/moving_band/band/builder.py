"""
Moving-band descriptor builder.

Runs the band stages in order:

1. node classification (stator / rotor, local indexing)
2. angular sorting of the rotor nodes
3. symmetry expansion, for sector models only
4. descriptor assembly

Usage
-----
>>> source = ExplicitTriangulation(t_ag)
>>> band = build_band_descriptor(mesh, stator_elements, rotor_elements, source)
>>> band.shift_tol
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict, Iterable, Optional, Union

import numpy as np

from moving_band.band.angular import TWO_PI, angular_order, node_angles
from moving_band.band.classifier import as_triangulation, classify_air_gap_nodes
from moving_band.band.descriptor import PlainBandDescriptor, assemble_descriptor
from moving_band.band.errors import (
    AutoTriangulationNotImplementedError,
    BandConfigurationError,
)
from moving_band.band.symmetry import DUPLICATE_RTOL, expand_symmetry, periodicity_table
from moving_band.core.mesh import MachineMesh

if TYPE_CHECKING:
    from moving_band.core.config import BandConfig

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExplicitTriangulation:
    """Air-gap triangulation given explicitly, in global node indices."""

    triangulation: np.ndarray

    def __post_init__(self):
        object.__setattr__(self, "triangulation", as_triangulation(self.triangulation))


@dataclass(frozen=True)
class AutoGenerate:
    """Request to derive the air-gap triangulation from machine dimensions."""

    dimensions: Any = field(default_factory=dict)


TriangulationSource = Union[ExplicitTriangulation, AutoGenerate]


def build_band_descriptor(
    mesh: MachineMesh,
    stator_elements: Iterable[int],
    rotor_elements: Iterable[int],
    source: TriangulationSource,
    duplicate_rtol: float = DUPLICATE_RTOL,
    symmetry_sectors: Optional[int] = None,
    periodicity_coeff: Optional[Union[float, complex]] = None,
) -> PlainBandDescriptor:
    """
    Build the moving-band descriptor of a machine mesh.

    Parameters
    ----------
    mesh : MachineMesh
        The machine mesh. Its ``symmetry_sectors`` and ``periodicity_coeff``
        decide whether virtual rotor nodes are synthesized.
    stator_elements : iterable of int
        Indices of the mesh elements fixed to the stator.
    rotor_elements : iterable of int
        Indices of the mesh elements rotating with the rotor.
    source : ExplicitTriangulation or AutoGenerate
        Where the air-gap triangulation comes from.
    duplicate_rtol : float, optional
        Relative tolerance of the sector-boundary coincidence check.
    symmetry_sectors : int, optional
        Sector count overriding ``mesh.symmetry_sectors``.
    periodicity_coeff : float or complex, optional
        Coefficient overriding ``mesh.periodicity_coeff``.

    Returns
    -------
    PlainBandDescriptor or SymmetricBandDescriptor

    Raises
    ------
    AutoTriangulationNotImplementedError
        For ``AutoGenerate`` sources.
    BandConfigurationError
        For any other kind of source.
    InconsistentBandInputError
        If the triangulation and the element sets do not fit together.
    """
    if isinstance(source, AutoGenerate):
        raise AutoTriangulationNotImplementedError(
            "Deriving the air-gap triangulation from machine dimensions is not implemented; "
            "pass an ExplicitTriangulation"
        )
    if not isinstance(source, ExplicitTriangulation):
        raise BandConfigurationError(f"Unsupported triangulation source: {type(source).__name__}")

    # validated for range only; movement is decided by the rotor set
    stator_elements = mesh.element_indices(stator_elements)
    rotor_elements = mesh.element_indices(rotor_elements)

    nodes = classify_air_gap_nodes(mesh, rotor_elements, source.triangulation)
    stator_angles = node_angles(mesh.p[nodes.stator_nodes])

    symm = mesh.symmetry_sectors if symmetry_sectors is None else int(symmetry_sectors)
    kappa = mesh.periodicity_coeff if periodicity_coeff is None else periodicity_coeff

    if symm is not None and symm > 1:
        if kappa is None:
            logger.warning(
                "Mesh declares %d symmetry sectors without a periodicity coefficient; using 1",
                symm,
            )
            kappa = 1.0

        expansion = expand_symmetry(
            mesh.p,
            nodes.stator_nodes,
            nodes.rotor_nodes,
            symm,
            duplicate_rtol=duplicate_rtol,
        )
        band = assemble_descriptor(
            nodes.ag_nodes_global,
            nodes.t_ag,
            nodes.n_stator,
            expansion.n_rotor,
            stator_angles,
            expansion.rotor_angles,
            expansion.rotor_order,
            sector_angle=TWO_PI,
            symmetry_sectors=symm,
            periodicity_coeff=kappa,
            p_ag_virt=expansion.p_ag_virt,
            virt_sectors=expansion.virt_sectors,
            virt_identities=expansion.virt_identities,
            el_table=periodicity_table(
                expansion.virt_identities, expansion.virt_sectors, kappa
            ),
        )
    else:
        rotor_angles = node_angles(mesh.p[nodes.rotor_nodes])
        band = assemble_descriptor(
            nodes.ag_nodes_global,
            nodes.t_ag,
            nodes.n_stator,
            nodes.n_rotor,
            stator_angles,
            rotor_angles,
            angular_order(rotor_angles),
            sector_angle=TWO_PI,
        )

    logger.info(
        "Band descriptor built: %d elements, %d stator nodes, %d rotor nodes, shift_tol=%.6g rad",
        band.n_elements,
        band.n_stator,
        band.n_rotor,
        band.shift_tol,
    )
    return band


def initialize_band_data(
    mesh: MachineMesh,
    stator_elements: Iterable[int],
    rotor_elements: Iterable[int],
    dims: Dict[str, Any],
    *triangulation,
) -> PlainBandDescriptor:
    """
    Positional entry point: ``(mesh, stator, rotor, dims[, t_ag])``.

    With one trailing argument it is the explicit air-gap triangulation;
    with none the triangulation would have to be derived from ``dims``.

    Raises
    ------
    AutoTriangulationNotImplementedError
        When no triangulation is given.
    BandConfigurationError
        When more than one trailing argument is given.
    """
    if len(triangulation) == 1:
        source = ExplicitTriangulation(triangulation[0])
    elif len(triangulation) == 0:
        source = AutoGenerate(dims)
    else:
        raise BandConfigurationError(
            f"Expected at most one air-gap triangulation argument, got {len(triangulation)}"
        )
    return build_band_descriptor(mesh, stator_elements, rotor_elements, source)


def build_from_config(config: "BandConfig", mesh: MachineMesh = None) -> PlainBandDescriptor:
    """
    Build the descriptor described by a :class:`BandConfig`.

    Parameters
    ----------
    config : BandConfig
        Parsed configuration.
    mesh : MachineMesh, optional
        Already loaded mesh; loaded from ``config.mesh`` when omitted.
    """
    from moving_band.core.config import TriangulationSourceType
    from moving_band.core.io import load_mesh

    if mesh is None:
        mesh = load_mesh(config.mesh.path, format=config.mesh.format)

    stator_elements = mesh.union_of_sets(config.regions.stator)
    rotor_elements = mesh.union_of_sets(config.regions.rotor)

    if config.airgap.source == TriangulationSourceType.AUTO:
        source = AutoGenerate(dict(config.airgap.dimensions))
    else:
        airgap_elements = mesh.union_of_sets(config.regions.airgap)
        source = ExplicitTriangulation(mesh.t[airgap_elements])

    logger.debug(
        "Building band from %s: %d stator, %d rotor elements",
        config.mesh.path,
        stator_elements.size,
        rotor_elements.size,
    )
    return build_band_descriptor(
        mesh,
        stator_elements,
        rotor_elements,
        source,
        duplicate_rtol=config.tolerances.duplicate_rtol,
        symmetry_sectors=config.symmetry.sectors,
        periodicity_coeff=config.symmetry.periodicity_coeff,
    )

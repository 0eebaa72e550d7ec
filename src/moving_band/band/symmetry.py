"""
Virtual rotor nodes for symmetric sector models.

When only one of ``symm`` symmetric sectors of the machine is meshed, the
rotor surface is replicated into the other sectors so the moving band can
follow the rotor past the sector boundary. The replicas are "virtual":
their field values are recovered from the base-sector solution through the
periodicity coefficient, ``value = κ**sector * value[identity]``.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Union

import numpy as np

from moving_band.band.angular import (
    TWO_PI,
    angular_order,
    node_angles,
    rotate_points,
    sector_order,
)
from moving_band.band.errors import InconsistentBandInputError

logger = logging.getLogger(__name__)

#: Default relative tolerance (w.r.t. the rotor radius) for coincident nodes
DUPLICATE_RTOL = 1e-6


@dataclass(frozen=True)
class SymmetryExpansion:
    """
    Air-gap node set extended with virtual rotor nodes.

    Attributes
    ----------
    p_ag_virt : np.ndarray
        Coordinates of the stator nodes, the real rotor nodes and the
        surviving virtual rotor nodes, shape (n_virt, 2).
    virt_sectors : np.ndarray
        Sector index of each node (0 for the modeled sector).
    virt_identities : np.ndarray
        Global index of the real node each entry is a copy of.
    n_rotor : int
        Number of rotor-side entries (real and virtual).
    rotor_angles : np.ndarray
        Angle of each rotor-side entry, in ``p_ag_virt`` order.
    rotor_order : np.ndarray
        Permutation sorting ``rotor_angles`` ascending.
    """

    p_ag_virt: np.ndarray
    virt_sectors: np.ndarray
    virt_identities: np.ndarray
    n_rotor: int
    rotor_angles: np.ndarray
    rotor_order: np.ndarray


def duplicate_positions(n_stator: int, n_rotor: int, symm: int) -> np.ndarray:
    """
    Positions of the redundant entries among the synthesized nodes.

    The synthesized list is ``[stator | rotor | copy_1 | ... | copy_{symm-1}]``
    with every copy walking its sector from the lower boundary. The first
    node of each copy lands on the last node of the previous sector, and the
    very last node closes the circle onto the first real rotor node.
    """
    n_total = n_stator + symm * n_rotor
    firsts = n_stator + n_rotor * np.arange(1, symm, dtype=np.int64)
    return np.union1d(firsts, [n_total - 1])


def expand_symmetry(
    p: np.ndarray,
    stator_nodes: np.ndarray,
    rotor_nodes: np.ndarray,
    symm: int,
    duplicate_rtol: float = DUPLICATE_RTOL,
) -> SymmetryExpansion:
    """
    Replicate the rotor air-gap nodes into the ``symm - 1`` other sectors.

    Parameters
    ----------
    p : np.ndarray
        Mesh node coordinates, shape (n_nodes, 2).
    stator_nodes : np.ndarray
        Global indices of the stator air-gap nodes.
    rotor_nodes : np.ndarray
        Global indices of the rotor air-gap nodes, in local-index order.
    symm : int
        Number of symmetric sectors, > 1.
    duplicate_rtol : float, optional
        Tolerance for the coincidence check of boundary duplicates, relative
        to the largest rotor node radius.

    Returns
    -------
    SymmetryExpansion

    Raises
    ------
    InconsistentBandInputError
        If the sector has fewer than two rotor nodes, or its rotor nodes do
        not sit on both sector boundaries, so that the copies would not join.
    """
    n_stator = stator_nodes.size
    n_rotor = rotor_nodes.size
    if symm < 2:
        raise ValueError(f"Symmetry expansion needs at least 2 sectors, got {symm}")
    if n_rotor < 2:
        raise InconsistentBandInputError(
            f"Symmetric band needs at least 2 rotor air-gap nodes, got {n_rotor}"
        )

    sector_angle = TWO_PI / symm
    rotor_p = p[rotor_nodes]
    # walk the sector from its lower boundary, which may lie below angle 0
    sorted_rotor = rotor_nodes[sector_order(node_angles(rotor_p))]
    sorted_p = p[sorted_rotor]

    # the copies only join if the first node maps onto the last one
    tol = duplicate_rtol * np.max(np.linalg.norm(rotor_p, axis=1))
    gap = np.linalg.norm(rotate_points(sorted_p[:1], sector_angle)[0] - sorted_p[-1])
    if gap > tol:
        raise InconsistentBandInputError(
            f"Rotor air-gap nodes do not span the sector boundaries: node {sorted_rotor[0]} "
            f"rotated by {sector_angle:.6g} rad misses node {sorted_rotor[-1]} by {gap:.3g}"
        )

    p_blocks = [p[stator_nodes], rotor_p]
    sector_blocks = [np.zeros(n_stator + n_rotor, dtype=np.int64)]
    for k_sector in range(1, symm):
        p_blocks.append(rotate_points(sorted_p, k_sector * sector_angle))
        sector_blocks.append(np.full(n_rotor, k_sector, dtype=np.int64))

    p_all = np.vstack(p_blocks)
    sectors_all = np.concatenate(sector_blocks)
    identities_all = np.concatenate(
        [stator_nodes, rotor_nodes, np.tile(sorted_rotor, symm - 1)]
    ).astype(np.int64)

    keep = np.ones(p_all.shape[0], dtype=bool)
    keep[duplicate_positions(n_stator, n_rotor, symm)] = False

    p_ag_virt = p_all[keep]
    virt_sectors = sectors_all[keep]
    virt_identities = identities_all[keep]

    n_rotor_virt = p_ag_virt.shape[0] - n_stator
    rotor_angles = node_angles(p_ag_virt[n_stator:])
    rotor_order = angular_order(rotor_angles)

    logger.debug(
        "Symmetry expansion: %d sectors, %d real rotor nodes -> %d rotor entries (%d removed)",
        symm,
        n_rotor,
        n_rotor_virt,
        int(np.count_nonzero(~keep)),
    )
    return SymmetryExpansion(
        p_ag_virt=p_ag_virt,
        virt_sectors=virt_sectors,
        virt_identities=virt_identities,
        n_rotor=n_rotor_virt,
        rotor_angles=rotor_angles,
        rotor_order=rotor_order,
    )


def periodicity_table(
    virt_identities: np.ndarray,
    virt_sectors: np.ndarray,
    periodicity_coeff: Optional[Union[float, complex]],
) -> np.ndarray:
    """
    Build the (3, n_virt) lookup of virtual node, identity and multiplier.

    Row 0 holds the position in ``p_ag_virt``, row 1 the global index of the
    real node it copies and row 2 ``periodicity_coeff ** sector``. The table
    is complex when the coefficient is.
    """
    kappa = np.asarray(periodicity_coeff)
    kappa = kappa.astype(np.complex128 if np.iscomplexobj(kappa) else np.float64)
    coeffs = np.power(kappa, virt_sectors)
    return np.vstack([np.arange(virt_identities.size), virt_identities, coeffs])

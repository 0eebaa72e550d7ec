"""
Moving-band descriptor records and their assembly.

A descriptor is built once per mesh configuration and read (never written)
by the rotation update of a time-stepping solver. Two variants exist:

- :class:`PlainBandDescriptor` for full cross-section models
- :class:`SymmetricBandDescriptor` for sector models, which additionally
  carries the virtual rotor nodes and the periodicity lookup table
"""

from dataclasses import dataclass, fields
from typing import Dict, List, Union

import numpy as np

from moving_band.band.angular import TWO_PI
from moving_band.band.errors import InconsistentBandInputError


def _freeze(array) -> np.ndarray:
    array = np.array(array, copy=True)
    array.flags.writeable = False
    return array


@dataclass(frozen=True)
class PlainBandDescriptor:
    """
    Lookup and ordering tables of the air-gap moving band.

    All node indices are local (``[0, n_stator + n_rotor)``), stator block
    first, unless stated otherwise.

    Attributes
    ----------
    ag_nodes_global : np.ndarray
        Local-to-global node map: ``global = ag_nodes_global[local]``.
    n_elements : int
        Number of air-gap triangles.
    n_stator : int
        Number of stator air-gap nodes.
    n_rotor : int
        Number of rotor air-gap nodes (real and virtual for sector models).
    t_ag : np.ndarray
        Air-gap triangulation in local indexing, shape (n_elements, 3).
    ag_angles_all : np.ndarray
        Angle [rad] of every node, stator block then rotor block. The rotor
        block is in local-index order, not sorted.
    shift_tol : float
        Rotor angular pitch, the rotation after which ``t_ag`` changes.
    sorted_nodes_rotor : np.ndarray
        Rotor local indices in ascending-angle order.
    original_positions_rotor : np.ndarray
        For each entry of ``inds_r``, the position of its node within
        ``sorted_nodes_rotor``.
    inds_r : np.ndarray
        Flat positions in ``t_ag.ravel()`` holding a rotor node.
    """

    ag_nodes_global: np.ndarray
    n_elements: int
    n_stator: int
    n_rotor: int
    t_ag: np.ndarray
    ag_angles_all: np.ndarray
    shift_tol: float
    sorted_nodes_rotor: np.ndarray
    original_positions_rotor: np.ndarray
    inds_r: np.ndarray

    def __post_init__(self):
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, np.ndarray):
                object.__setattr__(self, f.name, _freeze(value))

    @property
    def is_symmetric(self) -> bool:
        return False

    def as_dict(self) -> Dict[str, Union[np.ndarray, int, float]]:
        """Field name to value mapping."""
        return {f.name: getattr(self, f.name) for f in fields(self)}

    def validate(self) -> List[str]:
        """
        Check the descriptor invariants.

        Returns
        -------
        List[str]
            Description of every violated invariant; empty when consistent.
        """
        problems = []
        n_local = self.n_stator + self.n_rotor_local

        if self.t_ag.shape != (self.n_elements, 3):
            problems.append(f"t_ag has shape {self.t_ag.shape}, expected ({self.n_elements}, 3)")
        if self.ag_nodes_global.size != n_local:
            problems.append(
                f"ag_nodes_global has {self.ag_nodes_global.size} entries, expected {n_local}"
            )
        if np.unique(self.ag_nodes_global).size != self.ag_nodes_global.size:
            problems.append("ag_nodes_global classifies a node more than once")
        if self.t_ag.size and (self.t_ag.min() < 0 or self.t_ag.max() >= n_local):
            problems.append(f"t_ag has entries outside [0, {n_local})")

        expected_rotor = np.arange(self.n_stator, self.n_stator + self.n_rotor)
        if not np.array_equal(np.sort(self.sorted_nodes_rotor), expected_rotor):
            problems.append("sorted_nodes_rotor is not a permutation of the rotor block")
        else:
            sorted_angles = self.ag_angles_all[self.sorted_nodes_rotor]
            if np.any(np.diff(sorted_angles) < 0):
                problems.append("rotor angles are not ascending in sorted_nodes_rotor order")
        if np.any(self.ag_angles_all < 0) or np.any(self.ag_angles_all >= TWO_PI):
            problems.append("ag_angles_all has values outside [0, 2π)")

        if self.n_rotor and not np.isclose(self.shift_tol, TWO_PI / self.n_rotor):
            problems.append(f"shift_tol {self.shift_tol} differs from 2π/{self.n_rotor}")

        flat = self.t_ag.ravel()
        if not np.array_equal(self.inds_r, np.flatnonzero(flat >= self.n_stator)):
            problems.append("inds_r does not match the rotor corners of t_ag")
        elif self.original_positions_rotor.size != self.inds_r.size:
            problems.append("original_positions_rotor and inds_r differ in length")
        elif not np.array_equal(
            self.sorted_nodes_rotor[self.original_positions_rotor], flat[self.inds_r]
        ):
            problems.append("original_positions_rotor does not point back to t_ag")

        return problems

    @property
    def n_rotor_local(self) -> int:
        """Number of rotor nodes addressable through ``ag_nodes_global``."""
        return self.n_rotor

    def summary(self) -> str:
        lines = [
            f"{type(self).__name__}:",
            f"  air-gap elements : {self.n_elements}",
            f"  stator nodes     : {self.n_stator}",
            f"  rotor nodes      : {self.n_rotor}",
            f"  shift tolerance  : {self.shift_tol:.6g} rad ({np.degrees(self.shift_tol):.4g} deg)",
        ]
        return "\n".join(lines)


@dataclass(frozen=True)
class SymmetricBandDescriptor(PlainBandDescriptor):
    """
    Band descriptor of a sector model.

    The rotor block of the local indexing covers the real rotor nodes of the
    modeled sector followed by their virtual copies in the other sectors, so
    ``n_rotor`` counts both while ``ag_nodes_global`` only maps the real ones.

    Attributes
    ----------
    symmetry_sectors : int
        Number of symmetric sectors.
    periodicity_coeff : float or complex
        Sector-to-sector periodicity coefficient κ.
    p_ag_virt : np.ndarray
        Coordinates of all real and virtual air-gap nodes, local order.
    virt_sectors : np.ndarray
        Sector of each entry of ``p_ag_virt`` (0 for real nodes).
    virt_identities : np.ndarray
        Global index of the real node each entry of ``p_ag_virt`` copies.
    el_table : np.ndarray
        Rows: local index, identity, and ``κ ** sector``; shape (3, n_virt).
    """

    symmetry_sectors: int
    periodicity_coeff: Union[float, complex]
    p_ag_virt: np.ndarray
    virt_sectors: np.ndarray
    virt_identities: np.ndarray
    el_table: np.ndarray

    @property
    def is_symmetric(self) -> bool:
        return True

    @property
    def n_rotor_local(self) -> int:
        return self.ag_nodes_global.size - self.n_stator

    def validate(self) -> List[str]:
        problems = super().validate()
        n_virt = self.n_stator + self.n_rotor
        for name in ("p_ag_virt", "virt_sectors", "virt_identities"):
            value = getattr(self, name)
            if value.shape[0] != n_virt:
                problems.append(f"{name} must have {n_virt} entries")
        if self.el_table.shape != (3, n_virt):
            problems.append(f"el_table must have shape (3, {n_virt})")
        elif self.virt_sectors.shape[0] == n_virt:
            expected = np.power(self.periodicity_coeff, self.virt_sectors)
            if not np.allclose(self.el_table[2], expected):
                problems.append("el_table coefficients differ from κ**sector")
        if problems:
            return problems

        angles = np.sort(self.ag_angles_all[self.n_stator :])
        gaps = np.diff(np.append(angles, angles[0] + TWO_PI))
        if np.any(gaps < 1e-6 * self.shift_tol):
            problems.append("virtual rotor nodes coincide")
        if np.any(gaps > (1 + 1e-9) * TWO_PI / self.symmetry_sectors):
            problems.append("virtual rotor nodes do not cover the full circle")
        return problems

    def summary(self) -> str:
        lines = [
            super().summary(),
            f"  sectors          : {self.symmetry_sectors}",
            f"  periodicity κ    : {self.periodicity_coeff}",
            f"  real rotor nodes : {self.n_rotor_local}",
        ]
        return "\n".join(lines)


def rotor_corner_positions(t_ag: np.ndarray, n_stator: int) -> np.ndarray:
    """Flat positions in ``t_ag.ravel()`` that reference a rotor node."""
    return np.flatnonzero(t_ag.ravel() >= n_stator)


def sorted_ranks(sorted_nodes: np.ndarray, nodes: np.ndarray, n_stator: int) -> np.ndarray:
    """
    Position of each of ``nodes`` within ``sorted_nodes``.

    Built from the inverse permutation, so it costs a single pass.

    Raises
    ------
    InconsistentBandInputError
        If a node does not occur in ``sorted_nodes``.
    """
    n_rotor = sorted_nodes.size
    rank = np.full(n_rotor, -1, dtype=np.int64)
    rank[sorted_nodes - n_stator] = np.arange(n_rotor, dtype=np.int64)

    offsets = nodes - n_stator
    outside = (offsets < 0) | (offsets >= n_rotor)
    if np.any(outside):
        raise InconsistentBandInputError(
            f"Rotor corners reference nodes missing from the sorted rotor list: "
            f"{np.unique(nodes[outside]).tolist()}"
        )
    ranks = rank[offsets]
    if np.any(ranks < 0):
        raise InconsistentBandInputError("Sorted rotor list is not a permutation of the rotor block")
    return ranks


def assemble_descriptor(
    ag_nodes_global: np.ndarray,
    t_ag: np.ndarray,
    n_stator: int,
    n_rotor: int,
    stator_angles: np.ndarray,
    rotor_angles: np.ndarray,
    rotor_order: np.ndarray,
    sector_angle: float = TWO_PI,
    **symmetric_fields,
) -> PlainBandDescriptor:
    """
    Compute the remapping tables and package the descriptor.

    Parameters
    ----------
    ag_nodes_global : np.ndarray
        Local-to-global map of the real air-gap nodes.
    t_ag : np.ndarray
        Local-index air-gap triangulation.
    n_stator, n_rotor : int
        Stator node count, rotor node count (expanded for sector models).
    stator_angles, rotor_angles : np.ndarray
        Angles of the stator nodes and of the rotor block, local order.
    rotor_order : np.ndarray
        Permutation sorting ``rotor_angles`` ascending.
    sector_angle : float, optional
        Angle covered by the rotor nodes, 2π.
    **symmetric_fields
        Extra fields of :class:`SymmetricBandDescriptor`. When given, a
        symmetric descriptor is returned.

    Raises
    ------
    InconsistentBandInputError
        If there are no rotor nodes or a rotor corner cannot be ranked.
    """
    if n_rotor == 0:
        raise InconsistentBandInputError(
            "No rotor nodes in the air-gap triangulation; check the rotor element set"
        )

    sorted_nodes_rotor = np.arange(n_stator, n_stator + n_rotor, dtype=np.int64)[rotor_order]
    inds_r = rotor_corner_positions(t_ag, n_stator)
    original_positions_rotor = sorted_ranks(sorted_nodes_rotor, t_ag.ravel()[inds_r], n_stator)

    cls = SymmetricBandDescriptor if symmetric_fields else PlainBandDescriptor
    return cls(
        ag_nodes_global=ag_nodes_global,
        n_elements=t_ag.shape[0],
        n_stator=n_stator,
        n_rotor=n_rotor,
        t_ag=t_ag,
        ag_angles_all=np.concatenate([stator_angles, rotor_angles]),
        shift_tol=sector_angle / n_rotor,
        sorted_nodes_rotor=sorted_nodes_rotor,
        original_positions_rotor=original_positions_rotor,
        inds_r=inds_r,
        **symmetric_fields,
    )

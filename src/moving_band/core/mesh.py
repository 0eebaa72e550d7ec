"""
MachineMesh class module.

This module contains the array-backed mesh of a 2D electrical machine
cross-section: node coordinates, triangle connectivity, named element sets
and the optional symmetry metadata of sector models.
"""

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Union

import numpy as np

Scalar = Union[float, complex]


class MachineMesh:
    """
    Represents a triangulated 2D machine cross-section.

    Nodes and elements are stored as plain numpy arrays and addressed by
    their 0-based position, which is the "global" indexing used by the
    moving-band builder.

    Attributes
    ----------
    p : np.ndarray
        Node coordinates, shape (n_nodes, 2).
    t : np.ndarray
        Triangle connectivity, shape (n_elements, 3), global node indices.
    symmetry_sectors : int or None
        Number of symmetric sectors of the full machine when only one sector
        is modeled. ``None`` (or 1) means the full cross-section is meshed.
    periodicity_coeff : float, complex or None
        Multiplier relating a quantity in one sector to the same quantity in
        the next sector (e.g. -1 for anti-periodic models).
    element_sets : dict
        Dictionary mapping element set names to element index arrays.
    """

    def __init__(
        self,
        p: np.ndarray,
        t: np.ndarray,
        symmetry_sectors: Optional[int] = None,
        periodicity_coeff: Optional[Scalar] = None,
        element_sets: Optional[Dict[str, Iterable[int]]] = None,
    ):
        """
        Initialize a MachineMesh instance.

        Parameters
        ----------
        p : array_like
            Node coordinates, shape (n_nodes, 2) or (n_nodes, 3). A third
            column is dropped.
        t : array_like
            Triangle connectivity, shape (n_elements, 3).
        symmetry_sectors : int, optional
            Sector count of a symmetric model.
        periodicity_coeff : float or complex, optional
            Sector-to-sector periodicity coefficient.
        element_sets : dict, optional
            Initial named element sets.

        Raises
        ------
        ValueError
            If the arrays have the wrong shape, the connectivity references
            missing nodes, or ``symmetry_sectors`` is smaller than 1.
        """
        p = np.asarray(p, dtype=np.float64)
        if p.ndim != 2 or p.shape[1] not in (2, 3):
            raise ValueError(f"Node coordinates must have shape (N, 2) or (N, 3), got {p.shape}")
        self.p = np.ascontiguousarray(p[:, :2])

        t = np.asarray(t)
        if t.size == 0:
            t = t.reshape(0, 3)
        if t.ndim != 2 or t.shape[1] != 3:
            raise ValueError(f"Connectivity must have shape (E, 3), got {t.shape}")
        if not np.issubdtype(t.dtype, np.integer):
            if not np.all(np.equal(np.mod(t, 1), 0)):
                raise ValueError("Connectivity must contain integer node indices")
        self.t = t.astype(np.int64)
        if self.t.size and (self.t.min() < 0 or self.t.max() >= self.n_nodes):
            raise ValueError(
                f"Connectivity references nodes outside [0, {self.n_nodes}): "
                f"min={self.t.min()}, max={self.t.max()}"
            )

        if symmetry_sectors is not None:
            if int(symmetry_sectors) != symmetry_sectors or symmetry_sectors < 1:
                raise ValueError(f"symmetry_sectors must be an integer >= 1, got {symmetry_sectors}")
            symmetry_sectors = int(symmetry_sectors)
        self.symmetry_sectors = symmetry_sectors
        self.periodicity_coeff = periodicity_coeff

        self.element_sets: Dict[str, np.ndarray] = {}
        for name, elements in (element_sets or {}).items():
            self.add_element_set(name, elements)

    def __repr__(self):
        symm = f" symmetry_sectors={self.symmetry_sectors}" if self.is_symmetric else ""
        return f"<MachineMesh nodes={self.n_nodes} elements={self.n_elements}{symm}>"

    # =========================================================================
    # Sizes and symmetry
    # =========================================================================

    @property
    def n_nodes(self) -> int:
        return self.p.shape[0]

    @property
    def n_elements(self) -> int:
        return self.t.shape[0]

    @property
    def is_symmetric(self) -> bool:
        """True when only one of several symmetric sectors is modeled."""
        return self.symmetry_sectors is not None and self.symmetry_sectors > 1

    @property
    def sector_angle(self) -> float:
        """Angular width of the modeled sector [rad]."""
        if self.is_symmetric:
            return 2 * np.pi / self.symmetry_sectors
        return 2 * np.pi

    # =========================================================================
    # Element sets
    # =========================================================================

    def add_element_set(self, name: str, elements: Iterable[int]) -> None:
        """
        Register a named set of element indices.

        Raises
        ------
        ValueError
            If the name is taken or an index is out of range.
        """
        if name in self.element_sets:
            raise ValueError(f"Element set '{name}' already exists.")
        self.element_sets[name] = self.element_indices(elements)

    def get_element_set(self, name: str) -> np.ndarray:
        if name not in self.element_sets:
            raise ValueError(
                f"Element set '{name}' not found. Available: {sorted(self.element_sets)}"
            )
        return self.element_sets[name]

    def union_of_sets(self, names: List[str]) -> np.ndarray:
        """Sorted union of several named element sets."""
        if not names:
            return np.empty(0, dtype=np.int64)
        return np.unique(np.concatenate([self.get_element_set(n) for n in names]))

    # =========================================================================
    # Node queries
    # =========================================================================

    def element_nodes(self, elements: Iterable[int]) -> np.ndarray:
        """Sorted unique global node indices incident to the given elements."""
        elements = self.element_indices(elements)
        return np.unique(self.t[elements])

    def coords_of(self, nodes: Iterable[int]) -> np.ndarray:
        return self.p[np.asarray(nodes, dtype=np.int64)]

    def element_indices(self, elements: Iterable[int]) -> np.ndarray:
        elements = np.asarray(list(elements) if not isinstance(elements, np.ndarray) else elements)
        if elements.size and not np.issubdtype(elements.dtype, np.integer):
            if not np.all(np.equal(np.mod(elements, 1), 0)):
                raise ValueError("Element indices must be integers")
        elements = elements.astype(np.int64).ravel()
        if elements.size and (elements.min() < 0 or elements.max() >= self.n_elements):
            raise ValueError(
                f"Element indices outside [0, {self.n_elements}): "
                f"min={elements.min()}, max={elements.max()}"
            )
        return elements

"""
Air-gap node classification.

Splits the nodes of the air-gap triangulation into stator-fixed and
rotor-attached nodes, and re-expresses the triangulation in the local
indexing ``[stator block | rotor block]`` used by the band descriptor.
"""

import logging
from dataclasses import dataclass
from typing import Iterable

import numpy as np

from moving_band.band.errors import InconsistentBandInputError
from moving_band.core.mesh import MachineMesh

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NodeClassification:
    """
    Result of the node classification stage.

    Attributes
    ----------
    stator_nodes : np.ndarray
        Global indices of the air-gap nodes not attached to the rotor.
    rotor_nodes : np.ndarray
        Global indices of the air-gap nodes attached to the rotor.
    ag_nodes_global : np.ndarray
        Local-to-global map, ``stator_nodes`` followed by ``rotor_nodes``.
    t_ag : np.ndarray
        Air-gap triangulation in local indexing, shape (n_elements, 3).
    """

    stator_nodes: np.ndarray
    rotor_nodes: np.ndarray
    ag_nodes_global: np.ndarray
    t_ag: np.ndarray

    @property
    def n_stator(self) -> int:
        return self.stator_nodes.size

    @property
    def n_rotor(self) -> int:
        return self.rotor_nodes.size


def as_triangulation(t_ag) -> np.ndarray:
    """Coerce an air-gap triangulation to an (n, 3) int64 array."""
    t_ag = np.asarray(t_ag)
    if t_ag.ndim != 2 or t_ag.shape[1] != 3:
        raise InconsistentBandInputError(
            f"Air-gap triangulation must have shape (n, 3), got {t_ag.shape}"
        )
    if t_ag.shape[0] == 0:
        raise InconsistentBandInputError("Air-gap triangulation is empty")
    if not np.issubdtype(t_ag.dtype, np.integer):
        if not np.all(np.equal(np.mod(t_ag, 1), 0)):
            raise InconsistentBandInputError("Air-gap triangulation must contain integer indices")
    return t_ag.astype(np.int64)


def global_to_local(ag_nodes_global: np.ndarray, t_global: np.ndarray, n_nodes: int) -> np.ndarray:
    """
    Map a global-index triangulation to local indices.

    Uses a direct lookup table of size ``n_nodes`` so the cost stays linear.

    Raises
    ------
    InconsistentBandInputError
        If a corner references a node missing from ``ag_nodes_global``.
    """
    lookup = np.full(n_nodes, -1, dtype=np.int64)
    lookup[ag_nodes_global] = np.arange(ag_nodes_global.size, dtype=np.int64)
    t_local = lookup[t_global]
    missing = t_local < 0
    if np.any(missing):
        raise InconsistentBandInputError(
            f"Air-gap triangulation references unclassified nodes: "
            f"{np.unique(t_global[missing]).tolist()}"
        )
    return t_local


def classify_air_gap_nodes(
    mesh: MachineMesh, rotor_elements: Iterable[int], t_ag_global
) -> NodeClassification:
    """
    Classify the air-gap nodes as stator or rotor nodes.

    Rotor air-gap nodes are the air-gap nodes incident to any rotor element;
    every other air-gap node is a stator node. Both blocks are sorted by
    global index.

    Parameters
    ----------
    mesh : MachineMesh
        The machine mesh.
    rotor_elements : iterable of int
        Indices of the mesh elements that rotate with the rotor.
    t_ag_global : array_like
        Air-gap triangulation using global node indices, shape (n, 3).

    Returns
    -------
    NodeClassification

    Raises
    ------
    InconsistentBandInputError
        If the triangulation is malformed or references nodes outside the mesh.
    """
    t_ag_global = as_triangulation(t_ag_global)
    if t_ag_global.min() < 0 or t_ag_global.max() >= mesh.n_nodes:
        raise InconsistentBandInputError(
            f"Air-gap triangulation references nodes outside [0, {mesh.n_nodes})"
        )

    rotor_nodes_all = mesh.element_nodes(rotor_elements)
    ag_nodes_all = np.unique(t_ag_global)

    rotor_nodes = np.intersect1d(ag_nodes_all, rotor_nodes_all)
    stator_nodes = np.setdiff1d(ag_nodes_all, rotor_nodes_all)
    ag_nodes_global = np.concatenate([stator_nodes, rotor_nodes])

    t_ag = global_to_local(ag_nodes_global, t_ag_global, mesh.n_nodes)

    logger.debug(
        "Classified %d air-gap nodes: %d stator, %d rotor",
        ag_nodes_global.size,
        stator_nodes.size,
        rotor_nodes.size,
    )
    return NodeClassification(
        stator_nodes=stator_nodes,
        rotor_nodes=rotor_nodes,
        ag_nodes_global=ag_nodes_global,
        t_ag=t_ag,
    )

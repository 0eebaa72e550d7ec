"""
Shared fixtures: small annular machine meshes with an air-gap band.

Node layout of :func:`make_annulus_mesh`:

- node 0: rotor center
- rotor air-gap nodes on radius 1
- stator air-gap nodes on radius 2
- outer stator nodes on radius 3 (same angles as the stator air-gap nodes)

Element sets: "rotor" (fan from the center), "airgap" (band between radius
1 and 2) and "stator" (ring between radius 2 and 3).
"""

import matplotlib

matplotlib.use("Agg")

import numpy as np
import pytest

from moving_band.core.mesh import MachineMesh


def _ring(radius, angles):
    angles = np.asarray(angles, dtype=float)
    return np.column_stack([radius * np.cos(angles), radius * np.sin(angles)])


def _merge_band(inner, inner_angles, outer, outer_angles, closed):
    """Triangulate the strip between two angle-sorted node rows."""
    inner, outer = list(inner), list(outer)
    a_in, a_out = list(inner_angles), list(outer_angles)
    if closed:
        inner.append(inner[0])
        a_in.append(a_in[0] + 2 * np.pi)
        outer.append(outer[0])
        a_out.append(a_out[0] + 2 * np.pi)

    tris = []
    i = j = 0
    while i < len(inner) - 1 or j < len(outer) - 1:
        if j == len(outer) - 1 or (i < len(inner) - 1 and a_in[i + 1] <= a_out[j + 1]):
            tris.append((inner[i], inner[i + 1], outer[j]))
            i += 1
        else:
            tris.append((inner[i], outer[j + 1], outer[j]))
            j += 1
    return tris


def make_annulus_mesh(rotor_angles, stator_angles, closed=True, **mesh_kwargs):
    """
    Build an annular machine mesh.

    ``rotor_angles`` and ``stator_angles`` must be ascending. With
    ``closed=False`` the mesh is an open sector.
    """
    n_r, n_s = len(rotor_angles), len(stator_angles)
    rotor = np.arange(1, 1 + n_r)
    stator = np.arange(1 + n_r, 1 + n_r + n_s)
    outer = np.arange(1 + n_r + n_s, 1 + n_r + 2 * n_s)

    p = np.vstack(
        [
            [[0.0, 0.0]],
            _ring(1.0, rotor_angles),
            _ring(2.0, stator_angles),
            _ring(3.0, stator_angles),
        ]
    )

    rotor_pairs = list(zip(rotor[:-1], rotor[1:]))
    if closed:
        rotor_pairs.append((rotor[-1], rotor[0]))
    rotor_tris = [(0, a, b) for a, b in rotor_pairs]
    airgap_tris = _merge_band(rotor, rotor_angles, stator, stator_angles, closed)
    stator_tris = _merge_band(stator, stator_angles, outer, stator_angles, closed)

    t = np.array(rotor_tris + airgap_tris + stator_tris, dtype=np.int64)
    n1, n2 = len(rotor_tris), len(rotor_tris) + len(airgap_tris)
    element_sets = {
        "rotor": np.arange(0, n1),
        "airgap": np.arange(n1, n2),
        "stator": np.arange(n2, len(t)),
    }
    return MachineMesh(p, t, element_sets=element_sets, **mesh_kwargs)


@pytest.fixture
def toy_mesh():
    """Full machine: 4 rotor nodes at π/4 + kπ/2, 4 stator nodes at kπ/2."""
    return make_annulus_mesh(
        rotor_angles=np.pi / 4 + np.arange(4) * np.pi / 2,
        stator_angles=np.arange(4) * np.pi / 2,
    )


@pytest.fixture
def quarter_mesh():
    """Quarter sector [0, π/2] with 3 rotor and 3 stator nodes, κ = i."""
    angles = np.array([0.0, np.pi / 4, np.pi / 2])
    return make_annulus_mesh(
        rotor_angles=angles,
        stator_angles=angles,
        closed=False,
        symmetry_sectors=4,
        periodicity_coeff=1j,
    )


@pytest.fixture
def annulus_factory():
    return make_annulus_mesh

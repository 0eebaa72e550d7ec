"""
Angular coordinates and rotation helpers for air-gap nodes.
"""

import numpy as np

TWO_PI = 2 * np.pi


def node_angles(coords: np.ndarray) -> np.ndarray:
    """
    Angular coordinate of each point, normalized to ``[0, 2π)``.

    Parameters
    ----------
    coords : np.ndarray
        Point coordinates, shape (n, 2).

    Returns
    -------
    angles : np.ndarray
        Angles [rad], shape (n,).
    """
    coords = np.asarray(coords, dtype=np.float64).reshape(-1, 2)
    angles = np.arctan2(coords[:, 1], coords[:, 0])
    angles = np.where(angles < 0, angles + TWO_PI, angles)
    # tiny negative angles round up to exactly 2π
    angles[angles >= TWO_PI] = 0.0
    return angles


def angular_order(angles: np.ndarray) -> np.ndarray:
    """
    Permutation sorting ``angles`` in ascending order.

    Equal angles keep their input order (stable sort), so the result is
    repeatable for identical input.
    """
    return np.argsort(np.asarray(angles), kind="stable")


def sector_order(angles: np.ndarray) -> np.ndarray:
    """
    Permutation walking the nodes of one sector counter-clockwise.

    The walk starts right after the largest angular gap, so a sector that
    straddles the positive x-axis (e.g. ``[-π/4, π/4]``) starts at its own
    lower boundary instead of at angle 0.

    Parameters
    ----------
    angles : np.ndarray
        Angles in ``[0, 2π)``.

    Returns
    -------
    order : np.ndarray
        Indices into ``angles``.
    """
    order = angular_order(angles)
    if order.size < 2:
        return order
    sorted_angles = np.asarray(angles)[order]
    gaps = np.diff(np.append(sorted_angles, sorted_angles[0] + TWO_PI))
    start = (int(np.argmax(gaps)) + 1) % order.size
    return np.roll(order, -start)


def rotation_matrix_2d(angle: float) -> np.ndarray:
    """
    Get the 2x2 counter-clockwise rotation matrix.

    Notes
    -----
    R(θ) = [[cos(θ), -sin(θ)],
            [sin(θ),  cos(θ)]]
    """
    c = np.cos(angle)
    s = np.sin(angle)
    return np.array([[c, -s], [s, c]])


def rotate_points(coords: np.ndarray, angle: float) -> np.ndarray:
    """Rotate (n, 2) points about the origin by ``angle`` [rad]."""
    R = rotation_matrix_2d(angle)
    # For (N, 2) row vectors V: V @ R.T rotates each row
    return np.asarray(coords, dtype=np.float64) @ R.T

"""
Plotting helpers for band descriptors.
"""

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.tri import Triangulation

from moving_band.band.descriptor import PlainBandDescriptor


def plot_band(band: PlainBandDescriptor, p: np.ndarray, ax=None) -> tuple[plt.Figure, plt.Axes]:
    """
    Plot the air-gap triangulation of a band descriptor.

    Parameters
    ----------
    band : PlainBandDescriptor
        Descriptor to draw.
    p : np.ndarray
        Global node coordinates of the mesh, shape (n_nodes, 2).
    ax : plt.Axes, optional
        Axes to draw into; a new figure is created when omitted.

    Returns
    -------
    fig : plt.Figure
        The figure.
    ax : plt.Axes
        The axes.
    """
    if ax is None:
        fig, ax = plt.subplots(figsize=(7, 7))
    else:
        fig = ax.figure

    local_p = np.asarray(p)[band.ag_nodes_global]
    tri = Triangulation(local_p[:, 0], local_p[:, 1], band.t_ag)
    ax.triplot(tri, color="0.6", linewidth=0.6)

    stator = local_p[: band.n_stator]
    rotor = local_p[band.n_stator :]
    ax.plot(stator[:, 0], stator[:, 1], "s", markersize=3, label="stator nodes")
    ax.plot(rotor[:, 0], rotor[:, 1], "o", markersize=3, label="rotor nodes")

    if band.is_symmetric:
        virtual = band.p_ag_virt[band.virt_sectors > 0]
        ax.plot(virtual[:, 0], virtual[:, 1], ".", markersize=2, label="virtual rotor nodes")

    ax.set_aspect("equal")
    ax.set_title(
        f"Air-gap band: {band.n_elements} elements, shift {np.degrees(band.shift_tol):.3g}°"
    )
    ax.legend(loc="upper right")
    plt.tight_layout()
    return fig, ax

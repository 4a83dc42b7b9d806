# src/phasefield/plot/vectorfield.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping

import matplotlib.pyplot as plt
import numpy as np

from phasefield.analysis.fixed_points import FixedPointResult, locate
from phasefield.analysis.linearize import Stability
from phasefield.runtime.config import LocatorConfig, TrajectoryConfig
from phasefield.runtime.system import System
from phasefield.runtime.trajectory import sample_trajectories

__all__ = ["eval_vectorfield", "phase_portrait", "PortraitHandle", "STABILITY_COLORS"]

STABILITY_COLORS: dict[Stability, str] = {
    Stability.SADDLE: "tab:orange",
    Stability.STABLE_SPIRAL: "tab:blue",
    Stability.UNSTABLE_SPIRAL: "tab:red",
    Stability.CENTER: "tab:green",
    Stability.STABLE_NODE: "tab:cyan",
    Stability.UNSTABLE_NODE: "tab:pink",
    Stability.DEGENERATE: "tab:gray",
    Stability.INDETERMINATE: "black",
}


def _coerce_grid(grid: tuple[int, int] | int) -> tuple[int, int]:
    if isinstance(grid, int):
        return (int(grid), int(grid))
    gx, gy = grid
    return (int(gx), int(gy))


def _get_ax(ax=None):
    if ax is not None:
        return ax
    _fig, created_ax = plt.subplots(figsize=(6, 6), layout="constrained")
    return created_ax


def eval_vectorfield(
    system: System,
    *,
    grid: tuple[int, int] | int = (20, 20),
    normalize: bool = False,
) -> tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """
    Evaluate the field on a grid over the system domain and return X, Y, U, V.

    Undefined samples are NaN in U and V.
    """
    gx, gy = _coerce_grid(grid)
    d = system.domain
    xs = np.linspace(d.x_min, d.x_max, gx)
    ys = np.linspace(d.y_min, d.y_max, gy)
    X, Y = np.meshgrid(xs, ys, indexing="xy")
    U, V, ok = system.field().evaluate_array(X, Y)
    U = np.where(ok, U, np.nan)
    V = np.where(ok, V, np.nan)
    if normalize:
        norm = np.hypot(U, V)
        mask = ok & (norm > 0)
        U[mask] /= norm[mask]
        V[mask] /= norm[mask]
    return X, Y, U, V


@dataclass
class PortraitHandle:
    ax: Any
    system: System
    X: np.ndarray
    Y: np.ndarray
    U: np.ndarray
    V: np.ndarray
    quiver: Any | None
    stream: Any | None
    traj_lines: list[Any] = field(default_factory=list)
    fixed_points: FixedPointResult | None = None
    fp_artists: list[Any] = field(default_factory=list)

    def clear_trajectories(self) -> None:
        for line in self.traj_lines:
            line.remove()
        self.traj_lines.clear()


def phase_portrait(
    system: System,
    *,
    ax=None,
    grid: tuple[int, int] | int = (20, 20),
    normalize: bool = True,
    mode: str = "quiver",
    color: str | None = None,
    trajectories: bool | TrajectoryConfig = False,
    trajectory_style: Mapping[str, Any] | None = None,
    fixed_points: bool | LocatorConfig = True,
    annotate: bool = True,
) -> PortraitHandle:
    """
    Draw the field of ``system`` with optional trajectories and fixed points.

    Args:
        mode: "quiver" for arrows or "stream" for matplotlib.streamplot()
        trajectories: True (default TrajectoryConfig) or a TrajectoryConfig to
            draw Euler trajectories from a grid of starting points
        fixed_points: True (default LocatorConfig) or a LocatorConfig; each
            point is marked with a color per stability label
        annotate: write the stability label next to each fixed point
    """
    mode_norm = str(mode or "quiver").lower()
    if mode_norm in ("stream", "streamplot"):
        mode_norm = "stream"
    elif mode_norm != "quiver":
        raise ValueError("mode must be 'quiver' or 'stream'.")

    X, Y, U, V = eval_vectorfield(system, grid=grid, normalize=normalize)
    plot_ax = _get_ax(ax)
    color_kw = {} if color is None else {"color": color}

    quiver = None
    stream = None
    if mode_norm == "quiver":
        quiver = plot_ax.quiver(X, Y, U, V, pivot="mid", angles="xy", **color_kw)
    else:
        stream = plot_ax.streamplot(X, Y, np.nan_to_num(U), np.nan_to_num(V), **color_kw)

    d = system.domain
    plot_ax.set_xlim(d.x_min, d.x_max)
    plot_ax.set_ylim(d.y_min, d.y_max)
    plot_ax.set_xlabel("x")
    plot_ax.set_ylabel("y")
    if system.label:
        plot_ax.set_title(system.label)

    handle = PortraitHandle(plot_ax, system, X, Y, U, V, quiver, stream)

    if trajectories:
        cfg = trajectories if isinstance(trajectories, TrajectoryConfig) else TrajectoryConfig(n=10, steps=400)
        style = {"lw": 0.8, "alpha": 0.6}
        if trajectory_style:
            style.update(dict(trajectory_style))
        for traj in sample_trajectories(system, cfg):
            if not traj.ok:
                continue
            (line,) = plot_ax.plot(traj.x, traj.y, **style)
            handle.traj_lines.append(line)

    if fixed_points:
        cfg = fixed_points if isinstance(fixed_points, LocatorConfig) else None
        result = locate(system, cfg)
        handle.fixed_points = result
        for fp in result.points:
            c = STABILITY_COLORS.get(fp.stability, "black")
            art = plot_ax.scatter([fp.x], [fp.y], s=50, color=c, edgecolors="white", zorder=5)
            handle.fp_artists.append(art)
            if annotate:
                txt = plot_ax.annotate(
                    str(fp.stability),
                    (fp.x, fp.y),
                    xytext=(6, 6),
                    textcoords="offset points",
                    fontsize=8,
                    color=c,
                )
                handle.fp_artists.append(txt)
    return handle

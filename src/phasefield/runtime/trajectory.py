# src/phasefield/runtime/trajectory.py
from __future__ import annotations
from dataclasses import replace
from typing import Generator, Iterator, List, Tuple
import math
import warnings

import numpy as np

from phasefield.steppers import get_stepper
from .config import TrajectoryConfig
from .results import Trajectory
from .system import System, VectorField

__all__ = ["integrate", "trajectory", "sample_trajectories"]


def _as_field(system_or_field: System | VectorField) -> VectorField:
    if isinstance(system_or_field, VectorField):
        return system_or_field
    if isinstance(system_or_field, System):
        return system_or_field.field()
    raise TypeError("expected a System or VectorField.")


def _walk(
    field: VectorField,
    x: float,
    y: float,
    n_steps: int,
    dt: float,
    stepper: str,
    stop_outside: bool,
) -> Generator[Tuple[float, float, float, float], None, str]:
    """Yield (x_next, y_next, vx, vy) per step; return the stop reason."""
    spec = get_stepper(stepper)
    domain = field.domain
    for _ in range(int(n_steps)):
        vx, vy = field.evaluate(x, y)
        if not (math.isfinite(vx) and math.isfinite(vy)):
            return "non_finite"
        ddx, ddy = spec.increment(vx, vy, dt)
        x += ddx
        y += ddy
        yield x, y, vx, vy
        if stop_outside and not domain.contains(x, y):
            return "left_domain"
    return "steps"


def integrate(
    system_or_field: System | VectorField,
    x0: float,
    y0: float,
    *,
    n_steps: int,
    dt: float,
    stepper: str = "euler",
    stop_outside: bool = True,
) -> Iterator[Tuple[float, float]]:
    """
    Lazily yield positions starting at (x0, y0).

    Each step evaluates the field at the current point; a non-finite value
    ends the sequence before stepping. With ``stop_outside`` the first
    position outside the domain is yielded and then the sequence ends.
    At most ``n_steps + 1`` positions are produced.
    """
    field = _as_field(system_or_field)
    x, y = float(x0), float(y0)
    yield x, y
    for x, y, _, _ in _walk(field, x, y, n_steps, dt, stepper, stop_outside):
        yield x, y


def trajectory(
    system_or_field: System | VectorField,
    x0: float,
    y0: float,
    *,
    n_steps: int,
    dt: float,
    stepper: str = "euler",
    stop_outside: bool = True,
) -> Trajectory:
    """Integrate eagerly and return a :class:`Trajectory` with its stop reason."""
    field = _as_field(system_or_field)
    pts = [(float(x0), float(y0))]
    velocity = (0.0, 0.0)
    walker = _walk(field, float(x0), float(y0), n_steps, dt, stepper, stop_outside)
    while True:
        try:
            x, y, vx, vy = next(walker)
        except StopIteration as done:
            stop = done.value
            break
        pts.append((x, y))
        velocity = (vx, vy)
    return Trajectory(
        points=np.asarray(pts, dtype=np.float64).reshape(-1, 2),
        velocity=velocity,
        n_evaluated=len(pts) - 1,
        stop=stop,
    )


def sample_trajectories(
    system_or_field: System | VectorField,
    config: TrajectoryConfig | None = None,
    **overrides,
) -> List[Trajectory]:
    """
    Integrate from every node of an n x n grid over the domain (edges included).

    Keyword overrides (n, steps, dt, stepper) replace fields of ``config``.
    Issues a RuntimeWarning when no trajectory evaluated successfully.
    """
    cfg = config or TrajectoryConfig()
    if overrides:
        cfg = replace(cfg, **overrides)
    field = _as_field(system_or_field)
    xs, ys = field.domain.grid_axes(cfg.n)
    out: List[Trajectory] = []
    for x0 in xs:
        for y0 in ys:
            out.append(
                trajectory(field, x0, y0, n_steps=cfg.steps, dt=cfg.dt, stepper=cfg.stepper)
            )
    if not any(t.ok for t in out):
        warnings.warn(
            "No valid trajectories. Check your equations "
            f"(dx={field.system.dx.source!r}, dy={field.system.dy.source!r}).",
            RuntimeWarning,
            stacklevel=2,
        )
    return out

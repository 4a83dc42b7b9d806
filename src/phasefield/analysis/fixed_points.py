# src/phasefield/analysis/fixed_points.py
"""
Fixed-point search for planar systems.

The field is sampled on a grid, the smallest-magnitude nodes become Newton
seeds, converged points inside the domain are merged by distance, and each
survivor is linearized and classified. Every bound (grid size, candidate
cap, iteration cap) lives in LocatorConfig.
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Iterator, List, Tuple
import math

import numpy as np

from phasefield.errors import ExpressionParseError
from phasefield.runtime.config import LocatorConfig
from phasefield.runtime.system import System, VectorField
from .linearize import Jacobian, Stability, classify, numeric_jacobian

__all__ = [
    "FixedPoint",
    "FixedPointResult",
    "Candidate",
    "sample_candidates",
    "newton_refine",
    "locate",
    "locate_fixed_points",
    "NOTE_FLAT",
    "NOTE_UNDEFINED",
    "NOTE_NO_CANDIDATES",
    "NOTE_NONE_FOUND",
    "ERROR_BOUNDS",
]

NOTE_FLAT = "Vector field is near zero across the bounds; fixed points are not isolated."
NOTE_UNDEFINED = "Vector field is undefined across the bounds."
NOTE_NO_CANDIDATES = "No candidate fixed points found in the current bounds."
NOTE_NONE_FOUND = "No fixed points found in the current bounds."
ERROR_BOUNDS = "Invalid bounds."


@dataclass(frozen=True)
class FixedPoint:
    x: float
    y: float
    jacobian: Jacobian | None
    eigenvalues: Tuple[complex, complex] | None
    stability: Stability

    @property
    def position(self) -> Tuple[float, float]:
        return (self.x, self.y)


@dataclass(frozen=True)
class FixedPointResult:
    """
    Outcome of one analysis request.

    ``error`` is set for unusable input (formula or bounds); ``note`` carries
    non-fatal diagnostics. Both may be None.
    """
    points: Tuple[FixedPoint, ...]
    note: str | None = None
    error: str | None = None
    grid_size: int = 0
    candidate_count: int = 0

    @property
    def ok(self) -> bool:
        return self.error is None

    def __len__(self) -> int:
        return len(self.points)

    def __iter__(self) -> Iterator[FixedPoint]:
        return iter(self.points)


@dataclass(frozen=True)
class Candidate:
    x: float
    y: float
    mag: float


def sample_candidates(field: VectorField, config: LocatorConfig) -> Tuple[List[Candidate], float, int]:
    """
    Sample |F| on the grid and return (candidates, max_mag, n_finite).

    Candidates are the finite nodes with magnitude at or below the
    threshold, sorted ascending and capped at config.max_candidates.
    The candidate list is empty when the field is flat or undefined everywhere.
    """
    n = config.grid_size
    xs, ys = field.domain.grid_axes(n)
    # i-major node order (x outer, y inner)
    X, Y = np.meshgrid(xs, ys, indexing="ij")
    X = X.ravel()
    Y = Y.ravel()
    U, V, ok = field.evaluate_array(X, Y)
    n_finite = int(np.count_nonzero(ok))
    if n_finite == 0:
        return [], 0.0, 0
    X, Y = X[ok], Y[ok]
    mag = np.hypot(U[ok], V[ok])
    max_mag = float(mag.max())
    if max_mag < config.flat_field_tol:
        return [], max_mag, n_finite

    threshold = max(config.candidate_floor, max_mag * config.candidate_frac)
    keep = np.flatnonzero(mag <= threshold)
    order = keep[np.argsort(mag[keep], kind="stable")][: config.max_candidates]
    return [Candidate(float(X[i]), float(Y[i]), float(mag[i])) for i in order], max_mag, n_finite


def newton_refine(
    field: VectorField,
    x: float,
    y: float,
    *,
    tol: float,
    h: float,
    config: LocatorConfig,
) -> Tuple[float, float] | None:
    """
    Newton-Raphson from (x, y); None on failure.

    Fails on a non-finite field or Jacobian, a near-singular Jacobian, an
    iterate more than one domain span outside the bounds, or when the
    iteration cap is reached without |F| < tol.
    """
    domain = field.domain
    span = domain.span
    max_step = span * config.max_step_frac
    for _ in range(config.max_newton_steps):
        fx, fy = field.evaluate(x, y)
        if not (math.isfinite(fx) and math.isfinite(fy)):
            return None
        if math.hypot(fx, fy) < tol:
            return x, y
        jac = numeric_jacobian(field, x, y, h)
        if jac is None:
            return None
        det = jac.det
        if not math.isfinite(det) or abs(det) < config.singular_det:
            return None
        sx, sy = jac.solve(-fx, -fy)
        if not (math.isfinite(sx) and math.isfinite(sy)):
            return None
        size = math.hypot(sx, sy)
        if size > max_step:
            scale = max_step / size
            sx *= scale
            sy *= scale
        x += sx
        y += sy
        if not domain.contains_expanded(x, y, span):
            return None
    return None


def locate(system: System | VectorField, config: LocatorConfig | None = None) -> FixedPointResult:
    """Find and classify fixed points of ``system`` inside its domain."""
    cfg = config or LocatorConfig()
    field = system if isinstance(system, VectorField) else system.field()
    domain = field.domain

    if not domain.is_valid:
        return FixedPointResult(points=(), error=ERROR_BOUNDS, grid_size=cfg.grid_size)

    candidates, max_mag, n_finite = sample_candidates(field, cfg)
    if not candidates:
        if n_finite == 0:
            note = NOTE_UNDEFINED
        elif max_mag < cfg.flat_field_tol:
            note = NOTE_FLAT
        else:
            note = NOTE_NO_CANDIDATES
        return FixedPointResult(points=(), note=note, grid_size=cfg.grid_size)

    span = domain.span
    merge_tol = max(cfg.merge_min, span * cfg.merge_frac)
    h = max(cfg.h_min, span * cfg.h_frac)
    tol = min(max(max_mag * cfg.tol_frac, cfg.tol_min), cfg.tol_max)

    points: List[FixedPoint] = []
    for cand in candidates:
        refined = newton_refine(field, cand.x, cand.y, tol=tol, h=h, config=cfg)
        if refined is None:
            continue
        rx, ry = refined
        if not domain.contains(rx, ry):
            continue
        if any(math.hypot(p.x - rx, p.y - ry) <= merge_tol for p in points):
            continue
        jac = numeric_jacobian(field, rx, ry, h)
        result = classify(jac, eps=cfg.classify_eps)
        points.append(FixedPoint(rx, ry, jac, result.eigenvalues, result.label))

    return FixedPointResult(
        points=tuple(points),
        note=None if points else NOTE_NONE_FOUND,
        grid_size=cfg.grid_size,
        candidate_count=len(candidates),
    )


def locate_fixed_points(
    dx: str,
    dy: str,
    x_min: float,
    x_max: float,
    y_min: float,
    y_max: float,
    a: float = 0.0,
    b: float = 0.0,
    *,
    config: LocatorConfig | None = None,
) -> FixedPointResult:
    """
    Text-level entry point: parse both formulas, then :func:`locate`.

    Parse failures are reported in ``error`` instead of being raised.
    """
    cfg = config or LocatorConfig()
    try:
        system = System.from_formulas(dx, dy, a=a, b=b, bounds=(x_min, x_max, y_min, y_max))
    except ExpressionParseError as exc:
        return FixedPointResult(points=(), error=str(exc), grid_size=cfg.grid_size)
    return locate(system, cfg)

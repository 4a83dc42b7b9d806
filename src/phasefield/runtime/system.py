# src/phasefield/runtime/system.py
from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Tuple
import math

import numpy as np

from phasefield.dsl.expr import Expression, parse
from .evaluator import Evaluator, EvalCache
from .guards import finite_mask

__all__ = ["Domain", "System", "VectorField", "DEFAULT_DOMAIN"]


@dataclass(frozen=True)
class Domain:
    """Axis-aligned rectangle [x_min, x_max] x [y_min, y_max]."""
    x_min: float
    x_max: float
    y_min: float
    y_max: float

    @property
    def width(self) -> float:
        return self.x_max - self.x_min

    @property
    def height(self) -> float:
        return self.y_max - self.y_min

    @property
    def span(self) -> float:
        """Larger of width and height; scales numerical tolerances."""
        return max(self.width, self.height)

    @property
    def is_valid(self) -> bool:
        w, h = self.width, self.height
        return math.isfinite(w) and math.isfinite(h) and w > 0.0 and h > 0.0

    def contains(self, x: float, y: float) -> bool:
        return self.x_min <= x <= self.x_max and self.y_min <= y <= self.y_max

    def contains_array(self, x: np.ndarray, y: np.ndarray) -> np.ndarray:
        return (x >= self.x_min) & (x <= self.x_max) & (y >= self.y_min) & (y <= self.y_max)

    def contains_expanded(self, x: float, y: float, margin: float) -> bool:
        return (
            self.x_min - margin <= x <= self.x_max + margin
            and self.y_min - margin <= y <= self.y_max + margin
        )

    def grid_axes(self, n: int) -> Tuple[np.ndarray, np.ndarray]:
        """n evenly spaced coordinates per axis, edges included."""
        t = np.arange(n, dtype=np.float64) / (n - 1)
        return self.x_min + t * self.width, self.y_min + t * self.height

    def uniform(self, rng: np.random.Generator, n: int) -> Tuple[np.ndarray, np.ndarray]:
        xs = self.x_min + rng.random(n) * self.width
        ys = self.y_min + rng.random(n) * self.height
        return xs, ys

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.x_min, self.x_max, self.y_min, self.y_max)


DEFAULT_DOMAIN = Domain(-5.0, 5.0, -5.0, 5.0)


@dataclass(frozen=True)
class System:
    """
    Planar autonomous system dx/dt = f(x, y, a, b), dy/dt = g(x, y, a, b).

    Immutable; derive variants with ``with_params`` / ``with_domain``.
    """
    dx: Expression
    dy: Expression
    a: float = 0.0
    b: float = 0.0
    domain: Domain = DEFAULT_DOMAIN
    label: str | None = None

    @classmethod
    def from_formulas(
        cls,
        dx: str,
        dy: str,
        *,
        a: float = 0.0,
        b: float = 0.0,
        bounds: Tuple[float, float, float, float] | Domain | None = None,
        label: str | None = None,
    ) -> "System":
        """Parse both formulas; raises ExpressionParseError on the first bad one."""
        if bounds is None:
            domain = DEFAULT_DOMAIN
        elif isinstance(bounds, Domain):
            domain = bounds
        else:
            domain = Domain(*(float(v) for v in bounds))
        return cls(parse(dx), parse(dy), float(a), float(b), domain, label)

    def with_params(self, *, a: float | None = None, b: float | None = None) -> "System":
        return replace(
            self,
            a=self.a if a is None else float(a),
            b=self.b if b is None else float(b),
        )

    def with_domain(self, domain: Domain | Tuple[float, float, float, float]) -> "System":
        if not isinstance(domain, Domain):
            domain = Domain(*(float(v) for v in domain))
        return replace(self, domain=domain)

    def field(self, *, jit: bool = False, cache: EvalCache | None = None) -> "VectorField":
        return VectorField(self, jit=jit, cache=cache)


class VectorField:
    """
    Evaluates F(x, y) = (f, g) for a System.

    Scalar calls return ``None`` for an undefined sample so that failures stay
    observable; ``evaluate`` returns the raw (possibly non-finite) pair.
    """

    def __init__(self, system: System, *, jit: bool = False, cache: EvalCache | None = None):
        self.system = system
        self.domain = system.domain
        self.a = system.a
        self.b = system.b
        self._f = Evaluator(system.dx, jit=jit, cache=cache)
        self._g = Evaluator(system.dy, jit=jit, cache=cache)

    def evaluate(self, x: float, y: float) -> Tuple[float, float]:
        return self._f(x, y, self.a, self.b), self._g(x, y, self.a, self.b)

    def __call__(self, x: float, y: float) -> Tuple[float, float] | None:
        vx, vy = self.evaluate(x, y)
        if math.isfinite(vx) and math.isfinite(vy):
            return vx, vy
        return None

    def magnitude(self, x: float, y: float) -> float:
        vx, vy = self.evaluate(x, y)
        return math.hypot(vx, vy)

    def evaluate_array(self, x, y) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Return (U, V, finite) for broadcastable coordinate arrays."""
        U = self._f.evaluate_array(x, y, self.a, self.b)
        V = self._g.evaluate_array(x, y, self.a, self.b)
        return U, V, finite_mask(U, V)

    def __repr__(self) -> str:
        return f"VectorField(dx={self.system.dx.source!r}, dy={self.system.dy.source!r}, a={self.a}, b={self.b})"

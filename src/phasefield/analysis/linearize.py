# src/phasefield/analysis/linearize.py
from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Tuple
import math

import numpy as np

from phasefield.runtime.guards import allfinite_scalar
from phasefield.runtime.system import VectorField

__all__ = [
    "Stability",
    "Jacobian",
    "Classification",
    "numeric_jacobian",
    "eigenvalues",
    "classify",
    "format_number",
    "format_eigenvalue",
]

EPS = 1e-6


class Stability(str, Enum):
    """Local stability of a planar equilibrium."""
    SADDLE = "saddle (unstable)"
    STABLE_SPIRAL = "stable spiral"
    UNSTABLE_SPIRAL = "unstable spiral"
    CENTER = "center"
    STABLE_NODE = "stable node"
    UNSTABLE_NODE = "unstable node"
    DEGENERATE = "degenerate"
    INDETERMINATE = "indeterminate"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class Jacobian:
    """J = [[dfdx, dfdy], [dgdx, dgdy]]."""
    dfdx: float
    dfdy: float
    dgdx: float
    dgdy: float

    @property
    def trace(self) -> float:
        return self.dfdx + self.dgdy

    @property
    def det(self) -> float:
        return self.dfdx * self.dgdy - self.dfdy * self.dgdx

    @property
    def discriminant(self) -> float:
        tr = self.trace
        return tr * tr - 4.0 * self.det

    def as_array(self) -> np.ndarray:
        return np.array([[self.dfdx, self.dfdy], [self.dgdx, self.dgdy]], dtype=np.float64)

    def solve(self, rx: float, ry: float) -> Tuple[float, float]:
        """Solve J @ d = (rx, ry) by Cramer's rule (caller checks det)."""
        det = self.det
        return (
            (self.dgdy * rx - self.dfdy * ry) / det,
            (self.dfdx * ry - self.dgdx * rx) / det,
        )

    def __str__(self) -> str:
        f = format_number
        return f"[[{f(self.dfdx)}, {f(self.dfdy)}], [{f(self.dgdx)}, {f(self.dgdy)}]]"


@dataclass(frozen=True)
class Classification:
    eigenvalues: Tuple[complex, complex] | None
    label: Stability


def numeric_jacobian(field: VectorField, x: float, y: float, h: float) -> Jacobian | None:
    """
    Central-difference Jacobian with step ``h``.

    Returns None when any partial is non-finite.
    """
    fxp, gxp = field.evaluate(x + h, y)
    fxm, gxm = field.evaluate(x - h, y)
    fyp, gyp = field.evaluate(x, y + h)
    fym, gym = field.evaluate(x, y - h)
    two_h = 2.0 * h
    dfdx = (fxp - fxm) / two_h
    dfdy = (fyp - fym) / two_h
    dgdx = (gxp - gxm) / two_h
    dgdy = (gyp - gym) / two_h
    if not allfinite_scalar(dfdx, dfdy, dgdx, dgdy):
        return None
    return Jacobian(dfdx, dfdy, dgdx, dgdy)


def eigenvalues(jac: Jacobian | None) -> Tuple[complex, complex] | None:
    """Closed-form eigenvalues of a 2x2 matrix from its trace and determinant."""
    if jac is None:
        return None
    tr = jac.trace
    det = jac.det
    disc = jac.discriminant
    if not allfinite_scalar(tr, det, disc):
        return None
    if disc >= 0.0:
        root = math.sqrt(disc)
        return complex((tr + root) / 2.0, 0.0), complex((tr - root) / 2.0, 0.0)
    real = tr / 2.0
    imag = math.sqrt(-disc) / 2.0
    return complex(real, imag), complex(real, -imag)


def classify(jac: Jacobian | None, *, eps: float = EPS) -> Classification:
    """
    Label the equilibrium with Jacobian ``jac``.

    Missing or non-finite input yields Stability.INDETERMINATE.
    """
    eig = eigenvalues(jac)
    if jac is None or eig is None:
        return Classification(eig, Stability.INDETERMINATE)
    det = jac.det
    if det < -eps:
        return Classification(eig, Stability.SADDLE)

    lam1, lam2 = eig
    re1, re2 = lam1.real, lam2.real
    if abs(lam1.imag) > eps:
        if re1 < -eps:
            label = Stability.STABLE_SPIRAL
        elif re1 > eps:
            label = Stability.UNSTABLE_SPIRAL
        else:
            label = Stability.CENTER
        return Classification(eig, label)

    if re1 < -eps and re2 < -eps:
        label = Stability.STABLE_NODE
    elif re1 > eps and re2 > eps:
        label = Stability.UNSTABLE_NODE
    elif abs(re1) <= eps and abs(re2) <= eps:
        label = Stability.DEGENERATE
    else:
        label = Stability.INDETERMINATE
    return Classification(eig, label)


def format_number(value: float) -> str:
    if not math.isfinite(value):
        return "NaN"
    return f"{value:.4f}"


def format_eigenvalue(lam: complex | None) -> str:
    if lam is None:
        return "NaN"
    if abs(lam.imag) <= EPS:
        return format_number(lam.real)
    sign = "+" if lam.imag >= 0 else "-"
    return f"{format_number(lam.real)} {sign} {format_number(abs(lam.imag))}i"

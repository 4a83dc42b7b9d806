"""Equilibrium analysis for planar systems (fixed points + linearization)."""

from phasefield.analysis.fixed_points import (
    FixedPoint,
    FixedPointResult,
    locate,
    locate_fixed_points,
    newton_refine,
    sample_candidates,
)
from phasefield.analysis.linearize import (
    Classification,
    Jacobian,
    Stability,
    classify,
    eigenvalues,
    format_eigenvalue,
    format_number,
    numeric_jacobian,
)

__all__ = [
    # Fixed points
    "FixedPoint",
    "FixedPointResult",
    "locate",
    "locate_fixed_points",
    "newton_refine",
    "sample_candidates",
    # Linearization
    "Classification",
    "Jacobian",
    "Stability",
    "classify",
    "eigenvalues",
    "format_eigenvalue",
    "format_number",
    "numeric_jacobian",
]

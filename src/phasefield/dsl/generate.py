# src/phasefield/dsl/generate.py
"""Random polynomial/trigonometric systems for exploration."""
from __future__ import annotations
from typing import List

import numpy as np

from phasefield.runtime.system import Domain, System
from .expr import parse

__all__ = ["random_term", "random_formula", "random_system"]

_BASES = ("x", "y", "x*y")
_FUNCS = ("sin", "cos", "tan")


def _rng(seed: int | np.random.Generator | None) -> np.random.Generator:
    return seed if isinstance(seed, np.random.Generator) else np.random.default_rng(seed)


def random_term(rng: np.random.Generator) -> str:
    """One term such as ``x``, ``3.5*y^2`` or ``a*x*y``."""
    base = _BASES[rng.integers(len(_BASES))]
    var = base
    # powers only on single variables
    if base != "x*y" and rng.random() < 0.3:
        var = f"{base}^{rng.integers(2, 4)}"
    if rng.random() < 0.5:
        coeff = "a" if rng.random() < 0.5 else "b"
    else:
        coeff = f"{(int(rng.integers(1, 91))) / 10:.1f}"
    if coeff == "1.0":
        return var
    return f"{coeff}*{var}"


def random_formula(seed: int | np.random.Generator | None = None) -> str:
    """
    Right-hand side with 3-5 random terms.

    Parameter-free single-variable terms are wrapped in sin, cos or tan with
    probability 0.3; each term is negated with probability 0.5.
    """
    rng = _rng(seed)
    terms: List[str] = [random_term(rng) for _ in range(int(rng.integers(3, 6)))]
    out = []
    for term in terms:
        if rng.random() < 0.3 and "x*y" not in term and "a" not in term and "b" not in term:
            term = f"{_FUNCS[rng.integers(len(_FUNCS))]}({term})"
        out.append(f"-{term}" if rng.random() < 0.5 else term)
    return " + ".join(out).replace("+ -", "- ")


def random_system(
    seed: int | np.random.Generator | None = None,
    *,
    domain: Domain | None = None,
) -> System:
    """Random system with a = -1, b = 1 over ``domain`` (default [-5, 5]^2)."""
    rng = _rng(seed)
    dx = random_formula(rng)
    dy = random_formula(rng)
    kw = {} if domain is None else {"domain": domain}
    return System(parse(dx), parse(dy), a=-1.0, b=1.0, label="random", **kw)

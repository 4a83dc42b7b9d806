# src/phasefield/runtime/evaluator.py
from __future__ import annotations
from typing import Callable, Dict
import math
import weakref

import numpy as np

from phasefield.dsl.expr import Expression
from phasefield.compiler.codegen.emitter import emit_expression
from phasefield.compiler.jit.compile import jit_compile

__all__ = ["EvalCache", "Evaluator", "compiled", "evaluate", "evaluate_array"]


class EvalCache:
    """
    Bounded memo of scalar evaluations.

    Keys have the form ``formula_x_y_a_b`` with x and y rounded to three
    decimals, so nearby points share an entry. The whole table is dropped once
    it grows past ``max_entries``. Only finite results are stored.
    """

    def __init__(self, max_entries: int = 1000):
        if max_entries < 1:
            raise ValueError("max_entries must be positive")
        self.max_entries = int(max_entries)
        self._table: Dict[str, float] = {}
        self.hits = 0
        self.misses = 0

    @staticmethod
    def key(formula: str, x: float, y: float, a: float, b: float) -> str:
        return f"{formula}_{x:.3f}_{y:.3f}_{a}_{b}"

    def get(self, key: str) -> float | None:
        val = self._table.get(key)
        if val is None:
            self.misses += 1
        else:
            self.hits += 1
        return val

    def put(self, key: str, value: float) -> None:
        if len(self._table) > self.max_entries:
            self._table.clear()
        if math.isfinite(value):
            self._table[key] = value

    def clear(self) -> None:
        self._table.clear()

    def __len__(self) -> int:
        return len(self._table)


# expression -> {jit flag: lowered callable}; entries go away with the expression
_COMPILED: weakref.WeakKeyDictionary[Expression, Dict[bool, Callable]] = weakref.WeakKeyDictionary()


def compiled(expr: Expression, *, jit: bool = False) -> Callable:
    """Return the lowered callable for ``expr`` (built once per expression and jit flag)."""
    per_expr = _COMPILED.setdefault(expr, {})
    fn = per_expr.get(jit)
    if fn is None:
        fn = jit_compile(emit_expression(expr), jit=jit, component=expr.source).fn
        per_expr[jit] = fn
    return fn


def evaluate(expr: Expression, x: float, y: float, a: float, b: float) -> float:
    """
    Evaluate ``expr`` at one point.

    Never raises for arithmetic faults: division by zero, sqrt of a negative,
    overflow and similar conditions yield inf or nan.
    """
    return Evaluator(expr)(x, y, a, b)


def evaluate_array(expr: Expression, x, y, a: float, b: float) -> np.ndarray:
    """Evaluate ``expr`` elementwise over broadcastable x, y arrays."""
    return Evaluator(expr).evaluate_array(x, y, a, b)


class Evaluator:
    """
    Reusable evaluator bound to one expression.

    Args:
        expr: parsed expression
        jit: compile the lowered function with numba when available
        cache: optional EvalCache shared by scalar calls
    """

    def __init__(self, expr: Expression, *, jit: bool = False, cache: EvalCache | None = None):
        self.expr = expr
        self.jit = bool(jit)
        self.cache = cache
        self._fn = compiled(expr, jit=self.jit)

    def __call__(self, x: float, y: float, a: float, b: float) -> float:
        cache = self.cache
        if cache is not None:
            key = cache.key(self.expr.source, x, y, a, b)
            hit = cache.get(key)
            if hit is not None:
                return hit
        with np.errstate(all="ignore"):
            val = float(self._fn(float(x), float(y), float(a), float(b)))
        if cache is not None:
            cache.put(key, val)
        return val

    def evaluate_array(self, x, y, a: float, b: float) -> np.ndarray:
        X = np.asarray(x, dtype=np.float64)
        Y = np.asarray(y, dtype=np.float64)
        if self.jit:
            # numba dispatches scalars and arrays separately; broadcast first
            X, Y = np.broadcast_arrays(X, Y)
            X = np.ascontiguousarray(X)
            Y = np.ascontiguousarray(Y)
        with np.errstate(all="ignore"):
            out = self._fn(X, Y, float(a), float(b))
        shape = np.broadcast_shapes(X.shape, Y.shape)
        return np.array(np.broadcast_to(np.asarray(out, dtype=np.float64), shape), copy=True)

    def __repr__(self) -> str:
        return f"Evaluator({self.expr.source!r}, jit={self.jit})"

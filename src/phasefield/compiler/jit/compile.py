# src/phasefield/compiler/jit/compile.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Callable, Optional
import warnings

try:
    from numba import njit
    _NUMBA_OK = True
except Exception:
    _NUMBA_OK = False
    njit = None  # type: ignore

__all__ = ["JittedCallable", "jit_compile", "numba_available"]


@dataclass(frozen=True)
class JittedCallable:
    """A lowered formula plus whether numba actually compiled it."""
    fn: Callable
    jitted: bool
    component: Optional[str] = None


def numba_available() -> bool:
    return _NUMBA_OK


def jit_compile(fn: Callable, *, jit: bool = True, component: Optional[str] = None) -> JittedCallable:
    """
    Wrap a lowered ``f(x, y, a, b)`` with numba when asked to.

    ``component`` is the formula text; it only shows up in error messages.
    A missing numba is a warning and the Python function is used as is.
    A numba that is present but rejects the function is a RuntimeError.
    """
    if not jit:
        return JittedCallable(fn=fn, jitted=False, component=component)

    if not _NUMBA_OK:
        warnings.warn(
            "Numba not found; formulas are evaluated in pure Python. "
            "Install the 'jit' extra to compile them.",
            RuntimeWarning,
            stacklevel=3,
        )
        return JittedCallable(fn=fn, jitted=False, component=component)

    try:
        return JittedCallable(fn=njit(cache=False)(fn), jitted=True, component=component)
    except Exception as e:
        where = f" for '{component}'" if component else ""
        raise RuntimeError(
            f"numba could not compile the formula{where}: {type(e).__name__}: {e}"
        ) from e

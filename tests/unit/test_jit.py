import warnings

import numpy as np
import pytest

from phasefield.compiler.jit import compile as jit_mod
from phasefield.compiler.jit.compile import jit_compile
from phasefield.dsl.expr import parse
from phasefield.runtime.evaluator import Evaluator


def _plain(x, y, a, b):
    return x + y


def test_jit_disabled_returns_original():
    out = jit_compile(_plain, jit=False, component="rhs")
    assert out.fn is _plain
    assert out.jitted is False
    assert out.component == "rhs"


def test_missing_numba_warns_and_falls_back(monkeypatch):
    monkeypatch.setattr(jit_mod, "_NUMBA_OK", False)
    with pytest.warns(RuntimeWarning, match="Numba not found"):
        out = jit_compile(_plain, jit=True)
    assert out.fn is _plain
    assert not out.jitted


def test_jitted_evaluator_matches_python():
    pytest.importorskip("numba")
    expr = parse("a*(1 - x^2)*y - x + sin(b*y)")
    py = Evaluator(expr)
    jt = Evaluator(expr, jit=True)
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        assert jt(0.3, -1.2, 1.0, 0.5) == pytest.approx(py(0.3, -1.2, 1.0, 0.5))
        xs = np.linspace(-2.0, 2.0, 7)
        ys = np.linspace(-1.0, 1.0, 7)
        np.testing.assert_allclose(jt.evaluate_array(xs, ys, 1.0, 0.5), py.evaluate_array(xs, ys, 1.0, 0.5))

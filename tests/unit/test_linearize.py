import math

import numpy as np
import pytest

from phasefield.analysis.linearize import (
    Jacobian,
    Stability,
    classify,
    eigenvalues,
    format_eigenvalue,
    format_number,
    numeric_jacobian,
)
from phasefield.runtime.system import System


@pytest.mark.parametrize(
    "jac, label",
    [
        (Jacobian(1.0, 0.0, 0.0, -1.0), Stability.SADDLE),
        (Jacobian(-1.0, -2.0, 2.0, -1.0), Stability.STABLE_SPIRAL),
        (Jacobian(1.0, -2.0, 2.0, 1.0), Stability.UNSTABLE_SPIRAL),
        (Jacobian(0.0, 1.0, -1.0, 0.0), Stability.CENTER),
        (Jacobian(-1.0, 0.0, 0.0, -2.0), Stability.STABLE_NODE),
        (Jacobian(1.0, 0.0, 0.0, 2.0), Stability.UNSTABLE_NODE),
        (Jacobian(0.0, 0.0, 0.0, 0.0), Stability.DEGENERATE),
        (Jacobian(0.0, 0.0, 0.0, 1.0), Stability.INDETERMINATE),
    ],
)
def test_classify_table(jac, label):
    assert classify(jac).label is label


def test_classify_missing_or_non_finite():
    assert classify(None).label is Stability.INDETERMINATE
    assert classify(None).eigenvalues is None
    res = classify(Jacobian(math.nan, 0.0, 0.0, 1.0))
    assert res.label is Stability.INDETERMINATE
    assert res.eigenvalues is None


def test_stability_labels_render_as_text():
    assert str(Stability.SADDLE) == "saddle (unstable)"
    assert f"{Stability.UNSTABLE_SPIRAL}" == "unstable spiral"


def test_eigenvalues_match_numpy():
    jac = Jacobian(0.5, -3.0, 2.0, -0.25)
    ours = sorted(eigenvalues(jac), key=lambda z: (z.real, z.imag))
    ref = sorted(np.linalg.eigvals(jac.as_array()), key=lambda z: (z.real, z.imag))
    np.testing.assert_allclose(np.array(ours), np.array(ref), atol=1e-12)


def test_real_eigenvalues_ordered_larger_first():
    lam1, lam2 = eigenvalues(Jacobian(2.0, 0.0, 0.0, -3.0))
    assert lam1 == complex(2.0, 0.0)
    assert lam2 == complex(-3.0, 0.0)


def test_jacobian_solve_inverts():
    jac = Jacobian(2.0, 1.0, -1.0, 3.0)
    sx, sy = jac.solve(1.0, 2.0)
    np.testing.assert_allclose(jac.as_array() @ np.array([sx, sy]), [1.0, 2.0])


def test_numeric_jacobian_of_polynomial_field():
    system = System.from_formulas("x^2 + y", "x*y - 3*y")
    jac = numeric_jacobian(system.field(), 1.0, 2.0, 1e-4)
    np.testing.assert_allclose(
        jac.as_array(), [[2.0, 1.0], [2.0, -2.0]], atol=1e-6
    )


def test_numeric_jacobian_undefined():
    system = System.from_formulas("sqrt(x)", "y")
    assert numeric_jacobian(system.field(), 0.0, 0.0, 1e-4) is None


def test_formatting():
    assert format_number(1.0) == "1.0000"
    assert format_number(math.inf) == "NaN"
    assert format_eigenvalue(complex(-0.5, 1.25)) == "-0.5000 + 1.2500i"
    assert format_eigenvalue(complex(0.5, -2.0)) == "0.5000 - 2.0000i"
    assert format_eigenvalue(complex(3.0, 0.0)) == "3.0000"
    assert format_eigenvalue(None) == "NaN"
    assert str(Jacobian(1.0, 0.0, 0.0, -1.0)) == "[[1.0000, 0.0000], [0.0000, -1.0000]]"

import numpy as np
import pytest

from phasefield.analysis.fixed_points import (
    ERROR_BOUNDS,
    NOTE_FLAT,
    NOTE_NO_CANDIDATES,
    NOTE_NONE_FOUND,
    NOTE_UNDEFINED,
    locate,
    locate_fixed_points,
    newton_refine,
    sample_candidates,
)
from phasefield.analysis.linearize import Stability
from phasefield.runtime.config import LocatorConfig
from phasefield.runtime.system import System


def _bounds():
    return (-5.0, 5.0, -5.0, 5.0)


def test_van_der_pol_unstable_spiral_at_origin():
    res = locate_fixed_points("y", "a*(1 - x^2)*y - x", *_bounds(), a=1.0, b=0.0)
    assert res.ok
    assert res.note is None
    assert len(res) == 1
    fp = res.points[0]
    np.testing.assert_allclose(fp.position, (0.0, 0.0), atol=1e-6)
    assert fp.stability is Stability.UNSTABLE_SPIRAL
    np.testing.assert_allclose(fp.jacobian.as_array(), [[0.0, 1.0], [-1.0, 1.0]], atol=1e-6)
    lam = fp.eigenvalues[0]
    assert lam.real == pytest.approx(0.5, abs=1e-6)
    assert abs(lam.imag) == pytest.approx(np.sqrt(3.0) / 2.0, abs=1e-6)


def test_linear_saddle():
    res = locate_fixed_points("x", "-y", *_bounds())
    assert len(res) == 1
    fp = res.points[0]
    assert abs(fp.x) < 1e-6 and abs(fp.y) < 1e-6
    assert fp.stability is Stability.SADDLE


def test_converged_duplicates_reported_once():
    # Lotka-Volterra: saddle at the origin and a center at (1, 1); many
    # seeds converge onto each of them.
    res = locate_fixed_points("a*x - b*x*y", "-y + x*y", *_bounds(), a=1.0, b=1.0)
    assert res.candidate_count > 2
    assert len(res) == 2
    by_label = {fp.stability: fp for fp in res}
    assert set(by_label) == {Stability.SADDLE, Stability.CENTER}
    np.testing.assert_allclose(by_label[Stability.CENTER].position, (1.0, 1.0), atol=1e-2)
    np.testing.assert_allclose(by_label[Stability.SADDLE].position, (0.0, 0.0), atol=1e-6)


def test_points_respect_merge_radius():
    res = locate_fixed_points("sin(x)", "sin(y)", *_bounds())
    pts = np.array([fp.position for fp in res])
    for i in range(len(pts)):
        for j in range(i + 1, len(pts)):
            assert np.hypot(*(pts[i] - pts[j])) > 0.1


def test_invalid_bounds():
    res = locate_fixed_points("x", "y", 1.0, 1.0, -1.0, 1.0)
    assert res.points == ()
    assert res.error == ERROR_BOUNDS
    assert not res.ok

    res = locate_fixed_points("x", "y", 2.0, 1.0, -1.0, 1.0)
    assert res.error == ERROR_BOUNDS


def test_parse_error_reported_not_raised():
    res = locate_fixed_points("x +", "y", *_bounds())
    assert res.points == ()
    assert "unexpected end of expression" in res.error


def test_flat_field_note():
    res = locate_fixed_points("0", "0*x", *_bounds())
    assert res.points == ()
    assert res.note == NOTE_FLAT


def test_undefined_field_note():
    res = locate_fixed_points("sqrt(-1)", "y", *_bounds())
    assert res.points == ()
    assert res.note == NOTE_UNDEFINED


def test_no_candidates_note():
    res = locate_fixed_points("1", "1", *_bounds())
    assert res.points == ()
    assert res.note == NOTE_NO_CANDIDATES


def test_none_found_note():
    # |F| >= 0.3 everywhere, but small enough near x = 0 to seed Newton
    res = locate_fixed_points("x^2 + 0.3", "y", *_bounds())
    assert res.candidate_count > 0
    assert res.points == ()
    assert res.note == NOTE_NONE_FOUND


def test_grid_override_changes_behavior():
    system = System.from_formulas("x", "-y")
    assert len(locate(system)) == 1

    coarse = locate(system, LocatorConfig(grid_size=2))
    assert coarse.grid_size == 2
    assert coarse.points == ()
    assert coarse.note == NOTE_NO_CANDIDATES


def test_candidate_cap():
    system = System.from_formulas("sin(x)", "sin(y)")
    res = locate(system, LocatorConfig(max_candidates=1))
    assert res.candidate_count == 1
    assert len(res) == 1


def test_sample_candidates_sorted_ascending():
    field = System.from_formulas("x", "y").field()
    cands, max_mag, n_finite = sample_candidates(field, LocatorConfig())
    assert n_finite == 25 * 25
    assert max_mag == pytest.approx(np.hypot(5.0, 5.0))
    mags = [c.mag for c in cands]
    assert mags == sorted(mags)
    assert (cands[0].x, cands[0].y) == (0.0, 0.0)


def test_newton_refine_linear_field():
    field = System.from_formulas("x - 1", "y + 0.5").field()
    out = newton_refine(field, 0.3, -0.2, tol=1e-9, h=1e-4, config=LocatorConfig())
    assert out is not None
    np.testing.assert_allclose(out, (1.0, -0.5), atol=1e-9)


def test_newton_refine_singular_jacobian_fails():
    field = System.from_formulas("x^2 + 0.3", "y").field()
    assert newton_refine(field, 0.0, 0.0, tol=1e-6, h=1e-4, config=LocatorConfig()) is None


def test_locate_accepts_vector_field():
    field = System.from_formulas("x", "-y").field(jit=False)
    assert len(locate(field)) == 1

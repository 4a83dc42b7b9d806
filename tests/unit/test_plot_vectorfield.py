import matplotlib

matplotlib.use("Agg", force=True)

import matplotlib.pyplot as plt
import numpy as np
import pytest

from phasefield.analysis.linearize import Stability
from phasefield.plot import STABILITY_COLORS, eval_vectorfield, phase_portrait
from phasefield.runtime.config import TrajectoryConfig
from phasefield.runtime.system import System


def test_eval_vectorfield_grid_and_values():
    system = System.from_formulas("a*x", "y - b", a=2.0, b=1.0, bounds=(-1.0, 1.0, 0.0, 1.0))
    X, Y, U, V = eval_vectorfield(system, grid=(5, 3))
    assert X.shape == (3, 5)
    np.testing.assert_allclose(X[0], np.linspace(-1.0, 1.0, 5))
    np.testing.assert_allclose(Y[:, 0], [0.0, 0.5, 1.0])
    np.testing.assert_allclose(U, 2.0 * X)
    np.testing.assert_allclose(V, Y - 1.0)


def test_eval_vectorfield_normalize_and_undefined():
    system = System.from_formulas("sqrt(x)", "1", bounds=(-1.0, 1.0, -1.0, 1.0))
    X, Y, U, V = eval_vectorfield(system, grid=4, normalize=True)
    neg = X < 0
    assert np.all(np.isnan(U[neg])) and np.all(np.isnan(V[neg]))
    norm = np.hypot(U[~neg], V[~neg])
    np.testing.assert_allclose(norm, 1.0)


def test_phase_portrait_quiver_and_fixed_points():
    system = System.from_formulas("x", "-y", label="saddle")
    fig, ax = plt.subplots()
    handle = phase_portrait(system, ax=ax, grid=10)
    try:
        assert handle.ax is ax
        assert handle.quiver is not None
        assert handle.stream is None
        assert handle.fixed_points is not None
        assert [fp.stability for fp in handle.fixed_points] == [Stability.SADDLE]
        # one marker plus its label
        assert len(handle.fp_artists) == 2
        assert ax.get_title() == "saddle"
        assert ax.get_xlim() == (-5.0, 5.0)
    finally:
        plt.close(fig)


def test_phase_portrait_stream_with_trajectories():
    system = System.from_formulas("-y", "x")
    fig, ax = plt.subplots()
    handle = phase_portrait(
        system,
        ax=ax,
        mode="stream",
        trajectories=TrajectoryConfig(n=3, steps=20),
        fixed_points=False,
    )
    try:
        assert handle.stream is not None
        assert len(handle.traj_lines) == 9
        assert handle.fixed_points is None
        handle.clear_trajectories()
        assert handle.traj_lines == []
    finally:
        plt.close(fig)


def test_phase_portrait_creates_axes():
    handle = phase_portrait(System.from_formulas("y", "-x"), fixed_points=False, annotate=False)
    assert handle.ax is not None
    plt.close(handle.ax.figure)


def test_phase_portrait_rejects_unknown_mode():
    with pytest.raises(ValueError, match="mode must be"):
        phase_portrait(System.from_formulas("y", "-x"), mode="heatmap")


def test_every_label_has_a_color():
    assert set(STABILITY_COLORS) == set(Stability)

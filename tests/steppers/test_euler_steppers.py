import math

import numpy as np
import pytest

from phasefield.steppers import StepperMeta, get_stepper, register, registry
from phasefield.steppers.euler import EulerSpec
from phasefield.steppers.euler_normalized import EulerNormalizedSpec, speed_scale


def test_builtin_steppers_registered_with_aliases():
    reg = registry()
    assert isinstance(reg["euler"], EulerSpec)
    assert isinstance(reg["euler_normalized"], EulerNormalizedSpec)
    assert get_stepper("fwd_euler") is reg["euler"]
    assert get_stepper("particle") is reg["euler_normalized"]


def test_unknown_stepper_lists_registered():
    with pytest.raises(KeyError, match="Registered: .*euler"):
        get_stepper("rk45")


def test_spec_instances_pass_through():
    spec = EulerSpec()
    assert get_stepper(spec) is spec


def test_register_rejects_conflicting_name():
    other = EulerSpec(StepperMeta(name="euler"))
    with pytest.raises(ValueError, match="already registered"):
        register(other)


def test_euler_increment():
    spec = get_stepper("euler")
    assert spec.meta.speed_normalized is False
    assert spec.increment(2.0, -4.0, 0.01) == (0.02, -0.04)


def test_normalized_increment_scalar():
    spec = get_stepper("euler_normalized")
    assert spec.meta.speed_normalized
    vx, vy = 3.0, 4.0
    dx, dy = spec.increment(vx, vy, 0.01)
    # |F| = 5 -> scale 2 / 6
    assert dx == pytest.approx(3.0 * 0.01 / 3.0)
    assert dy == pytest.approx(4.0 * 0.01 / 3.0)
    assert isinstance(dx, float)


def test_normalized_step_length_is_bounded():
    spec = get_stepper("euler_normalized")
    speeds = np.array([0.0, 0.5, 1.0, 10.0, 1e6])
    dx, dy = spec.increment(speeds, np.zeros_like(speeds), 0.01)
    assert dx.shape == speeds.shape
    # |step| = 2|F| dt / (1 + |F|) < 2 dt
    assert np.all(np.hypot(dx, dy) < 2 * 0.01)
    assert dx[0] == 0.0


def test_speed_scale_slow_regions_advance_faster():
    assert speed_scale(0.0, 0.0) == 2.0
    assert speed_scale(1.0, 0.0) == 1.0
    assert math.isclose(float(speed_scale(0.0, 9.0)), 0.2)

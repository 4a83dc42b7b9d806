# src/phasefield/steppers/euler.py
"""
Explicit Euler stepping: p_{n+1} = p_n + F(p_n) * dt.

Used for thin trajectory lines, where the step follows the field in time.
"""
from __future__ import annotations

from .base import StepperMeta

__all__ = ["EulerSpec"]


class EulerSpec:
    """Unscaled explicit Euler: fixed step, order 1."""

    def __init__(self, meta: StepperMeta | None = None):
        if meta is None:
            meta = StepperMeta(
                name="euler",
                family="euler",
                order=1,
                speed_normalized=False,
                aliases=("fwd_euler", "unscaled"),
                description="p += F(p) * dt",
            )
        self.meta = meta

    def increment(self, vx, vy, dt: float):
        return vx * dt, vy * dt


# Auto-register on module import
def _auto_register():
    from .registry import register
    register(EulerSpec())

_auto_register()

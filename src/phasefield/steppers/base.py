from __future__ import annotations
from dataclasses import dataclass
from typing import Protocol, Tuple, TypeVar

import numpy as np

__all__ = ["StepperMeta", "StepperSpec"]

_F = TypeVar("_F", float, np.ndarray)


@dataclass(frozen=True)
class StepperMeta:
    """
    Public metadata for a stepping policy.

    ``speed_normalized`` marks policies that rescale the step by the local
    field magnitude; such policies trace streamlines rather than solutions
    in time.
    """
    name: str
    family: str = "euler"
    order: int = 1
    speed_normalized: bool = False
    aliases: tuple[str, ...] = ()
    description: str = ""


class StepperSpec(Protocol):
    """
    Interface used by trajectories and particle clouds.

    Implementations MUST:
      - expose ``meta: StepperMeta``
      - provide ``increment(vx, vy, dt) -> (dx, dy)`` which works on floats
        and on numpy arrays alike (elementwise)
    """

    meta: StepperMeta

    def increment(self, vx: _F, vy: _F, dt: float) -> Tuple[_F, _F]: ...

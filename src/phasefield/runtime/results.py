from __future__ import annotations
from dataclasses import dataclass
import math

import numpy as np

__all__ = ["Trajectory"]


@dataclass(frozen=True)
class Trajectory:
    """
    Sampled path of one starting point.

    Fields:
      - points: float64 array, shape (n, 2); row 0 is the starting point
      - velocity: field value (vx, vy) at the last evaluated point
      - n_evaluated: number of successful field evaluations
      - stop: why integration ended: "steps" | "left_domain" | "non_finite"

    Notes:
      - The last row may lie outside the domain when stop == "left_domain";
        it closes the final segment for line renderers.
    """
    points: np.ndarray
    velocity: tuple[float, float]
    n_evaluated: int
    stop: str

    @property
    def x(self) -> np.ndarray:
        return self.points[:, 0]

    @property
    def y(self) -> np.ndarray:
        return self.points[:, 1]

    @property
    def ok(self) -> bool:
        """True when the field was finite at least once along the path."""
        return self.n_evaluated > 0

    @property
    def speed(self) -> float:
        return math.hypot(*self.velocity)

    @property
    def angle(self) -> float:
        """Direction of the final velocity, atan2(vy, vx)."""
        return math.atan2(self.velocity[1], self.velocity[0])

    def __len__(self) -> int:
        return int(self.points.shape[0])

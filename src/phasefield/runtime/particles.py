# src/phasefield/runtime/particles.py
"""
Particle clouds advected by the speed-normalized Euler policy.

All particles advance together over numpy arrays; there is no per-particle
shared state, so one ``advance()`` is a data-parallel map over points.

What happens to a particle that leaves the domain or grows too old is a
presentation choice, not a property of the dynamics. It is delegated to a
respawn policy: ``UniformRespawn`` (the default) re-seeds it uniformly at
random inside the domain with age reset, ``NoRespawn`` leaves it alone.
"""
from __future__ import annotations
from collections import deque
from dataclasses import dataclass
from typing import Deque, List, Protocol
import warnings

import numpy as np

from phasefield.steppers import get_stepper
from .config import ParticleConfig
from .system import Domain, System, VectorField

__all__ = [
    "ParticleState",
    "RespawnPolicy",
    "UniformRespawn",
    "NoRespawn",
    "ParticleField",
    "ParticleTracer",
]


@dataclass
class ParticleState:
    """Mutable particle arrays, all shape (n,)."""
    x: np.ndarray
    y: np.ndarray
    age: np.ndarray
    speed: np.ndarray

    def __len__(self) -> int:
        return int(self.x.size)

    def as_array(self) -> np.ndarray:
        """Interleaved (n, 4) float32 buffer: x, y, age, speed."""
        return np.stack([self.x, self.y, self.age, self.speed], axis=1).astype(np.float32)


class RespawnPolicy(Protocol):
    def __call__(self, state: ParticleState, mask: np.ndarray, domain: Domain, rng: np.random.Generator) -> None: ...


class UniformRespawn:
    """Re-seed masked particles uniformly inside the domain; age and speed reset to 0."""

    def __call__(self, state: ParticleState, mask: np.ndarray, domain: Domain, rng: np.random.Generator) -> None:
        k = int(np.count_nonzero(mask))
        if k == 0:
            return
        xs, ys = domain.uniform(rng, k)
        state.x[mask] = xs
        state.y[mask] = ys
        state.age[mask] = 0.0
        state.speed[mask] = 0.0


class NoRespawn:
    """Leave particles where they are (they may drift outside the domain)."""

    def __call__(self, state: ParticleState, mask: np.ndarray, domain: Domain, rng: np.random.Generator) -> None:
        return None


def _as_field(system_or_field: System | VectorField, jit: bool) -> VectorField:
    if isinstance(system_or_field, VectorField):
        return system_or_field
    return system_or_field.field(jit=jit)


class ParticleField:
    """
    Dense particle cloud for flow visualization.

    Args:
        system_or_field: System (or prebuilt VectorField) to advect through
        config: ParticleConfig (n_particles, dt, max_age, stepper)
        respawn: RespawnPolicy, defaults to UniformRespawn()
        seed: seed or Generator for positions, initial ages and respawns
        jit: compile the field with numba when a System is given
    """

    def __init__(
        self,
        system_or_field: System | VectorField,
        config: ParticleConfig | None = None,
        *,
        respawn: RespawnPolicy | None = None,
        seed: int | np.random.Generator | None = None,
        jit: bool = False,
    ):
        self.field = _as_field(system_or_field, jit)
        self.config = config or ParticleConfig()
        self.respawn = UniformRespawn() if respawn is None else respawn
        self.rng = seed if isinstance(seed, np.random.Generator) else np.random.default_rng(seed)
        self._stepper = get_stepper(self.config.stepper)
        self.frame = 0
        self.state = self._initial_state()

    def _initial_state(self) -> ParticleState:
        n = self.config.n_particles
        xs, ys = self.field.domain.uniform(self.rng, n)
        ages = self.rng.random(n) * self.config.max_age
        return ParticleState(x=xs, y=ys, age=ages, speed=np.zeros(n, dtype=np.float64))

    def reset(self) -> None:
        self.frame = 0
        self.state = self._initial_state()

    def advance(self) -> bool:
        """
        Move every particle one step.

        Returns True when the field was finite for at least one particle.
        Particles with a non-finite field value keep position, age and speed.
        """
        st = self.state
        U, V, ok = self.field.evaluate_array(st.x, st.y)
        self.frame += 1
        if not ok.any():
            warnings.warn(
                "No valid particles. Check your equations.",
                RuntimeWarning,
                stacklevel=2,
            )
            return False

        ddx, ddy = self._stepper.increment(U[ok], V[ok], self.config.dt)
        old_age = st.age[ok]
        st.x[ok] += ddx
        st.y[ok] += ddy
        st.age[ok] = old_age + 1.0
        st.speed[ok] = np.hypot(U[ok], V[ok])

        expired = np.zeros(len(st), dtype=bool)
        expired[ok] = (old_age > self.config.max_age) | ~self.field.domain.contains_array(st.x[ok], st.y[ok])
        self.respawn(st, expired, self.field.domain, self.rng)
        return True

    def run(self, frames: int) -> int:
        """Advance ``frames`` times; return how many frames had valid particles."""
        good = 0
        for _ in range(int(frames)):
            good += bool(self.advance())
        return good

    @property
    def positions(self) -> np.ndarray:
        return np.stack([self.state.x, self.state.y], axis=1)


class ParticleTracer:
    """
    A few particles whose recent paths are kept for drawing trails.

    Unlike ParticleField, tracers are never respawned; each keeps the last
    ``history`` positions it moved through.
    """

    def __init__(
        self,
        system_or_field: System | VectorField,
        *,
        n: int = 50,
        history: int = 100,
        dt: float = 0.01,
        stepper: str = "euler_normalized",
        seed: int | np.random.Generator | None = None,
    ):
        if n < 1 or history < 1:
            raise ValueError("n and history must be positive")
        self.field = _as_field(system_or_field, False)
        self.dt = float(dt)
        self._stepper = get_stepper(stepper)
        rng = seed if isinstance(seed, np.random.Generator) else np.random.default_rng(seed)
        xs, ys = self.field.domain.uniform(rng, n)
        self.x = xs
        self.y = ys
        self.histories: List[Deque[tuple[float, float]]] = [deque(maxlen=history) for _ in range(n)]

    def advance(self) -> None:
        U, V, ok = self.field.evaluate_array(self.x, self.y)
        ddx, ddy = self._stepper.increment(U[ok], V[ok], self.dt)
        self.x[ok] += ddx
        self.y[ok] += ddy
        for i in np.flatnonzero(ok):
            self.histories[i].append((float(self.x[i]), float(self.y[i])))

    def clear(self) -> None:
        for h in self.histories:
            h.clear()

    def paths(self) -> List[np.ndarray]:
        """Trail of each tracer as an (m, 2) array (m may be 0)."""
        return [np.asarray(h, dtype=np.float64).reshape(-1, 2) for h in self.histories]

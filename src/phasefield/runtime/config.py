# src/phasefield/runtime/config.py
from __future__ import annotations
from dataclasses import dataclass, fields, replace
from typing import Any, Mapping, TypeVar
import math

from phasefield.errors import ConfigError
from phasefield.steppers import get_stepper, registry

__all__ = [
    "LocatorConfig",
    "ParticleConfig",
    "TrajectoryConfig",
    "with_overrides",
]

_C = TypeVar("_C")


def _check_stepper(name: str) -> None:
    try:
        get_stepper(name)
    except KeyError:
        raise ConfigError(
            f"stepper must be one of: {', '.join(sorted(registry()))}; got {name!r}"
        ) from None


@dataclass(frozen=True)
class LocatorConfig:
    """
    Tunables for the fixed-point search.

    The defaults are empirical; they bound the cost of one analysis
    (grid_size**2 samples, max_candidates Newton runs of max_newton_steps each).
    """
    grid_size: int = 25
    max_candidates: int = 200
    max_newton_steps: int = 12
    # field below this everywhere -> equilibria are not isolated
    flat_field_tol: float = 1e-8
    # candidate threshold = max(candidate_floor, max_mag * candidate_frac)
    candidate_floor: float = 1e-3
    candidate_frac: float = 0.02
    # Newton tolerance = clamp(max_mag * tol_frac, tol_min, tol_max)
    tol_frac: float = 1e-4
    tol_min: float = 1e-6
    tol_max: float = 1e-2
    # Jacobian step h = max(h_min, span * h_frac)
    h_min: float = 1e-4
    h_frac: float = 1e-4
    singular_det: float = 1e-10
    max_step_frac: float = 0.25
    # dedup radius = max(merge_min, span * merge_frac)
    merge_min: float = 1e-4
    merge_frac: float = 0.01
    classify_eps: float = 1e-6

    def __post_init__(self):
        if self.grid_size < 2:
            raise ConfigError(f"grid_size must be >= 2, got {self.grid_size}")
        if self.max_candidates < 1:
            raise ConfigError(f"max_candidates must be >= 1, got {self.max_candidates}")
        if self.max_newton_steps < 1:
            raise ConfigError(f"max_newton_steps must be >= 1, got {self.max_newton_steps}")
        if self.tol_min > self.tol_max:
            raise ConfigError(f"tol_min ({self.tol_min}) exceeds tol_max ({self.tol_max})")
        for f in fields(self):
            val = getattr(self, f.name)
            if f.type in ("float", float) and not (math.isfinite(val) and val >= 0.0):
                raise ConfigError(f"{f.name} must be a finite non-negative number, got {val!r}")
        if self.max_step_frac <= 0.0:
            raise ConfigError("max_step_frac must be positive")


@dataclass(frozen=True)
class ParticleConfig:
    n_particles: int = 32000
    dt: float = 0.01
    max_age: int = 300
    stepper: str = "euler_normalized"

    def __post_init__(self):
        if self.n_particles < 1:
            raise ConfigError(f"n_particles must be >= 1, got {self.n_particles}")
        if not (math.isfinite(self.dt) and self.dt > 0.0):
            raise ConfigError(f"dt must be a positive finite number, got {self.dt!r}")
        if self.max_age < 1:
            raise ConfigError(f"max_age must be >= 1, got {self.max_age}")
        _check_stepper(self.stepper)


@dataclass(frozen=True)
class TrajectoryConfig:
    n: int = 30          # n x n grid of starting points
    steps: int = 1100
    dt: float = 0.01
    stepper: str = "euler"

    def __post_init__(self):
        if self.n < 2:
            raise ConfigError(f"n must be >= 2, got {self.n}")
        if self.steps < 1:
            raise ConfigError(f"steps must be >= 1, got {self.steps}")
        if not (math.isfinite(self.dt) and self.dt > 0.0):
            raise ConfigError(f"dt must be a positive finite number, got {self.dt!r}")
        _check_stepper(self.stepper)


def with_overrides(config: _C, overrides: Mapping[str, Any] | None, *, where: str = "config") -> _C:
    """
    Return a copy of ``config`` with fields replaced from ``overrides``.

    Unknown keys and values of the wrong kind raise ConfigError naming
    ``where`` (e.g. "[analysis]").
    """
    if not overrides:
        return config
    known = {f.name: f for f in fields(config)}
    updates: dict[str, Any] = {}
    for key, val in overrides.items():
        if key not in known:
            raise ConfigError(
                f"{where}.{key} is not a recognized option. "
                f"Valid options: {', '.join(sorted(known))}"
            )
        current = getattr(config, key)
        if isinstance(current, bool) or isinstance(val, bool):
            raise ConfigError(f"{where}.{key} must be a number, got {val!r}")
        if isinstance(current, int):
            if not isinstance(val, int):
                raise ConfigError(f"{where}.{key} must be an integer, got {type(val).__name__}")
        elif isinstance(current, float):
            if not isinstance(val, (int, float)):
                raise ConfigError(f"{where}.{key} must be a number, got {type(val).__name__}")
            val = float(val)
        elif isinstance(current, str) and not isinstance(val, str):
            raise ConfigError(f"{where}.{key} must be a string, got {type(val).__name__}")
        updates[key] = val
    return replace(config, **updates)

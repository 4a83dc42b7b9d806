# src/phasefield/steppers/registry.py
from __future__ import annotations
from typing import Dict

from .base import StepperSpec

__all__ = ["register", "get_stepper", "registry"]

_registry: Dict[str, StepperSpec] = {}


def _claim(key: str, spec: StepperSpec) -> None:
    held = _registry.get(key)
    if held is not None and held is not spec:
        raise ValueError(f"Stepper name '{key}' already registered by {held.meta.name!r}.")
    _registry[key] = spec


def register(spec: StepperSpec) -> None:
    """Make ``spec`` reachable under its name and every alias."""
    _claim(spec.meta.name, spec)
    for alias in spec.meta.aliases:
        _claim(alias, spec)


def get_stepper(name: str | StepperSpec) -> StepperSpec:
    """Look a stepper up by name; objects that already are steppers come back unchanged."""
    if not isinstance(name, str):
        return name
    spec = _registry.get(name)
    if spec is None:
        raise KeyError(f"Unknown stepper '{name}'. Registered: {', '.join(sorted(_registry))}")
    return spec


def registry() -> Dict[str, StepperSpec]:
    return dict(_registry)

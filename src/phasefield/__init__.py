# src/phasefield/__init__.py
from __future__ import annotations

from .errors import (
    PhasefieldError,
    ExpressionParseError,
    SystemLoadError,
    SystemNotFoundError,
    ConfigError,
)
from .dsl.expr import Expression, parse
from .runtime.evaluator import EvalCache, Evaluator, evaluate, evaluate_array
from .runtime.config import LocatorConfig, ParticleConfig, TrajectoryConfig
from .runtime.system import DEFAULT_DOMAIN, Domain, System, VectorField
from .runtime.results import Trajectory
from .runtime.trajectory import integrate, trajectory, sample_trajectories
from .runtime.particles import ParticleField, ParticleTracer, UniformRespawn, NoRespawn
from .analysis.fixed_points import FixedPoint, FixedPointResult, locate, locate_fixed_points
from .analysis.linearize import Jacobian, Stability, classify
from .dsl.system import SystemSpec, load_system
from .dsl.generate import random_system

__all__ = [
    # Errors
    "PhasefieldError", "ExpressionParseError", "SystemLoadError", "SystemNotFoundError", "ConfigError",
    # Formulas
    "Expression", "parse", "EvalCache", "Evaluator", "evaluate", "evaluate_array",
    # Systems
    "Domain", "DEFAULT_DOMAIN", "System", "VectorField", "SystemSpec", "load_system",
    "random_system",
    # Configuration
    "LocatorConfig", "ParticleConfig", "TrajectoryConfig",
    # Integration
    "Trajectory", "integrate", "trajectory", "sample_trajectories",
    "ParticleField", "ParticleTracer", "UniformRespawn", "NoRespawn",
    # Analysis
    "FixedPoint", "FixedPointResult", "locate", "locate_fixed_points",
    "Jacobian", "Stability", "classify",
]

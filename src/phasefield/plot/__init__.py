# src/phasefield/plot/__init__.py
from __future__ import annotations

from .vectorfield import (
    eval_vectorfield,
    phase_portrait,
    PortraitHandle,
    STABILITY_COLORS,
)

__all__ = [
    "eval_vectorfield",
    "phase_portrait",
    "PortraitHandle",
    "STABILITY_COLORS",
]

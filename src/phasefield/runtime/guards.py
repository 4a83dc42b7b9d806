# src/phasefield/runtime/guards.py
from __future__ import annotations

import math
import numpy as np

__all__ = ["allfinite_scalar", "finite_mask"]


def allfinite_scalar(*values: float) -> bool:
    for v in values:
        if not math.isfinite(v):
            return False
    return True


def finite_mask(*arrays: np.ndarray) -> np.ndarray:
    """Elementwise AND of np.isfinite over same-shaped arrays."""
    mask = np.isfinite(arrays[0])
    for arr in arrays[1:]:
        mask &= np.isfinite(arr)
    return mask

"""Numeric helper functions."""

import math
from typing import Any, Optional

import numpy as np
import pandas as pd


def sanitize_float(value: Any) -> Optional[float]:
    """Coerce different numeric types to clean floats, returning None for invalid values."""
    if value is None or isinstance(value, (bool, np.bool_)):
        return None
    if isinstance(value, pd.Series):
        if value.empty:
            return None
        value = value.iloc[0]
    if isinstance(value, (np.ndarray, list, tuple)):
        if len(value) == 0:
            return None
        value = value[0]
    if isinstance(value, (np.generic, float, int, np.integer)):
        value = float(value)
        if not np.isfinite(value):
            return None
        return value
    return None


def clamp(value: float, lower: float, upper: float) -> float:
    return max(lower, min(upper, value))


def round_half_up(value: float) -> int:
    """Round to the nearest integer, with .5 going towards positive infinity."""
    return int(math.floor(value + 0.5))


def first_present(*values: Optional[float]) -> Optional[float]:
    """Return the first value that is not None."""
    for value in values:
        if value is not None:
            return value
    return None

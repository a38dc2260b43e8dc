"""Utility helpers for the compounding machine screener."""

from .math_utils import clamp, first_present, round_half_up, sanitize_float
from .formatters import (
    failed_checks,
    format_pct,
    pad,
    render_json,
    render_table,
)

__all__ = [
    "clamp",
    "first_present",
    "round_half_up",
    "sanitize_float",
    "failed_checks",
    "format_pct",
    "pad",
    "render_json",
    "render_table",
]

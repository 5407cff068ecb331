"""Structural diffs between state trees."""

from .engine import apply_diff, calculate_diff, join_path, reverse_diff, summarize_diff
from .models import ChangeDiff, DiffSummary, DiffType

__all__ = [
    "calculate_diff",
    "reverse_diff",
    "apply_diff",
    "summarize_diff",
    "join_path",
    "ChangeDiff",
    "DiffSummary",
    "DiffType",
]

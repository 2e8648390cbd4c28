"""Structural queries over a settled stack's support graph."""

from .cascade import fall_count, fall_counts, fallen_set, topological_order, total_fall_count
from .safety import count_safe, is_safe, safe_bricks, unsafe_bricks

__all__ = [
    # Safety
    "count_safe",
    "is_safe",
    "safe_bricks",
    "unsafe_bricks",
    # Cascade
    "fall_count",
    "fall_counts",
    "fallen_set",
    "topological_order",
    "total_fall_count",
]

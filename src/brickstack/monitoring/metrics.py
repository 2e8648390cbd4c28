"""Metrics tracking and export for brick stack runs.

Provides dataclasses for per-brick and per-run results and utilities for
exporting them to JSON and CSV formats.
"""

from __future__ import annotations

import csv
import json
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from brickstack.pipeline import StackAnalysis

BRICK_CSV_FIELDS = [
    "brick_id", "initial_z_min", "settled_z_min", "drop_distance",
    "supporters", "supported", "safe", "fall_count",
]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class BrickMetrics:
    """Results for a single brick.

    Attributes:
        brick_id: Brick identifier (snapshot line order).
        initial_z_min: Bottom height in the snapshot.
        settled_z_min: Bottom height after settling.
        drop_distance: How far the brick fell.
        supporters: Number of bricks directly beneath it.
        supported: Number of bricks resting directly on it.
        safe: Whether it can be removed without any brick losing all supporters.
        fall_count: Bricks that fall in a chain reaction if it is removed.
    """

    brick_id: int
    initial_z_min: int
    settled_z_min: int
    drop_distance: int
    supporters: int
    supported: int
    safe: bool
    fall_count: int

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class RunMetrics:
    """Aggregate results for one snapshot run.

    Attributes:
        run_id: Unique identifier for the run.
        source: Where the snapshot came from (file path or "generated").
        brick_count: Number of bricks in the snapshot.
        safe_count: Bricks safe to disintegrate.
        total_fall_count: Sum of chain-reaction falls over all bricks.
        max_fall_count: Largest single chain reaction.
        settle_iterations: Queue pops the settling engine needed.
        max_height: Highest occupied level after settling.
        order_independent: Whether alternative input orders settled identically
            (None when not checked).
        runtime_seconds: Total runtime in seconds.
        started_at: Run start timestamp.
        completed_at: Run completion timestamp (None if running).
        brick_metrics: Per-brick results.
    """

    run_id: str
    source: str
    brick_count: int = 0
    safe_count: int = 0
    total_fall_count: int = 0
    max_fall_count: int = 0
    settle_iterations: int = 0
    max_height: int = 0
    order_independent: bool | None = None
    runtime_seconds: float = 0.0
    started_at: datetime = field(default_factory=_utcnow)
    completed_at: datetime | None = None
    brick_metrics: list[BrickMetrics] = field(default_factory=list)

    def record_analysis(self, analysis: StackAnalysis) -> None:
        """Fill in results from a finished analysis.

        Args:
            analysis: StackAnalysis for this run's snapshot.
        """
        stack = analysis.stack
        graph = stack.graph
        self.brick_count = len(stack)
        self.safe_count = analysis.part_a
        self.total_fall_count = analysis.part_b
        self.max_fall_count = analysis.max_fall_count
        self.settle_iterations = stack.iterations
        self.max_height = stack.max_height
        self.brick_metrics = [
            BrickMetrics(
                brick_id=bid,
                initial_z_min=stack.initial[bid].z_min,
                settled_z_min=stack.bricks[bid].z_min,
                drop_distance=stack.drop_distance(bid),
                supporters=len(graph.supporters(bid)),
                supported=len(graph.supported(bid)),
                safe=bid in analysis.safe,
                fall_count=analysis.fall_counts[bid],
            )
            for bid in graph.ids
        ]

    def mark_complete(self) -> None:
        """Mark run as complete and calculate final runtime."""
        self.completed_at = _utcnow()
        self.runtime_seconds = (self.completed_at - self.started_at).total_seconds()

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary with ISO timestamps."""
        d = asdict(self)
        d["started_at"] = self.started_at.isoformat()
        d["completed_at"] = self.completed_at.isoformat() if self.completed_at else None
        d["brick_metrics"] = [b.to_dict() for b in self.brick_metrics]
        return d

    def to_summary_dict(self) -> dict[str, Any]:
        """Convert to summary dictionary without per-brick details.

        Example:
            >>> rm = RunMetrics("run_001", "snapshot.txt")
            >>> d = rm.to_summary_dict()
            >>> "brick_metrics" in d
            False
            >>> "safe_count" in d
            True
        """
        d = self.to_dict()
        del d["brick_metrics"]
        return d


def export_to_json(metrics: RunMetrics, output_path: Path | str, include_bricks: bool = True) -> None:
    """Export run metrics to JSON file.

    Args:
        metrics: RunMetrics instance to export.
        output_path: Path to output JSON file.
        include_bricks: If True, include per-brick metrics. If False, summary only.
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    data = metrics.to_dict() if include_bricks else metrics.to_summary_dict()

    with output_path.open("w") as f:
        json.dump(data, f, indent=2)


def export_to_csv(metrics: RunMetrics, output_path: Path | str) -> None:
    """Export per-brick metrics to CSV file (header only when there are none)."""
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with output_path.open("w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=BRICK_CSV_FIELDS)
        writer.writeheader()
        for brick in metrics.brick_metrics:
            writer.writerow(brick.to_dict())


def print_summary(metrics: RunMetrics) -> str:
    """Generate human-readable summary of run metrics.

    Args:
        metrics: RunMetrics instance to summarize.

    Returns:
        Formatted multi-line summary string.
    """
    if metrics.order_independent is None:
        order_line = "not checked"
    else:
        order_line = "identical" if metrics.order_independent else "MISMATCH"

    lines = [
        "=" * 60,
        f"Run: {metrics.run_id}",
        f"Source: {metrics.source}",
        "=" * 60,
        f"Bricks: {metrics.brick_count}",
        f"Max Height: {metrics.max_height}",
        f"Settle Iterations: {metrics.settle_iterations}",
        f"Alternative Orderings: {order_line}",
        "",
        "Results:",
        f"  Safe to disintegrate: {metrics.safe_count}",
        f"  Total chain-reaction falls: {metrics.total_fall_count}",
        f"  Largest chain reaction: {metrics.max_fall_count}",
        "",
        f"Runtime: {metrics.runtime_seconds:.3f} seconds",
        "",
        f"Started:   {metrics.started_at.isoformat()}",
        f"Completed: {metrics.completed_at.isoformat() if metrics.completed_at else 'In Progress'}",
        "=" * 60,
    ]
    return "\n".join(lines)

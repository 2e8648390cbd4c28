"""
End-to-end pipeline: snapshot text -> settled stack -> both analyses.

    analysis = analyze_snapshot(lines)
    analysis.part_a   # bricks safe to disintegrate
    analysis.part_b   # total chain-reaction falls

Either everything succeeds or the first error propagates; there is no
partial result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, Optional, Tuple

from brickstack.analysis.cascade import fall_counts
from brickstack.analysis.safety import safe_bricks
from brickstack.core.models import Brick
from brickstack.core.parser import parse_snapshot
from brickstack.simulation.settling import SettledStack, SettlingEngine

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StackAnalysis:
    """Settled stack plus the results of both structural analyses."""

    stack: SettledStack
    safe: FrozenSet[int]
    fall_counts: Dict[int, int]

    @property
    def part_a(self) -> int:
        """Number of bricks safe to disintegrate."""
        return len(self.safe)

    @property
    def part_b(self) -> int:
        """Sum of chain-reaction fall counts over every brick."""
        return sum(self.fall_counts.values())

    @property
    def max_fall_count(self) -> int:
        return max(self.fall_counts.values(), default=0)


def analyze_bricks(
    bricks: Iterable[Brick],
    max_iterations: Optional[int] = None,
    verify: bool = True,
) -> StackAnalysis:
    """Settle already-parsed bricks and run both analyses."""
    engine = SettlingEngine(max_iterations=max_iterations, verify=verify)
    stack = engine.settle(bricks)
    analysis = StackAnalysis(
        stack=stack,
        safe=safe_bricks(stack.graph),
        fall_counts=fall_counts(stack),
    )
    logger.debug(
        "Analyzed %d bricks: %d safe, %d total falls",
        len(stack), analysis.part_a, analysis.part_b,
    )
    return analysis


def analyze_snapshot(
    lines: Iterable[str],
    max_iterations: Optional[int] = None,
    verify: bool = True,
) -> StackAnalysis:
    """Parse snapshot lines, settle them, and run both analyses."""
    return analyze_bricks(parse_snapshot(lines), max_iterations=max_iterations, verify=verify)


def solve(lines: Iterable[str]) -> Tuple[int, int]:
    """(safe-to-disintegrate count, total chain-reaction falls) for a snapshot."""
    analysis = analyze_snapshot(lines)
    return analysis.part_a, analysis.part_b

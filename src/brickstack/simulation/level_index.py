"""
Level index: z-level to settled brick ids.

Acceleration structure for the settling engine: answers "which settled
bricks occupy height z" without scanning every settled brick.  Updated
incrementally as bricks settle; never rebuilt.
"""

from collections import defaultdict
from typing import DefaultDict, FrozenSet, Set

from brickstack.core.models import Brick


class LevelIndex:
    """Multimap from integer z-level to the ids of bricks occupying it."""

    __slots__ = ("_levels", "_count")

    def __init__(self) -> None:
        self._levels: DefaultDict[int, Set[int]] = defaultdict(set)
        self._count = 0

    def insert(self, brick: Brick) -> None:
        """Register *brick* at every level it occupies."""
        z_min, z_max = brick.vertical_extent()
        for z in range(z_min, z_max + 1):
            self._levels[z].add(brick.id)
        self._count += 1

    def at(self, z: int) -> FrozenSet[int]:
        """Ids of settled bricks whose vertical extent includes *z*."""
        ids = self._levels.get(z)
        return frozenset(ids) if ids else frozenset()

    def __len__(self) -> int:
        return self._count

    def __repr__(self) -> str:
        return f"LevelIndex(bricks={self._count}, levels={len(self._levels)})"

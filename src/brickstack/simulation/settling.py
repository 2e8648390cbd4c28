"""
Settling engine: drops every brick until it rests on the ground or on
another brick.

Work-queue algorithm:
    1. Queue every brick in canonical order (ascending z_min, then id).
    2. Pop the head brick and look up settled bricks one level below its
       bottom (via the LevelIndex) whose footprint overlaps its own.
    3. If there are any, or the brick is already at z = 1, it settles:
       the overlapping bricks become its supporters and it is added to
       the index.  Otherwise it moves down one unit and is pushed to the
       tail of the queue.
    4. Repeat until the queue is empty.

Canonical ordering keeps the cyclic queue in the same relative order on
every pass, so a lower brick always moves out of the way before a higher
brick above it moves into that space.  The result therefore does not
depend on the order bricks are passed in.

Every brick's height only decreases and is bounded below by 1, so the loop
terminates.  As a guard against indexing bugs the number of queue pops is
capped (default: bricks × (max z + 1)); exceeding the cap raises
SettlingError.

Usage:
    stack = SettlingEngine().settle(bricks)
    stack.graph.supporters(3)
"""

import logging
from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, FrozenSet, Iterable, Iterator, List, Mapping, Optional

import numpy as np

from brickstack.core.errors import BrickGeometryError, SettlingError
from brickstack.core.graph import SupportGraph
from brickstack.core.models import Brick
from brickstack.simulation.level_index import LevelIndex

logger = logging.getLogger(__name__)

GROUND_LEVEL = 0


# ─────────────────────────────────────────────────────────────────────────────
# Settled stack (engine output)
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class SettledStack:
    """
    Final resting configuration of a brick snapshot.

    Attributes:
        bricks:     Settled bricks keyed by id.
        initial:    Bricks as given in the snapshot, keyed by id.
        supporters: Ids directly beneath each brick (empty = on the ground).
        iterations: Number of queue pops the engine needed.
        graph:      SupportGraph built from *supporters*.
    """
    bricks: Mapping[int, Brick]
    initial: Mapping[int, Brick]
    supporters: Mapping[int, FrozenSet[int]]
    iterations: int
    graph: SupportGraph

    def __len__(self) -> int:
        return len(self.bricks)

    @property
    def max_height(self) -> int:
        """Highest occupied z-level, 0 for an empty stack."""
        if not self.bricks:
            return GROUND_LEVEL
        return max(b.z_max for b in self.bricks.values())

    def z_min_of(self, brick_id: int) -> int:
        return self.bricks[brick_id].z_min

    def drop_distance(self, brick_id: int) -> int:
        """How far *brick_id* fell during settling."""
        return self.initial[brick_id].z_min - self.bricks[brick_id].z_min

    def iter_bricks(self) -> Iterator[Brick]:
        """Settled bricks bottom-up (ascending z_min, then id)."""
        return iter(sorted(self.bricks.values(), key=lambda b: (b.z_min, b.id)))

    def as_array(self) -> np.ndarray:
        """
        Settled geometry as an (n, 7) int array, rows in id order:
        id, x0, y0, z0, x1, y1, z1.
        """
        rows = [
            (b.id, *b.low, *b.high)
            for b in sorted(self.bricks.values(), key=lambda b: b.id)
        ]
        if not rows:
            return np.zeros((0, 7), dtype=np.int64)
        return np.array(rows, dtype=np.int64)

    # ── Consistency checks ───────────────────────────────────────────────

    def verify(self) -> None:
        """
        Re-check the settled geometry.

        Raises:
            SettlingError: a brick is at or below ground, moved up, shares
                a cube with another brick, or the support graph has an
                upward edge.
        """
        arr = self.as_array()
        if arr.size == 0:
            return

        below = arr[arr[:, 3] <= GROUND_LEVEL, 0]
        if below.size:
            raise SettlingError(f"bricks below ground after settling: {below.tolist()}")

        initial_z = np.array([self.initial[int(bid)].z_min for bid in arr[:, 0]])
        raised = arr[arr[:, 3] > initial_z, 0]
        if raised.size:
            raise SettlingError(f"bricks moved up during settling: {raised.tolist()}")

        clash = _find_intersection(arr)
        if clash is not None:
            raise SettlingError(f"settled bricks {clash[0]} and {clash[1]} intersect")

        if not self.graph.is_acyclic(self.z_min_of):
            raise SettlingError("support graph contains an edge that does not point downward")

    def __repr__(self) -> str:
        return (
            f"SettledStack(bricks={len(self)}, max_h={self.max_height}, "
            f"iterations={self.iterations})"
        )


def _find_intersection(arr: np.ndarray) -> Optional[tuple]:
    """Return the ids of the first pair of bricks sharing a cube, if any."""
    by_level: Dict[int, List[int]] = {}
    for row, (z0, z1) in enumerate(arr[:, [3, 6]]):
        for z in range(int(z0), int(z1) + 1):
            by_level.setdefault(z, []).append(row)

    for rows in by_level.values():
        if len(rows) < 2:
            continue
        sub = arr[rows]
        x0, y0, x1, y1 = sub[:, 1], sub[:, 2], sub[:, 4], sub[:, 5]
        hit = (
            (x0[:, None] <= x1[None, :]) & (x0[None, :] <= x1[:, None])
            & (y0[:, None] <= y1[None, :]) & (y0[None, :] <= y1[:, None])
        )
        np.fill_diagonal(hit, False)
        pairs = np.argwhere(hit)
        if pairs.size:
            i, j = pairs[0]
            return int(sub[i, 0]), int(sub[j, 0])
    return None


# ─────────────────────────────────────────────────────────────────────────────
# Engine
# ─────────────────────────────────────────────────────────────────────────────

class SettlingEngine:
    """
    Drops bricks under gravity and records who rests on whom.

    Args:
        max_iterations: Cap on queue pops.  None derives the cap from the
                        input (bricks × (max z + 1)).
        verify:         Run SettledStack.verify() on the result.
    """

    def __init__(self, max_iterations: Optional[int] = None, verify: bool = True) -> None:
        self.max_iterations = max_iterations
        self.verify = verify

    def iteration_bound(self, bricks: List[Brick]) -> int:
        if self.max_iterations is not None:
            return self.max_iterations
        if not bricks:
            return 0
        return len(bricks) * (max(b.z_max for b in bricks) + 1)

    def settle(self, bricks: Iterable[Brick]) -> SettledStack:
        """
        Settle *bricks* and return the resulting stack.

        Raises:
            BrickGeometryError: a brick starts at or below the ground, or two
                bricks share an id.
            SettlingError: the iteration cap was hit, or the settled stack
                failed verification.
        """
        pending = list(bricks)
        initial: Dict[int, Brick] = {}
        for brick in pending:
            if brick.id in initial:
                raise BrickGeometryError(f"duplicate brick id {brick.id}")
            if brick.z_min <= GROUND_LEVEL:
                raise BrickGeometryError(
                    f"brick {brick.id} starts at z={brick.z_min}, "
                    f"at or below the ground (z={GROUND_LEVEL})"
                )
            initial[brick.id] = brick

        limit = self.iteration_bound(pending)
        queue: Deque[Brick] = deque(sorted(pending, key=lambda b: (b.z_min, b.id)))
        index = LevelIndex()
        settled: Dict[int, Brick] = {}
        supporters: Dict[int, FrozenSet[int]] = {}
        iterations = 0

        while queue:
            iterations += 1
            if iterations > limit:
                raise SettlingError(
                    f"settling exceeded {limit} iterations with "
                    f"{len(queue)} bricks still falling"
                )
            brick = queue.popleft()
            below = self._candidate_supports(brick, index, settled)

            if below or brick.z_min == GROUND_LEVEL + 1:
                settled[brick.id] = brick
                supporters[brick.id] = below
                index.insert(brick)
            else:
                queue.append(brick.drop_to(brick.z_min - 1))

        logger.debug(
            "Settled %d bricks in %d iterations (limit %d)",
            len(settled), iterations, limit,
        )

        stack = SettledStack(
            bricks=settled,
            initial=initial,
            supporters=supporters,
            iterations=iterations,
            graph=SupportGraph(supporters),
        )
        if self.verify:
            stack.verify()
        return stack

    @staticmethod
    def _candidate_supports(
        brick: Brick, index: LevelIndex, settled: Mapping[int, Brick],
    ) -> FrozenSet[int]:
        """Settled bricks directly under *brick* with an overlapping footprint."""
        level = brick.z_min - 1
        found = set()
        for sid in index.at(level):
            other = settled[sid]
            if not other.horizontal_overlap(brick):
                continue
            if other.z_max != level:
                raise SettlingError(
                    f"brick {brick.id} at z={brick.z_min} intersects "
                    f"settled brick {sid} spanning z={other.z_min}..{other.z_max}"
                )
            found.add(sid)
        return frozenset(found)


def settle(bricks: Iterable[Brick], max_iterations: Optional[int] = None) -> SettledStack:
    """Convenience wrapper: settle with a default engine."""
    return SettlingEngine(max_iterations=max_iterations).settle(bricks)

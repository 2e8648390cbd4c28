"""
Cascade analysis: how many bricks fall when one brick is removed.

For a removed brick X, a brick Y falls iff it is not on the ground and
every one of its supporters has already fallen (X included).  Walking
the bricks in ascending settled z_min is a valid topological order of
the support graph (support always points strictly downward), so one
global order serves every removal and each brick is decided after all
of its supporters.

Bricks at or below X's position in that order can never fall because of
X, so each walk starts right after X.
"""

from typing import Dict, FrozenSet, List, Optional, Sequence

import numpy as np

from brickstack.simulation.settling import SettledStack


def topological_order(stack: SettledStack) -> List[int]:
    """Brick ids sorted by (settled z_min, id)."""
    if not stack.bricks:
        return []
    arr = stack.as_array()
    order = np.lexsort((arr[:, 0], arr[:, 3]))
    return [int(bid) for bid in arr[order, 0]]


def fallen_set(
    stack: SettledStack,
    brick_id: int,
    order: Optional[Sequence[int]] = None,
) -> FrozenSet[int]:
    """Ids of the bricks that fall if *brick_id* alone is removed."""
    if brick_id not in stack.bricks:
        raise KeyError(f"unknown brick id {brick_id}")
    if order is None:
        order = topological_order(stack)

    graph = stack.graph
    fallen = {brick_id}
    start = list(order).index(brick_id) + 1
    for bid in order[start:]:
        below = graph.supporters(bid)
        if below and below <= fallen:
            fallen.add(bid)
    fallen.discard(brick_id)
    return frozenset(fallen)


def fall_count(
    stack: SettledStack,
    brick_id: int,
    order: Optional[Sequence[int]] = None,
) -> int:
    """Number of other bricks that fall if *brick_id* is removed."""
    return len(fallen_set(stack, brick_id, order))


def fall_counts(stack: SettledStack) -> Dict[int, int]:
    """fall_count for every brick, keyed by id."""
    order = topological_order(stack)
    return {bid: fall_count(stack, bid, order) for bid in order}


def total_fall_count(stack: SettledStack) -> int:
    """Sum of fall_count over all bricks."""
    return sum(fall_counts(stack).values())

"""
Safety analysis: which bricks can be removed without anything falling.

A brick is unsafe exactly when it is the sole supporter of some other
brick.  Safety depends only on direct support counts, so a single pass
over the graph is enough; no cascade simulation is needed.
"""

from typing import FrozenSet

from brickstack.core.graph import SupportGraph


def unsafe_bricks(graph: SupportGraph) -> FrozenSet[int]:
    """Ids that are the only supporter of at least one other brick."""
    unsafe = set()
    for bid in graph.ids:
        sole = graph.sole_supporter(bid)
        if sole is not None:
            unsafe.add(sole)
    return frozenset(unsafe)


def safe_bricks(graph: SupportGraph) -> FrozenSet[int]:
    """Ids whose removal leaves every other brick with a supporter."""
    return frozenset(graph.ids) - unsafe_bricks(graph)


def is_safe(graph: SupportGraph, brick_id: int) -> bool:
    """Check a single brick: every brick it holds up has another supporter."""
    return all(len(graph.supporters(above)) > 1 for above in graph.supported(brick_id))


def count_safe(graph: SupportGraph) -> int:
    """Number of bricks that are safe to disintegrate."""
    return len(graph) - len(unsafe_bricks(graph))

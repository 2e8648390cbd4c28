"""
Support graph: the directed "rests on" relation between settled bricks.

Built once from the settling engine's supporter sets and never mutated.
Both structural analyses read from it.

Usage:
    graph = SupportGraph(stack.supporters)
    graph.supporters(5)   # ids directly beneath brick 5
    graph.supported(2)    # ids resting directly on brick 2
"""

from typing import Callable, Dict, FrozenSet, Iterable, Iterator, Mapping, Optional, Tuple


class SupportGraph:
    """
    Supporter / supported adjacency over brick ids.

    An empty supporter set means the brick rests on the ground.
    """

    __slots__ = ("_supporters", "_supported")

    def __init__(self, supporters: Mapping[int, Iterable[int]]) -> None:
        self._supporters: Dict[int, FrozenSet[int]] = {
            bid: frozenset(below) for bid, below in supporters.items()
        }
        inverse: Dict[int, set] = {bid: set() for bid in self._supporters}
        for bid, below in self._supporters.items():
            for sid in below:
                if sid not in inverse:
                    raise KeyError(f"brick {bid} is supported by unknown brick {sid}")
                inverse[sid].add(bid)
        self._supported: Dict[int, FrozenSet[int]] = {
            bid: frozenset(above) for bid, above in inverse.items()
        }

    # ── Adjacency ────────────────────────────────────────────────────────

    def supporters(self, brick_id: int) -> FrozenSet[int]:
        """Bricks directly beneath *brick_id*."""
        return self._supporters[brick_id]

    def supported(self, brick_id: int) -> FrozenSet[int]:
        """Bricks resting directly on *brick_id*."""
        return self._supported[brick_id]

    def is_grounded(self, brick_id: int) -> bool:
        """True if the brick rests on the ground."""
        return not self._supporters[brick_id]

    def sole_supporter(self, brick_id: int) -> Optional[int]:
        """The only supporter of *brick_id*, or None if it has zero or several."""
        below = self._supporters[brick_id]
        if len(below) != 1:
            return None
        return next(iter(below))

    @property
    def ids(self) -> Tuple[int, ...]:
        return tuple(sorted(self._supporters))

    def edges(self) -> Iterator[Tuple[int, int]]:
        """Yield (supporter, supported) pairs in id order."""
        for bid in self.ids:
            for sid in sorted(self._supporters[bid]):
                yield sid, bid

    def is_acyclic(self, z_min_of: Callable[[int], int]) -> bool:
        """
        Check that every edge points strictly downward.

        A graph whose edges all decrease z cannot contain a cycle.
        """
        return all(z_min_of(sid) < z_min_of(bid) for sid, bid in self.edges())

    # ── Container protocol ───────────────────────────────────────────────

    def __len__(self) -> int:
        return len(self._supporters)

    def __contains__(self, brick_id: object) -> bool:
        return brick_id in self._supporters

    def __repr__(self) -> str:
        edge_count = sum(len(below) for below in self._supporters.values())
        return f"SupportGraph(bricks={len(self)}, edges={edge_count})"

"""
Tests for the settling engine, level index and support graph.

Tests cover:
- Example stack: final heights and supporter sets
- Ground invariant, monotonic settling, fixed point (idempotence)
- Input-order independence over random snapshots
- Iteration guard and invalid input
"""

import pytest

from conftest import A, B, C, D, E, F, G
from brickstack.core.errors import BrickGeometryError, SettlingError
from brickstack.core.graph import SupportGraph
from brickstack.core.models import Brick
from brickstack.core.parser import parse_snapshot
from brickstack.runner.dataset import ORDERING_STRATEGIES, generate_snapshot
from brickstack.simulation.level_index import LevelIndex
from brickstack.simulation.settling import SettledStack, SettlingEngine, settle


@pytest.fixture
def random_bricks():
    return generate_snapshot(count=60, seed=11, footprint=6, max_length=3, max_start_z=80)


# ---------------------------------------------------------------------------
# 1. Level index
# ---------------------------------------------------------------------------

class TestLevelIndex:
    def test_vertical_brick_registered_at_every_level(self):
        index = LevelIndex()
        index.insert(Brick.from_endpoints(4, (0, 0, 2), (0, 0, 4)))
        assert index.at(1) == frozenset()
        assert index.at(2) == index.at(3) == index.at(4) == frozenset({4})
        assert index.at(5) == frozenset()
        assert len(index) == 1

    def test_multiple_bricks_share_level(self):
        index = LevelIndex()
        index.insert(Brick.from_endpoints(0, (0, 0, 1), (2, 0, 1)))
        index.insert(Brick.from_endpoints(1, (0, 2, 1), (2, 2, 1)))
        assert index.at(1) == frozenset({0, 1})


# ---------------------------------------------------------------------------
# 2. Example stack
# ---------------------------------------------------------------------------

class TestExampleStack:
    def test_settled_heights(self, example_stack):
        expected = {A: (1, 1), B: (2, 2), C: (2, 2), D: (3, 3), E: (3, 3), F: (4, 4), G: (5, 6)}
        actual = {bid: b.vertical_extent() for bid, b in example_stack.bricks.items()}
        assert actual == expected

    def test_supporters(self, example_stack):
        graph = example_stack.graph
        assert graph.supporters(A) == frozenset()
        assert graph.supporters(B) == frozenset({A})
        assert graph.supporters(C) == frozenset({A})
        assert graph.supporters(D) == frozenset({B, C})
        assert graph.supporters(E) == frozenset({B, C})
        assert graph.supporters(F) == frozenset({D, E})
        assert graph.supporters(G) == frozenset({F})

    def test_supported_is_inverse(self, example_stack):
        graph = example_stack.graph
        assert graph.supported(A) == frozenset({B, C})
        assert graph.supported(B) == frozenset({D, E})
        assert graph.supported(F) == frozenset({G})
        assert graph.supported(G) == frozenset()
        for sid, bid in graph.edges():
            assert bid in graph.supported(sid)
            assert sid in graph.supporters(bid)

    def test_footprints_unchanged(self, example_stack):
        for bid, brick in example_stack.bricks.items():
            before = example_stack.initial[bid]
            assert brick.x_extent == before.x_extent
            assert brick.y_extent == before.y_extent
            assert brick.length == before.length

    def test_drop_distance_and_max_height(self, example_stack):
        assert example_stack.drop_distance(A) == 0
        assert example_stack.drop_distance(G) == 3
        assert example_stack.max_height == 6

    def test_iter_bricks_bottom_up(self, example_stack):
        heights = [b.z_min for b in example_stack.iter_bricks()]
        assert heights == sorted(heights)
        assert [b.id for b in example_stack.iter_bricks()][:3] == [A, B, C]

    def test_as_array_shape(self, example_stack):
        arr = example_stack.as_array()
        assert arr.shape == (7, 7)
        assert arr[:, 0].tolist() == list(range(7))
        assert arr[G, 3] == 5 and arr[G, 6] == 6


# ---------------------------------------------------------------------------
# 3. Small hand-built stacks
# ---------------------------------------------------------------------------

class TestSmallStacks:
    def test_single_brick_on_ground(self):
        stack = settle(parse_snapshot(["0,0,1~0,0,1"]))
        assert stack.bricks[0].vertical_extent() == (1, 1)
        assert stack.graph.is_grounded(0)

    def test_floating_brick_falls_to_ground(self):
        stack = settle(parse_snapshot(["3,3,50~3,5,50"]))
        assert stack.bricks[0].z_min == 1
        assert stack.supporters[0] == frozenset()

    def test_two_stacked_cubes(self):
        stack = settle(parse_snapshot(["0,0,1~0,0,1", "0,0,2~0,0,2"]))
        assert stack.graph.supporters(1) == frozenset({0})
        assert stack.graph.sole_supporter(1) == 0

    def test_vertical_brick_supports_from_its_top(self):
        stack = settle(parse_snapshot(["0,0,1~0,0,3", "0,0,10~2,0,10"]))
        assert stack.bricks[1].z_min == 4
        assert stack.graph.supporters(1) == frozenset({0})

    def test_falling_together_does_not_interpenetrate(self):
        # The upper brick is listed first and starts directly on the lower one.
        stack = settle(parse_snapshot(["0,0,6~2,0,6", "1,0,5~1,2,5"]))
        assert stack.bricks[1].z_min == 1
        assert stack.bricks[0].z_min == 2
        assert stack.graph.supporters(0) == frozenset({1})

    def test_non_overlapping_footprints_fall_independently(self):
        stack = settle(parse_snapshot(["0,0,1~0,0,1", "1,1,9~1,1,9"]))
        assert stack.bricks[1].z_min == 1
        assert stack.graph.is_grounded(1)

    def test_empty_snapshot(self):
        stack = settle([])
        assert len(stack) == 0
        assert stack.max_height == 0
        assert stack.iterations == 0


# ---------------------------------------------------------------------------
# 4. Physical invariants over random snapshots
# ---------------------------------------------------------------------------

class TestInvariants:
    def test_ground_invariant(self, random_bricks):
        stack = settle(random_bricks)
        assert all(b.z_min >= 1 for b in stack.bricks.values())

    def test_monotonic_settling(self, random_bricks):
        stack = settle(random_bricks)
        for brick in random_bricks:
            assert stack.bricks[brick.id].z_min <= brick.z_min

    def test_fixed_point(self, random_bricks):
        first = settle(random_bricks)
        second = settle(first.bricks.values())
        assert dict(second.bricks) == dict(first.bricks)
        assert dict(second.supporters) == dict(first.supporters)

    def test_support_edges_point_down(self, random_bricks):
        stack = settle(random_bricks)
        assert stack.graph.is_acyclic(stack.z_min_of)
        for sid, bid in stack.graph.edges():
            assert stack.bricks[sid].z_max + 1 == stack.bricks[bid].z_min
            assert stack.bricks[sid].horizontal_overlap(stack.bricks[bid])

    def test_every_raised_brick_is_supported(self, random_bricks):
        stack = settle(random_bricks)
        for bid, brick in stack.bricks.items():
            if brick.z_min > 1:
                assert stack.graph.supporters(bid), f"brick {bid} floats at z={brick.z_min}"

    def test_no_intersections(self, random_bricks):
        stack = settle(random_bricks)
        settled = list(stack.bricks.values())
        for i, a in enumerate(settled):
            for b in settled[i + 1:]:
                assert not a.overlaps(b)

    @pytest.mark.parametrize("ordering", sorted(ORDERING_STRATEGIES))
    def test_input_order_independence(self, random_bricks, ordering):
        reference = settle(random_bricks)
        reordered = settle(ORDERING_STRATEGIES[ordering](random_bricks))
        assert dict(reordered.bricks) == dict(reference.bricks)
        assert dict(reordered.supporters) == dict(reference.supporters)


# ---------------------------------------------------------------------------
# 5. Errors
# ---------------------------------------------------------------------------

class TestErrors:
    def test_iteration_guard(self):
        bricks = parse_snapshot(["0,0,40~0,0,40"])
        with pytest.raises(SettlingError, match="exceeded 5 iterations"):
            SettlingEngine(max_iterations=5).settle(bricks)

    def test_default_bound_is_sufficient(self):
        bricks = parse_snapshot(["0,0,300~0,0,300", "0,0,301~0,0,301"])
        engine = SettlingEngine()
        assert engine.iteration_bound(bricks) == 2 * 302
        stack = engine.settle(bricks)
        assert stack.iterations <= engine.iteration_bound(bricks)

    def test_brick_at_ground_level_rejected(self):
        with pytest.raises(BrickGeometryError, match="below the ground"):
            settle(parse_snapshot(["0,0,0~0,0,2"]))

    def test_duplicate_ids_rejected(self):
        brick = Brick.from_endpoints(0, (0, 0, 1), (0, 0, 1))
        with pytest.raises(BrickGeometryError, match="duplicate"):
            settle([brick, brick.drop_to(5)])

    def test_interpenetrating_input_detected(self):
        bricks = [
            Brick.from_endpoints(0, (0, 0, 1), (0, 0, 3)),
            Brick.from_endpoints(1, (0, 0, 2), (2, 0, 2)),
        ]
        with pytest.raises(SettlingError):
            settle(bricks)

    def test_verify_rejects_tampered_stack(self, example_stack):
        moved = dict(example_stack.bricks)
        moved[G] = example_stack.initial[G].drop_to(20)
        tampered = SettledStack(
            bricks=moved,
            initial=example_stack.initial,
            supporters=example_stack.supporters,
            iterations=example_stack.iterations,
            graph=example_stack.graph,
        )
        with pytest.raises(SettlingError, match="moved up"):
            tampered.verify()


# ---------------------------------------------------------------------------
# 6. Support graph construction
# ---------------------------------------------------------------------------

class TestSupportGraph:
    def test_unknown_supporter_rejected(self):
        with pytest.raises(KeyError):
            SupportGraph({0: [], 1: [5]})

    def test_container_protocol(self, example_stack):
        graph = example_stack.graph
        assert len(graph) == 7
        assert G in graph
        assert 99 not in graph
        assert graph.ids == tuple(range(7))
        assert repr(graph) == "SupportGraph(bricks=7, edges=9)"

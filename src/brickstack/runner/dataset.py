"""Random snapshot generation and input orderings for brick stack experiments."""

import random
from pathlib import Path
from typing import Callable

from brickstack.core.models import Brick


def generate_snapshot(
    count: int = 100,
    seed: int | None = None,
    footprint: int = 10,
    max_length: int = 4,
    max_start_z: int = 200,
    max_attempts: int = 10_000,
) -> list[Brick]:
    """
    Generate random, mutually non-overlapping bricks floating above ground.

    Args:
        count: Number of bricks to generate (default: 100)
        seed: Random seed for reproducibility (default: None)
        footprint: Bricks lie in x, y within [0, footprint) (default: 10)
        max_length: Maximum number of cubes per brick (default: 4)
        max_start_z: Highest starting z for a brick's bottom (default: 200)
        max_attempts: Give up after this many rejected placements

    Returns:
        List of Brick objects with ids 0..count-1

    Raises:
        ValueError: If the bricks cannot be placed without overlap
    """
    if seed is not None:
        random.seed(seed)

    bricks: list[Brick] = []
    attempts = 0
    while len(bricks) < count:
        attempts += 1
        if attempts > max_attempts:
            raise ValueError(
                f"Could not place {count} bricks without overlap "
                f"after {max_attempts} attempts (placed {len(bricks)})"
            )

        # Random axis and length; single cubes when length is 1
        axis = random.randrange(3)
        length = random.randint(1, max_length)
        low = [
            random.randrange(footprint),
            random.randrange(footprint),
            random.randint(1, max_start_z),
        ]
        high = list(low)
        high[axis] += length - 1
        if axis < 2 and high[axis] >= footprint:
            continue

        candidate = Brick.from_endpoints(len(bricks), tuple(low), tuple(high))
        if any(candidate.overlaps(other) for other in bricks):
            continue
        bricks.append(candidate)

    return bricks


def format_snapshot(bricks: list[Brick]) -> list[str]:
    """Render bricks as snapshot lines, in the given order."""
    return [str(b) for b in bricks]


def write_snapshot(path: Path | str, bricks: list[Brick]) -> Path:
    """Write bricks to *path*, one snapshot line per brick."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(format_snapshot(bricks)) + "\n", encoding="utf-8")
    return path


def shuffled_order(bricks: list[Brick]) -> list[Brick]:
    """
    Return bricks in random order.

    Args:
        bricks: List of bricks

    Returns:
        Shuffled copy of bricks
    """
    shuffled = bricks.copy()
    random.shuffle(shuffled)
    return shuffled


def reversed_order(bricks: list[Brick]) -> list[Brick]:
    """Return bricks in reverse input order."""
    return list(reversed(bricks))


def height_sorted_order(bricks: list[Brick]) -> list[Brick]:
    """
    Sort bricks by starting height (highest first).

    Args:
        bricks: List of bricks

    Returns:
        Bricks sorted by z_min descending
    """
    return sorted(bricks, key=lambda b: b.z_min, reverse=True)


# Map of ordering strategy names to functions
ORDERING_STRATEGIES: dict[str, Callable[[list[Brick]], list[Brick]]] = {
    "shuffled": shuffled_order,
    "reversed": reversed_order,
    "height_sorted": height_sorted_order,
}


def get_ordering_strategy(name: str) -> Callable[[list[Brick]], list[Brick]]:
    """
    Get an ordering strategy function by name.

    Args:
        name: Strategy name (shuffled, reversed, height_sorted)

    Returns:
        Ordering function

    Raises:
        ValueError: If strategy name is not recognized
    """
    if name not in ORDERING_STRATEGIES:
        raise ValueError(
            f"Unknown ordering strategy: {name}. "
            f"Available: {list(ORDERING_STRATEGIES.keys())}"
        )
    return ORDERING_STRATEGIES[name]

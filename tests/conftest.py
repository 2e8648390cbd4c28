"""
Shared fixtures for the brickstack test suite.

Run with:
    python -m pytest tests/ -v
"""

import os
import sys

import pytest

# Ensure the src/ layout is importable without installing
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))

EXAMPLE_SNAPSHOT = [
    "1,0,1~1,2,1",
    "0,0,2~2,0,2",
    "0,2,3~2,2,3",
    "0,0,4~0,2,4",
    "2,0,5~2,2,5",
    "0,1,6~2,1,6",
    "1,1,8~1,1,9",
]

# Letters used in the classic diagram of the example stack
A, B, C, D, E, F, G = range(7)


@pytest.fixture
def example_lines():
    """The seven-brick example snapshot (ids 0-6 = A-G)."""
    return list(EXAMPLE_SNAPSHOT)


@pytest.fixture
def example_bricks(example_lines):
    from brickstack.core.parser import parse_snapshot
    return parse_snapshot(example_lines)


@pytest.fixture
def example_stack(example_bricks):
    from brickstack.simulation.settling import SettlingEngine
    return SettlingEngine().settle(example_bricks)

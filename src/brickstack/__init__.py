"""
brickstack: brick stack settling and support-dependency simulator.

Public API:
    from brickstack import parse_snapshot, settle, analyze_snapshot, solve
    from brickstack.analysis import count_safe, fall_counts
    from brickstack.runner.experiment import StackRunner
"""

from brickstack.core import (
    Brick,
    BrickGeometryError,
    BrickStackError,
    ConfigError,
    SettlingError,
    SnapshotParseError,
    SupportGraph,
    parse_snapshot,
)
from brickstack.pipeline import StackAnalysis, analyze_bricks, analyze_snapshot, solve
from brickstack.simulation import SettledStack, SettlingEngine, settle

__version__ = "0.1.0"

__all__ = [
    "Brick",
    "SupportGraph",
    "SettledStack",
    "SettlingEngine",
    "StackAnalysis",
    "parse_snapshot",
    "settle",
    "analyze_bricks",
    "analyze_snapshot",
    "solve",
    "BrickStackError",
    "SnapshotParseError",
    "BrickGeometryError",
    "SettlingError",
    "ConfigError",
]

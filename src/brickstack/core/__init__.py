"""Brick value type, snapshot parsing, support graph and error taxonomy."""

from .errors import (
    BrickGeometryError,
    BrickStackError,
    ConfigError,
    SettlingError,
    SnapshotParseError,
)
from .graph import SupportGraph
from .models import Brick
from .parser import load_snapshot, parse_line, parse_snapshot

__all__ = [
    "Brick",
    "SupportGraph",
    "parse_line",
    "parse_snapshot",
    "load_snapshot",
    # Errors
    "BrickStackError",
    "SnapshotParseError",
    "BrickGeometryError",
    "SettlingError",
    "ConfigError",
]

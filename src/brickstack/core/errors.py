"""
Error taxonomy for brick stack simulation.

All errors derive from BrickStackError so callers can catch the whole
family at once.  None of them are retried: the computation is
deterministic, so the same input always fails the same way.
"""


class BrickStackError(Exception):
    """Base class for all brick stack errors."""


class SnapshotParseError(BrickStackError):
    """A snapshot line could not be parsed into a brick."""

    def __init__(self, line_number: int, line: str, reason: str) -> None:
        self.line_number = line_number
        self.line = line
        self.reason = reason
        super().__init__(f"line {line_number}: {reason}: {line!r}")


class BrickGeometryError(BrickStackError):
    """Brick endpoints do not describe a single straight segment above ground."""


class SettlingError(BrickStackError):
    """Settling did not reach a consistent fixed point (indexing or geometry bug)."""


class ConfigError(BrickStackError):
    """Run configuration file is unreadable or holds invalid values."""

"""
Snapshot parser: text lines to Brick objects.

Each line has the form ``x1,y1,z1~x2,y2,z2``.  Ids are assigned in line
order, starting at 0.  Blank lines are skipped and do not consume an id.
Parsing is all-or-nothing: the first bad line raises and no bricks are
returned.
"""

from pathlib import Path
from typing import Iterable, List, Tuple

from brickstack.core.errors import BrickGeometryError, SnapshotParseError
from brickstack.core.models import Brick, Point3


def _parse_point(text: str, line_number: int, line: str) -> Point3:
    tokens = text.split(",")
    if len(tokens) != 3:
        raise SnapshotParseError(
            line_number, line, f"expected 3 coordinates, got {len(tokens)}"
        )
    coords = []
    for token in tokens:
        token = token.strip()
        digits = token[1:] if token.startswith("-") else token
        if not (digits.isascii() and digits.isdigit()):
            raise SnapshotParseError(
                line_number, line, f"coordinate {token!r} is not an integer"
            )
        value = int(token)
        if value < 0:
            raise SnapshotParseError(
                line_number, line, f"coordinate {value} is negative"
            )
        coords.append(value)
    return coords[0], coords[1], coords[2]


def parse_line(line: str, brick_id: int, line_number: int = 0) -> Brick:
    """
    Parse a single snapshot line.

    Args:
        line:        Raw text, e.g. ``"1,0,1~1,2,1"``.
        brick_id:    Id to give the brick.
        line_number: 1-based line number used in error messages.

    Raises:
        SnapshotParseError: wrong token count or non-integer coordinate.
        BrickGeometryError: endpoints do not form a straight segment.
    """
    stripped = line.strip()
    parts = stripped.split("~")
    if len(parts) != 2:
        raise SnapshotParseError(
            line_number, line, f"expected 2 endpoints separated by '~', got {len(parts)}"
        )
    p1 = _parse_point(parts[0], line_number, line)
    p2 = _parse_point(parts[1], line_number, line)
    try:
        return Brick.from_endpoints(brick_id, p1, p2)
    except BrickGeometryError as exc:
        raise BrickGeometryError(f"line {line_number}: {exc}") from exc


def parse_snapshot(lines: Iterable[str]) -> List[Brick]:
    """Parse every non-blank line into a Brick, ids in line order."""
    bricks: List[Brick] = []
    for line_number, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        bricks.append(parse_line(line, len(bricks), line_number))
    return bricks


def load_snapshot(path: Path | str) -> Tuple[List[str], List[Brick]]:
    """Read a snapshot file, returning its raw lines and parsed bricks."""
    lines = Path(path).read_text(encoding="utf-8").splitlines()
    return lines, parse_snapshot(lines)

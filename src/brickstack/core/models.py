"""
Core brick model.

A Brick is a straight run of unit cubes on the integer lattice, stored as
its canonical low / high corners.  Bricks are frozen values: the settling
engine "moves" a brick by replacing it with a copy at a lower height.

Classes:
    Brick: immutable lattice brick with footprint / overlap predicates
"""

from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

from brickstack.core.errors import BrickGeometryError

Point3 = Tuple[int, int, int]

AXES = ("x", "y", "z")


# ─────────────────────────────────────────────────────────────────────────────
# Brick
# ─────────────────────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Brick:
    """
    A single straight brick occupying the closed box [low, high].

    Attributes:
        id:   Stable identifier assigned at parse time.
        low:  Componentwise minimum corner.
        high: Componentwise maximum corner.
    """
    id: int
    low: Point3
    high: Point3

    @classmethod
    def from_endpoints(cls, brick_id: int, p1: Sequence[int], p2: Sequence[int]) -> "Brick":
        """
        Build a brick from two endpoints given in any order.

        Each axis is canonicalized independently, so ``a~b`` and ``b~a``
        describe the same brick.

        Raises:
            BrickGeometryError: endpoints differ on more than one axis.
        """
        if len(p1) != 3 or len(p2) != 3:
            raise BrickGeometryError(
                f"brick {brick_id}: endpoints must have 3 coordinates, "
                f"got {len(p1)} and {len(p2)}"
            )
        differing = [AXES[i] for i in range(3) if p1[i] != p2[i]]
        if len(differing) > 1:
            raise BrickGeometryError(
                f"brick {brick_id}: endpoints differ along {', '.join(differing)}; "
                f"a brick must extend along at most one axis"
            )
        low = (min(p1[0], p2[0]), min(p1[1], p2[1]), min(p1[2], p2[2]))
        high = (max(p1[0], p2[0]), max(p1[1], p2[1]), max(p1[2], p2[2]))
        return cls(id=brick_id, low=low, high=high)

    # ── Extents ──────────────────────────────────────────────────────────

    @property
    def x_extent(self) -> Tuple[int, int]:
        return self.low[0], self.high[0]

    @property
    def y_extent(self) -> Tuple[int, int]:
        return self.low[1], self.high[1]

    @property
    def z_min(self) -> int:
        return self.low[2]

    @property
    def z_max(self) -> int:
        return self.high[2]

    def vertical_extent(self) -> Tuple[int, int]:
        """(z_min, z_max) of the brick, both inclusive."""
        return self.low[2], self.high[2]

    @property
    def axis(self) -> Optional[str]:
        """Axis the brick extends along, or None for a single cube."""
        for i, name in enumerate(AXES):
            if self.low[i] != self.high[i]:
                return name
        return None

    @property
    def length(self) -> int:
        """Number of unit cubes in the brick."""
        return max(self.high[i] - self.low[i] for i in range(3)) + 1

    @property
    def volume(self) -> int:
        return self.length

    # ── Predicates ───────────────────────────────────────────────────────

    def horizontal_overlap(self, other: "Brick") -> bool:
        """True iff the x/y footprints share at least one unit cell."""
        return (
            self.low[0] <= other.high[0]
            and other.low[0] <= self.high[0]
            and self.low[1] <= other.high[1]
            and other.low[1] <= self.high[1]
        )

    def overlaps(self, other: "Brick") -> bool:
        """True iff the two bricks share at least one lattice cube."""
        return (
            self.horizontal_overlap(other)
            and self.low[2] <= other.high[2]
            and other.low[2] <= self.high[2]
        )

    # ── Movement ─────────────────────────────────────────────────────────

    def drop_to(self, z_min: int) -> "Brick":
        """Copy of this brick translated vertically so its bottom is at *z_min*."""
        dz = z_min - self.low[2]
        if dz == 0:
            return self
        return Brick(
            id=self.id,
            low=(self.low[0], self.low[1], self.low[2] + dz),
            high=(self.high[0], self.high[1], self.high[2] + dz),
        )

    # ── Serialization ────────────────────────────────────────────────────

    def to_dict(self) -> dict:
        return {"id": self.id, "low": list(self.low), "high": list(self.high)}

    @classmethod
    def from_dict(cls, d: dict) -> "Brick":
        return cls.from_endpoints(d["id"], tuple(d["low"]), tuple(d["high"]))

    def __str__(self) -> str:
        return (
            f"{self.low[0]},{self.low[1]},{self.low[2]}"
            f"~{self.high[0]},{self.high[1]},{self.high[2]}"
        )

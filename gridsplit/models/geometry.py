from __future__ import annotations
from dataclasses import dataclass, replace
import numbers

from .exceptions import InvalidConfig


def _clamp01(v: float) -> float:
    return min(1.0, max(0.0, float(v)))


@dataclass(frozen=True)
class NormalizedRect:
    """
    Crop region in fractions of the source size (x, y, width, height ∈ [0, 1]).
    Out-of-range values are not rejected here; ``clamped()`` pulls them
    back inside the unit square for the consumer.
    """
    x: float = 0.0
    y: float = 0.0
    width: float = 1.0
    height: float = 1.0

    def clamped(self) -> NormalizedRect:
        x = _clamp01(self.x)
        y = _clamp01(self.y)
        return NormalizedRect(
            x=x,
            y=y,
            width=min(_clamp01(self.width), 1.0 - x),
            height=min(_clamp01(self.height), 1.0 - y),
        )

    def with_changes(self, **changes) -> NormalizedRect:
        return replace(self, **changes)


@dataclass(frozen=True)
class GridSpec:
    rows: int = 3
    cols: int = 3

    def __post_init__(self):
        for name in ("rows", "cols"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, numbers.Integral):
                raise InvalidConfig(f"Grid {name} must be an integer, got {value!r}")
        if self.rows < 1 or self.cols < 1:
            raise InvalidConfig(f"Grid needs rows >= 1 and cols >= 1, got {self.rows}x{self.cols}")

    @property
    def tile_count(self) -> int:
        return self.rows * self.cols

    def with_changes(self, **changes) -> GridSpec:
        return replace(self, **changes)


@dataclass(frozen=True)
class TileRect:
    """Pixel rectangle of one grid cell in source coordinates (right/bottom exclusive)."""
    index: int
    row: int
    col: int
    left: int
    top: int
    right: int
    bottom: int

    @property
    def width(self) -> int:
        return self.right - self.left

    @property
    def height(self) -> int:
        return self.bottom - self.top

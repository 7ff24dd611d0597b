from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Tuple
import math

from .exceptions import InvalidConfig

# sqrt(3 * 255^2): the largest possible Euclidean distance between two RGB colors.
MAX_RGB_DISTANCE = math.sqrt(3 * 255 ** 2)


def hex_to_rgb(hex_color: str) -> Tuple[int, int, int]:
    """'#ffcc00' / 'ffcc00' / '#fc0' → (255, 204, 0)."""
    s = hex_color.strip().lstrip("#")
    if len(s) == 3:
        s = "".join(c * 2 for c in s)
    if len(s) != 6:
        raise InvalidConfig(f"Not a hex color: {hex_color!r}")
    try:
        return int(s[0:2], 16), int(s[2:4], 16), int(s[4:6], 16)
    except ValueError as err:
        raise InvalidConfig(f"Not a hex color: {hex_color!r}") from err


@dataclass(frozen=True)
class ColorKeyConfig:
    """
    Value-object describing a chroma-key pass.

    threshold is a percentage (0–100) of the maximum RGB distance.
    confine_to_background restricts removal to matching pixels reachable
    from the image border; smooth blurs the whole RGBA buffer afterwards.
    """
    target_color: Tuple[int, int, int] = (255, 255, 255)
    threshold: float = 10
    confine_to_background: bool = False
    smooth: bool = False
    smooth_radius: int = 1   # [1, 10]

    def __post_init__(self):
        if len(self.target_color) != 3 or any(not 0 <= c <= 255 for c in self.target_color):
            raise InvalidConfig(f"target_color must be an RGB triple in 0..255, got {self.target_color}")
        object.__setattr__(self, "target_color", tuple(int(c) for c in self.target_color))
        if not 0 <= self.threshold <= 100:
            raise InvalidConfig(f"threshold must be within 0..100, got {self.threshold}")
        if not 1 <= self.smooth_radius <= 10:
            raise InvalidConfig(f"smooth_radius must be within 1..10, got {self.smooth_radius}")

    @classmethod
    def from_hex(cls, hex_color: str, **kwargs) -> ColorKeyConfig:
        return cls(target_color=hex_to_rgb(hex_color), **kwargs)

    @property
    def distance_bound(self) -> float:
        """Absolute Euclidean RGB distance T corresponding to ``threshold``."""
        return (self.threshold / 100.0) * MAX_RGB_DISTANCE

    def with_changes(self, **changes) -> ColorKeyConfig:
        return replace(self, **changes)

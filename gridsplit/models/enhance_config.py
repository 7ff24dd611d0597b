from __future__ import annotations
from dataclasses import dataclass, replace

from .exceptions import InvalidConfig, InvalidScale

ALLOWED_SCALES = (1, 2, 4)


@dataclass(frozen=True)
class EnhanceConfig:
    """
    Value-object for upscale + sharpen.

    scale      – integer upscale factor, one of 1, 2, 4
    sharpness  – 0 disables sharpening; 50 → kernel strength 1, 100 → 2
    """
    scale: int = 2
    sharpness: float = 50

    def __post_init__(self):
        if self.scale not in ALLOWED_SCALES:
            raise InvalidScale(f"scale must be one of {ALLOWED_SCALES}, got {self.scale}")
        if not 0 <= self.sharpness <= 100:
            raise InvalidConfig(f"sharpness must be within 0..100, got {self.sharpness}")

    @property
    def strength(self) -> float:
        """Kernel strength s = sharpness / 50."""
        return self.sharpness / 50.0

    def with_changes(self, **changes) -> EnhanceConfig:
        return replace(self, **changes)

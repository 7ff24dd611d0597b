from __future__ import annotations
from dataclasses import dataclass
import numpy as np

from .exceptions import InvalidInput

CHANNELS = 4


def _check_shape(pixels: np.ndarray) -> None:
    if pixels.ndim != 3 or pixels.shape[2] != CHANNELS:
        raise InvalidInput(f"Raster pixels must be (H, W, 4), got {pixels.shape}")


@dataclass(frozen=True, eq=False)
class Raster:
    """
    Immutable RGBA bitmap: pixels are (H, W, 4) uint8, row-major.
    Every stage returns a fresh Raster; the array is flagged read-only so
    no stage can edit a snapshot another stage still holds.

    The constructor always takes a private copy of the caller's array.
    Stages that just allocated their output use ``adopt`` instead.
    """
    pixels: np.ndarray  # Shape (H, W, 4), dtype uint8, RGBA order.

    def __post_init__(self):
        pixels = np.array(self.pixels, dtype=np.uint8, order="C", copy=True)
        _check_shape(pixels)
        pixels.flags.writeable = False
        object.__setattr__(self, "pixels", pixels)

    # ── Construction ─────────────────────────────────────────────────
    @classmethod
    def adopt(cls, pixels: np.ndarray) -> Raster:
        """
        Wrap an array the caller allocated for this raster alone, without
        copying. The array is frozen; the caller must drop its reference.
        """
        _check_shape(pixels)
        if pixels.dtype != np.uint8 or not pixels.flags["C_CONTIGUOUS"] or not pixels.flags.owndata:
            return cls(pixels)
        pixels.flags.writeable = False
        raster = object.__new__(cls)
        object.__setattr__(raster, "pixels", pixels)
        return raster

    @classmethod
    def from_buffer(cls, width: int, height: int, buffer: bytes | bytearray | memoryview) -> Raster:
        """Build a raster from a flat RGBA byte buffer (stride = width*4)."""
        expected = width * height * CHANNELS
        if len(buffer) != expected:
            raise InvalidInput(
                f"Buffer holds {len(buffer)} bytes, expected {expected} for {width}x{height}",
                details={"width": width, "height": height},
            )
        arr = np.frombuffer(buffer, dtype=np.uint8).reshape(height, width, CHANNELS)
        return cls(arr)

    # ── Geometry ─────────────────────────────────────────────────────
    @property
    def width(self) -> int:
        return self.pixels.shape[1]

    @property
    def height(self) -> int:
        return self.pixels.shape[0]

    @property
    def stride(self) -> int:
        return self.width * CHANNELS

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    def require_non_empty(self) -> None:
        if self.is_empty:
            raise InvalidInput(
                f"Degenerate raster {self.width}x{self.height}",
                details={"width": self.width, "height": self.height},
            )

    # ── Views ────────────────────────────────────────────────────────
    def to_bytes(self) -> bytes:
        return self.pixels.tobytes()

    def __eq__(self, other) -> bool:
        if not isinstance(other, Raster):
            return NotImplemented
        return np.array_equal(self.pixels, other.pixels)

    __hash__ = None

    def __repr__(self) -> str:
        return f"Raster({self.width}x{self.height})"

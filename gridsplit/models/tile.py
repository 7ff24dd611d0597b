from __future__ import annotations
from dataclasses import dataclass, field
from typing import List

from .exceptions import EncodingError
from .geometry import TileRect


@dataclass(frozen=True)
class EncodedTile:
    """One encoded grid cell, ready to be written or archived."""
    index: int
    filename: str
    data: bytes
    rect: TileRect


@dataclass(frozen=True)
class TileFailure:
    """A tile whose encode failed; siblings are unaffected."""
    index: int
    rect: TileRect
    error: EncodingError


@dataclass
class TileSplitResult:
    """
    Outcome of a split: successful tiles and isolated failures, both
    ordered by tile index. The caller decides what to do with failures.
    """
    tiles: List[EncodedTile] = field(default_factory=list)
    failures: List[TileFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


@dataclass(frozen=True)
class PackagedOutput:
    """Final deliverable: a single tile file or a zip archive."""
    filename: str
    data: bytes
    is_archive: bool
    entry_count: int

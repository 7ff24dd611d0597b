"""
Error taxonomy for the raster pipeline.

Every stage fails fast with one of these instead of silently clamping.
All of them derive from ValueError so callers that already guard image
code with ``except ValueError`` keep working.
"""

from typing import Any, Dict, Optional


class GridSplitError(ValueError):
    """Base exception for gridsplit."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class InvalidInput(GridSplitError):
    """Raised when a raster is degenerate (zero width or height)."""


class InvalidRect(GridSplitError):
    """Raised when a crop rectangle resolves to an empty region."""


class InvalidScale(GridSplitError):
    """Raised when an enhancement result would be empty or too large."""


class InvalidConfig(GridSplitError):
    """Raised when a config value falls outside its documented range."""


class EncodingError(GridSplitError):
    """Raised when the codec rejects a raster (usually a single tile)."""

    def __init__(self, message: str, tile_index: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.tile_index = tile_index
        if tile_index is not None:
            self.details["tile_index"] = tile_index


class PackagingError(GridSplitError):
    """Raised when there is nothing left to package."""


class SupersededError(GridSplitError):
    """Raised on a background job whose result was replaced by a newer request."""

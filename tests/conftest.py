import numpy as np
import pytest

from gridsplit.models import Raster


def solid(width, height, rgba):
    arr = np.empty((height, width, 4), dtype=np.uint8)
    arr[...] = rgba
    return arr


@pytest.fixture
def make_raster():
    """Factory: solid RGBA raster, optionally with rectangles painted on top."""
    def _make(width, height, rgba=(255, 255, 255, 255), patches=()):
        arr = solid(width, height, rgba)
        for (left, top, right, bottom, color) in patches:
            arr[top:bottom, left:right] = color
        return Raster(arr)
    return _make


@pytest.fixture
def gradient_raster():
    """64x48 raster where every pixel is distinct-ish, for copy checks."""
    h, w = 48, 64
    ys, xs = np.mgrid[0:h, 0:w]
    arr = np.stack([
        (xs * 4) % 256,
        (ys * 5) % 256,
        (xs + ys) % 256,
        np.full_like(xs, 255),
    ], axis=2).astype(np.uint8)
    return Raster(arr)

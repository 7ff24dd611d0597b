import numpy as np
import pytest

from gridsplit.models import InvalidInput, InvalidRect, NormalizedRect, Raster
from gridsplit.services import CroppingService


@pytest.fixture
def service():
    return CroppingService()


def test_full_rect_is_idempotent(service, gradient_raster):
    full = NormalizedRect(0, 0, 1, 1)
    once = service.crop(gradient_raster, full)
    assert service.crop(once, full) == gradient_raster
    assert once.pixels is not gradient_raster.pixels


def test_crop_copies_pixels_verbatim(service, gradient_raster):
    # 64x48: sx = floor(0.25*64) = 16, sy = floor(0.1*48) = 4,
    # sw = round(0.5*64) = 32, sh = round(0.5*48) = 24
    out = service.crop(gradient_raster, NormalizedRect(0.25, 0.1, 0.5, 0.5))
    assert (out.width, out.height) == (32, 24)
    assert np.array_equal(out.pixels, gradient_raster.pixels[4:28, 16:48])


def test_size_is_rounded_half_up(service, make_raster):
    raster = make_raster(10, 10)
    out = service.crop(raster, NormalizedRect(0, 0, 0.25, 0.375))
    assert (out.width, out.height) == (3, 4)


def test_tiny_rect_keeps_at_least_one_pixel(service, make_raster):
    out = service.crop(make_raster(10, 10), NormalizedRect(0.5, 0.5, 0.01, 0.0))
    assert (out.width, out.height) == (1, 1)


def test_rect_overhanging_the_edge_is_clipped(service, make_raster):
    out = service.crop(make_raster(10, 10), NormalizedRect(0.75, 0.0, 0.5, 1.0))
    assert (out.width, out.height) == (3, 10)

    out = service.crop(make_raster(10, 10), NormalizedRect(-1.0, -1.0, 5.0, 5.0))
    assert (out.width, out.height) == (10, 10)


def test_rect_starting_at_far_edge_is_empty(service, make_raster):
    with pytest.raises(InvalidRect):
        service.crop(make_raster(10, 10), NormalizedRect(1.0, 0.0, 0.2, 1.0))


def test_empty_source_is_rejected(service):
    with pytest.raises(InvalidInput):
        service.crop(Raster(np.zeros((5, 0, 4), dtype=np.uint8)), NormalizedRect())

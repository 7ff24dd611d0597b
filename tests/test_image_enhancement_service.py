import numpy as np
import pytest

from gridsplit.models import EnhanceConfig, InvalidScale, Raster
from gridsplit.services import ImageEnhancementService


@pytest.fixture
def service():
    return ImageEnhancementService(max_pixels=4096 * 4096)


def test_scale_one_without_sharpening_is_a_no_op(service, gradient_raster):
    out = service.enhance(gradient_raster, EnhanceConfig(scale=1, sharpness=0))
    assert out == gradient_raster
    assert out.pixels is not gradient_raster.pixels


@pytest.mark.parametrize("scale", [1, 2, 4])
def test_output_dimensions(service, make_raster, scale):
    out = service.enhance(make_raster(13, 7), EnhanceConfig(scale=scale, sharpness=30))
    assert (out.width, out.height) == (13 * scale, 7 * scale)


def test_bilinear_blends_neighbours(service):
    pixels = np.zeros((1, 2, 4), dtype=np.uint8)
    pixels[0, 0] = (0, 0, 0, 255)
    pixels[0, 1] = (100, 200, 40, 255)

    out = service.enhance(Raster(pixels), EnhanceConfig(scale=2, sharpness=0))

    assert (out.width, out.height) == (4, 2)
    assert out.pixels[0, :, 0].tolist() == [0, 50, 100, 100]
    assert out.pixels[0, :, 1].tolist() == [0, 100, 200, 200]
    assert np.array_equal(out.pixels[0], out.pixels[1])


def test_upscale_never_blocks_like_nearest_neighbour(service, make_raster):
    raster = make_raster(2, 2, (0, 0, 0, 255), patches=[(1, 0, 2, 2, (200, 200, 200, 255))])
    out = service.enhance(raster, EnhanceConfig(scale=4, sharpness=0))
    distinct = set(out.pixels[0, :, 0].tolist())
    assert len(distinct) > 2


def test_sharpening_uses_zero_padding_at_the_border(service, make_raster):
    raster = make_raster(5, 5, (40, 40, 40, 200))
    out = service.enhance(raster, EnhanceConfig(scale=1, sharpness=50))
    red = out.pixels[:, :, 0]

    # s = 1: interior 5v - 4v = v, edge 5v - 3v = 2v, corner 5v - 2v = 3v
    assert np.all(red[1:4, 1:4] == 40)
    assert red[0, 2] == 80
    assert red[2, 0] == 80
    assert red[0, 0] == 120
    assert red[4, 4] == 120


def test_sharpening_clamps_channels(service, make_raster):
    raster = make_raster(5, 5, (10, 10, 10, 255), patches=[(2, 2, 3, 3, (250, 250, 250, 255))])
    out = service.enhance(raster, EnhanceConfig(scale=1, sharpness=100))
    # centre: 9*250 - 2*4*10 → 255, its neighbours: 9*10 - 2*(250 + ...) → 0
    assert out.pixels[2, 2, 0] == 255
    assert out.pixels[1, 2, 0] == 0


def test_alpha_passes_through_sharpening(service, make_raster):
    raster = make_raster(6, 6, (90, 120, 30, 77), patches=[(2, 2, 4, 4, (200, 10, 10, 180))])
    out = service.enhance(raster, EnhanceConfig(scale=1, sharpness=100))
    assert np.array_equal(out.pixels[:, :, 3], raster.pixels[:, :, 3])


def test_result_larger_than_limit_is_rejected(make_raster):
    service = ImageEnhancementService(max_pixels=1000)
    with pytest.raises(InvalidScale):
        service.enhance(make_raster(20, 20), EnhanceConfig(scale=2, sharpness=0))
    # 20x20 at scale 1 is within the limit.
    service.enhance(make_raster(20, 20), EnhanceConfig(scale=1, sharpness=0))


def test_explicit_zero_pixel_limit_is_honoured(make_raster, monkeypatch):
    monkeypatch.setenv("GRIDSPLIT_MAX_ENHANCED_PIXELS", "1000000")
    service = ImageEnhancementService(max_pixels=0)
    assert service.max_pixels == 0
    with pytest.raises(InvalidScale):
        service.enhance(make_raster(4, 4), EnhanceConfig(scale=1, sharpness=0))


def test_empty_raster_is_rejected(service):
    with pytest.raises(InvalidScale):
        service.enhance(Raster(np.zeros((0, 3, 4), dtype=np.uint8)), EnhanceConfig(scale=2))

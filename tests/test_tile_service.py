from io import BytesIO
import zipfile

import numpy as np
import pytest
from PIL import Image as PILImage

from gridsplit.models import (
    EncodeOptions,
    EncodingError,
    GridSpec,
    InvalidConfig,
    InvalidInput,
    OutputFormat,
    PackagingError,
    Raster,
)
from gridsplit.services import TileService
from gridsplit.services.tile_service import base_name, edges, tile_filename


@pytest.fixture
def service():
    return TileService(max_workers=4)


@pytest.mark.parametrize("width,height", [(37, 23), (100, 100), (7, 11)])
def test_tiles_cover_every_pixel_exactly_once(width, height):
    for rows in range(1, 11):
        for cols in range(1, 11):
            coverage = np.zeros((height, width), dtype=np.int32)
            for rect in TileService.tile_rects(width, height, GridSpec(rows, cols)):
                coverage[rect.top:rect.bottom, rect.left:rect.right] += 1
            assert np.all(coverage == 1), (rows, cols)


def test_edges_are_floor_based():
    assert edges(10, 3) == [0, 3, 6, 10]
    assert edges(3, 5) == [0, 0, 1, 1, 2, 3]


def test_tile_indices_are_row_major():
    rects = TileService.tile_rects(30, 20, GridSpec(2, 3))
    assert [(r.index, r.row, r.col) for r in rects] == [
        (0, 0, 0), (1, 0, 1), (2, 0, 2), (3, 1, 0), (4, 1, 1), (5, 1, 2),
    ]


def test_filename_pattern():
    assert tile_filename(0, 0, "png") == "tile_01_01.png"
    assert tile_filename(9, 11, "jpg") == "tile_10_12.jpg"


def test_base_name_strips_only_the_final_extension():
    assert base_name("photo.png") == "photo"
    assert base_name("my.sprite.sheet.webp") == "my.sprite.sheet"
    assert base_name("/tmp/uploads/cat.jpeg") == "cat"


def test_split_produces_all_tiles_when_selection_empty(service, gradient_raster):
    for selection in (None, set(), []):
        result = service.split(gradient_raster, GridSpec(3, 4), selection=selection)
        assert result.ok
        assert [t.index for t in result.tiles] == list(range(12))


def test_split_honours_selection_and_ignores_out_of_range(service, gradient_raster):
    result = service.split(gradient_raster, GridSpec(2, 2), selection={3, 1, 7, -1})
    assert [t.index for t in result.tiles] == [1, 3]
    assert [t.filename for t in result.tiles] == ["tile_01_02.png", "tile_02_02.png"]


def test_encoded_tiles_decode_to_their_source_region(service, gradient_raster):
    result = service.split(gradient_raster, GridSpec(3, 5))
    for tile in result.tiles:
        decoded = np.asarray(PILImage.open(BytesIO(tile.data)).convert("RGBA"))
        r = tile.rect
        assert np.array_equal(decoded, gradient_raster.pixels[r.top:r.bottom, r.left:r.right])


@pytest.mark.parametrize("fmt,pil_format", [
    (OutputFormat.JPEG, "JPEG"),
    (OutputFormat.WEBP, "WEBP"),
])
def test_lossy_formats(service, gradient_raster, fmt, pil_format):
    result = service.split(gradient_raster, GridSpec(2, 2), options=EncodeOptions(fmt, 0.8))
    assert all(t.filename.endswith("." + fmt.extension) for t in result.tiles)
    with PILImage.open(BytesIO(result.tiles[0].data)) as img:
        assert img.format == pil_format
        assert img.size == (32, 24)


def test_failed_tile_does_not_block_siblings(service, make_raster):
    # Width 3 over 5 columns leaves columns 0 and 2 zero pixels wide.
    raster = make_raster(3, 3)
    result = service.split(raster, GridSpec(1, 5))

    assert [t.index for t in result.tiles] == [1, 3, 4]
    assert [f.index for f in result.failures] == [0, 2]
    assert all(isinstance(f.error, EncodingError) for f in result.failures)
    assert result.failures[0].error.tile_index == 0


def test_empty_raster_is_rejected(service):
    with pytest.raises(InvalidInput):
        service.split(Raster(np.zeros((0, 0, 4), dtype=np.uint8)), GridSpec(1, 1))


def test_single_tile_is_not_archived(service, gradient_raster):
    result = service.split(gradient_raster, GridSpec(3, 3), selection={4})
    output = service.package(result.tiles, "photo.png")
    assert not output.is_archive
    assert output.filename == "tile_02_02.png"
    assert output.data == result.tiles[0].data


def test_multiple_tiles_are_archived_under_one_folder(service, gradient_raster):
    result = service.split(gradient_raster, GridSpec(2, 3))
    output = service.package(result.tiles, "holiday.final.png")

    assert output.is_archive
    assert output.filename == "split_holiday.final.zip"
    assert output.entry_count == 6
    with zipfile.ZipFile(BytesIO(output.data)) as zf:
        names = zf.namelist()
        assert len(names) == 6
        assert all(n.startswith("split_holiday.final/tile_") for n in names)
        assert all(info.compress_type == zipfile.ZIP_DEFLATED for info in zf.infolist())
        assert zf.read("split_holiday.final/tile_01_01.png") == result.tiles[0].data


def test_packaging_nothing_raises(service):
    with pytest.raises(PackagingError):
        service.package([], "photo.png")


def test_worker_count_must_be_positive():
    with pytest.raises(InvalidConfig):
        TileService(max_workers=0)
    assert TileService(max_workers=1).max_workers == 1

"""
Split & Package Pipeline
Tiles the final raster of a composed edit and hands back one deliverable:
a single encoded tile or a zip archive of all produced tiles.
"""

from typing import Iterable, Optional
import logging

from ..models.raster import Raster
from ..models.geometry import GridSpec
from ..models.output_format import EncodeOptions
from ..models.tile import PackagedOutput
from ..models.exceptions import InvalidConfig
from ..services.tile_service import TileService

logger = logging.getLogger(__name__)

ON_FAILURE_POLICIES = ("abort", "skip")


def split_and_package(
    raster: Raster,
    grid: GridSpec,
    original_filename: str,
    *,
    selection: Optional[Iterable[int]] = None,
    options: EncodeOptions = EncodeOptions(),
    on_failure: str = "abort",
    tile_service: Optional[TileService] = None,
) -> PackagedOutput:
    """
    Split, wait for every tile encode, then package.

    Args:
        raster: Raster to partition
        grid: Rows/cols of the partition
        original_filename: Source file name; its stem names the archive
        selection: Tile indices to export (None/empty → all)
        options: Output format and quality
        on_failure: "abort" re-raises the first failed tile's EncodingError,
            "skip" packages whatever encoded successfully
        tile_service: Service override

    Returns:
        PackagedOutput: A single tile file or a zip archive
    """
    if on_failure not in ON_FAILURE_POLICIES:
        raise InvalidConfig(f"on_failure must be one of {ON_FAILURE_POLICIES}, got {on_failure!r}")

    tile_service = tile_service or TileService()
    result = tile_service.split(raster, grid, selection=selection, options=options)

    if result.failures:
        if on_failure == "abort":
            raise result.failures[0].error
        logger.warning(
            f"Skipping {len(result.failures)} failed tiles: "
            f"{[f.index for f in result.failures]}"
        )

    return tile_service.package(result.tiles, original_filename)

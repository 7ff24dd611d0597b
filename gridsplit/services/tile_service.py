from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, List, Optional
import os
import logging

from dotenv import load_dotenv

from ..models.raster import Raster
from ..models.geometry import GridSpec, TileRect
from ..models.output_format import EncodeOptions
from ..models.tile import EncodedTile, TileFailure, TileSplitResult, PackagedOutput
from ..models.exceptions import EncodingError, InvalidConfig, PackagingError
from ..repositories.image_repository import ImageRepository
from ..repositories.archive_repository import ArchiveRepository

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


def edges(length: int, parts: int) -> List[int]:
    """Floor-based cut positions 0 = e[0] ≤ … ≤ e[parts] = length."""
    return [(length * i) // parts for i in range(parts + 1)]


def tile_filename(row: int, col: int, extension: str) -> str:
    return f"tile_{row + 1:02d}_{col + 1:02d}.{extension}"


def base_name(filename: str) -> str:
    """Original filename minus its final extension (and any directory)."""
    return Path(filename).stem or "image"


class TileService:
    """
    Grid partition + per-tile encode + packaging.

    Tiles are encoded concurrently from the shared read-only source; a failure
    on one tile is recorded and never blocks its siblings.
    """

    def __init__(self, max_workers: Optional[int] = None):
        if max_workers is None:
            max_workers = int(os.getenv("GRIDSPLIT_TILE_WORKERS", "4"))
        if max_workers < 1:
            raise InvalidConfig(f"max_workers must be >= 1, got {max_workers}")
        self.max_workers = max_workers
        self.image_repository = ImageRepository()
        self.archive_repository = ArchiveRepository()

    # ─── Geometry ──────────────────────────────────────────────────
    @staticmethod
    def tile_rects(width: int, height: int, grid: GridSpec) -> List[TileRect]:
        """All grid cells in row-major order (index = row * cols + col)."""
        xs = edges(width, grid.cols)
        ys = edges(height, grid.rows)
        return [
            TileRect(
                index=r * grid.cols + c, row=r, col=c,
                left=xs[c], top=ys[r], right=xs[c + 1], bottom=ys[r + 1],
            )
            for r in range(grid.rows)
            for c in range(grid.cols)
        ]

    @staticmethod
    def select(rects: List[TileRect], selection: Optional[Iterable[int]]) -> List[TileRect]:
        """Empty/absent selection keeps every tile; out-of-range indices are dropped."""
        wanted = set(selection or ())
        if not wanted:
            return rects
        valid = {i for i in wanted if 0 <= i < len(rects)}
        ignored = wanted - valid
        if ignored:
            logger.warning(f"Ignoring out-of-range tile indices: {sorted(ignored)}")
        return [rect for rect in rects if rect.index in valid]

    # ─── Encoding ──────────────────────────────────────────────────
    def _encode_tile(self, raster: Raster, rect: TileRect, options: EncodeOptions) -> EncodedTile:
        tile = Raster(raster.pixels[rect.top:rect.bottom, rect.left:rect.right])
        try:
            data = self.image_repository.encode(tile, options)
        except EncodingError as err:
            raise EncodingError(
                f"Tile {rect.index} (row {rect.row + 1}, col {rect.col + 1}): {err.message}",
                tile_index=rect.index,
            ) from err
        logger.debug(f"Encoded tile {rect.index} {rect.width}x{rect.height} → {len(data)} bytes")
        return EncodedTile(
            index=rect.index,
            filename=tile_filename(rect.row, rect.col, options.format.extension),
            data=data,
            rect=rect,
        )

    def split(
        self,
        raster: Raster,
        grid: GridSpec,
        selection: Optional[Iterable[int]] = None,
        options: EncodeOptions = EncodeOptions(),
    ) -> TileSplitResult:
        """
        Partition the raster and encode the selected tiles.

        Args:
            raster: Final raster of the composed pipeline
            grid: Rows/cols of the partition
            selection: Tile indices to produce (None/empty → all)
            options: Output format and quality

        Returns:
            TileSplitResult: Encoded tiles and isolated failures, in index order
        """
        raster.require_non_empty()
        rects = self.select(self.tile_rects(raster.width, raster.height, grid), selection)

        result = TileSplitResult()
        if not rects:
            return result

        # Fan-out; leaving the executor block is the join barrier.
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(rects))) as pool:
            futures = [(rect, pool.submit(self._encode_tile, raster, rect, options)) for rect in rects]

        for rect, future in futures:
            try:
                result.tiles.append(future.result())
            except EncodingError as err:
                logger.warning(f"Tile {rect.index} failed: {err.message}")
                result.failures.append(TileFailure(index=rect.index, rect=rect, error=err))

        logger.info(
            f"Split {raster.width}x{raster.height} into {grid.rows}x{grid.cols}: "
            f"{len(result.tiles)} encoded, {len(result.failures)} failed"
        )
        return result

    # ─── Packaging ─────────────────────────────────────────────────
    def package(self, tiles: List[EncodedTile], original_filename: str) -> PackagedOutput:
        """
        One tile → that file as-is. Several → split_{base}.zip with every
        tile under split_{base}/.
        """
        if not tiles:
            raise PackagingError("No tiles were produced; nothing to package")

        if len(tiles) == 1:
            tile = tiles[0]
            return PackagedOutput(filename=tile.filename, data=tile.data, is_archive=False, entry_count=1)

        folder = f"split_{base_name(original_filename)}"
        data = self.archive_repository.build_zip(folder, ((t.filename, t.data) for t in tiles))
        logger.info(f"Packaged {len(tiles)} tiles into {folder}.zip ({len(data)} bytes)")
        return PackagedOutput(filename=f"{folder}.zip", data=data, is_archive=True, entry_count=len(tiles))

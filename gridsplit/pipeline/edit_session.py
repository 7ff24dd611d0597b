from __future__ import annotations

from typing import Iterable, Optional
import logging

from ..models.raster import Raster
from ..models.color_key import ColorKeyConfig
from ..models.enhance_config import EnhanceConfig
from ..models.geometry import GridSpec, NormalizedRect
from ..models.output_format import EncodeOptions
from ..models.tile import PackagedOutput
from ..services.color_key_service import ColorKeyService
from ..services.cropping_service import CroppingService
from ..services.image_enhancement_service import ImageEnhancementService
from ..services.tile_service import TileService
from .split_and_package import split_and_package

logger = logging.getLogger(__name__)


class EditSession:
    """
    Holds the snapshots of one image being edited.

    base ──enhance──▶ enhanced ──color key──▶ keyed  (= current)

    Re-applying a stage always restarts from its upstream snapshot and
    re-derives everything downstream, so edits never pile up on an earlier
    output. A crop commits the current raster as the new base.
    """

    def __init__(
        self,
        raster: Raster,
        filename: str = "image.png",
        *,
        color_key_service: Optional[ColorKeyService] = None,
        cropping_service: Optional[CroppingService] = None,
        enhancement_service: Optional[ImageEnhancementService] = None,
        tile_service: Optional[TileService] = None,
    ):
        raster.require_non_empty()
        self.filename = filename
        self.color_key_service = color_key_service or ColorKeyService()
        self.cropping_service = cropping_service or CroppingService()
        self.enhancement_service = enhancement_service or ImageEnhancementService()
        self.tile_service = tile_service or TileService()

        self.loaded = raster
        self._clear(raster)

    def _clear(self, base: Raster) -> None:
        self.base = base
        self.enhance_config: Optional[EnhanceConfig] = None
        self.color_key_config: Optional[ColorKeyConfig] = None
        self.enhanced: Optional[Raster] = None
        self.keyed: Optional[Raster] = None

    # ─── Snapshots ─────────────────────────────────────────────────
    @property
    def pre_key(self) -> Raster:
        """Upstream snapshot of the color-key stage."""
        return self.enhanced if self.enhanced is not None else self.base

    @property
    def current(self) -> Raster:
        return self.keyed if self.keyed is not None else self.pre_key

    def _rekey(self) -> None:
        if self.color_key_config is None:
            self.keyed = None
        else:
            self.keyed = self.color_key_service.remove(self.pre_key, self.color_key_config)

    # ─── Stages ────────────────────────────────────────────────────
    def apply_enhancement(self, config: EnhanceConfig) -> Raster:
        self.enhanced = self.enhancement_service.enhance(self.base, config)
        self.enhance_config = config
        self._rekey()
        return self.current

    def clear_enhancement(self) -> Raster:
        self.enhance_config = None
        self.enhanced = None
        self._rekey()
        return self.current

    def apply_color_key(self, config: ColorKeyConfig) -> Raster:
        self.keyed = self.color_key_service.remove(self.pre_key, config)
        self.color_key_config = config
        return self.current

    def clear_color_key(self) -> Raster:
        self.color_key_config = None
        self.keyed = None
        return self.current

    def apply_crop(self, rect: NormalizedRect) -> Raster:
        cropped = self.cropping_service.crop(self.current, rect)
        logger.info(f"Committed crop of {self.filename}: {cropped.width}x{cropped.height} is the new base")
        self._clear(cropped)
        return self.current

    def reset(self) -> Raster:
        """Drop every edit, crops included."""
        self._clear(self.loaded)
        return self.current

    # ─── Export ────────────────────────────────────────────────────
    def split(
        self,
        grid: GridSpec = GridSpec(),
        selection: Optional[Iterable[int]] = None,
        options: EncodeOptions = EncodeOptions(),
        on_failure: str = "abort",
    ) -> PackagedOutput:
        return split_and_package(
            self.current, grid, self.filename,
            selection=selection, options=options, on_failure=on_failure,
            tile_service=self.tile_service,
        )

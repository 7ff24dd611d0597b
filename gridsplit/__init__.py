"""
gridsplit: color-key background removal, crop, upscale/sharpen and grid
tiling for RGBA rasters.
"""

from .models import (
    Raster,
    ColorKeyConfig,
    NormalizedRect,
    GridSpec,
    EnhanceConfig,
    OutputFormat,
    EncodeOptions,
    PackagedOutput,
    GridSplitError,
    InvalidInput,
    InvalidRect,
    InvalidScale,
    InvalidConfig,
    EncodingError,
    PackagingError,
)
from .services import ColorKeyService, CroppingService, ImageEnhancementService, TileService, ImageService
from .pipeline import EditSession, ProcessingWorker, split_and_package

__version__ = "1.0.0"

from .raster import Raster
from .color_key import ColorKeyConfig, MAX_RGB_DISTANCE, hex_to_rgb
from .geometry import NormalizedRect, GridSpec, TileRect
from .enhance_config import EnhanceConfig
from .output_format import OutputFormat, EncodeOptions
from .tile import EncodedTile, TileFailure, TileSplitResult, PackagedOutput
from .exceptions import (
    GridSplitError,
    InvalidInput,
    InvalidRect,
    InvalidScale,
    InvalidConfig,
    EncodingError,
    PackagingError,
    SupersededError,
)

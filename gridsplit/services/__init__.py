from .color_key_service import ColorKeyService
from .cropping_service import CroppingService
from .image_enhancement_service import ImageEnhancementService
from .tile_service import TileService
from .image_service import ImageService

from pathlib import Path
from typing import Union

import numpy as np

from ..models.raster import Raster
from ..models.output_format import EncodeOptions
from ..repositories.image_repository import ImageRepository


class ImageService:
    """I/O helpers.  No pixel algorithms here."""
    def __init__(self):
        self.image_repository = ImageRepository()

    def create_raster(self, pixels: np.ndarray) -> Raster:
        return self.image_repository.create_raster(pixels)

    def load(self, path: Union[str, Path]) -> Raster:
        """Decode a single image file into an RGBA raster."""
        return self.image_repository.load(path)

    def decode(self, data: bytes) -> Raster:
        return self.image_repository.decode(data)

    def encode(self, raster: Raster, options: EncodeOptions = EncodeOptions()) -> bytes:
        return self.image_repository.encode(raster, options)

    def get_image_dimensions(self, raster: Raster):
        """(height, width), matching numpy shape order."""
        return raster.height, raster.width

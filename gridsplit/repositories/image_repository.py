from pathlib import Path
from typing import Union
from io import BytesIO
import logging

import numpy as np
from PIL import Image as PILImage, UnidentifiedImageError

from ..models.raster import Raster
from ..models.output_format import EncodeOptions, OutputFormat
from ..models.exceptions import EncodingError, InvalidInput

logger = logging.getLogger(__name__)


class ImageRepository:
    """
    Codec boundary: decoded files/bytes → Raster, Raster → encoded bytes.
    Pillow is the only image library touched here.
    """

    @staticmethod
    def create_raster(pixels: np.ndarray) -> Raster:
        return Raster(pixels)

    @staticmethod
    def _from_pil(pil_img: PILImage.Image) -> Raster:
        rgba = pil_img.convert("RGBA")
        return Raster(np.asarray(rgba, dtype=np.uint8))

    def load(self, path: Union[str, Path]) -> Raster:
        path = Path(path)
        if not path.is_file():
            raise FileNotFoundError(f"Image not found or unreadable: {path}")
        try:
            with PILImage.open(path) as pil_img:
                raster = self._from_pil(pil_img)
        except UnidentifiedImageError as err:
            raise InvalidInput(f"Not a decodable image: {path}") from err
        logger.debug(f"Loaded {path.name} as {raster.width}x{raster.height} RGBA")
        return raster

    def decode(self, data: bytes) -> Raster:
        try:
            with PILImage.open(BytesIO(data)) as pil_img:
                return self._from_pil(pil_img)
        except UnidentifiedImageError as err:
            raise InvalidInput("Not a decodable image buffer") from err

    @staticmethod
    def _flatten_on_black(pixels: np.ndarray) -> np.ndarray:
        """Drop alpha the way a canvas export does: premultiply onto black."""
        alpha = pixels[:, :, 3:4].astype(np.uint16)
        rgb = pixels[:, :, :3].astype(np.uint16)
        return ((rgb * alpha + 127) // 255).astype(np.uint8)

    def to_pil_image(self, raster: Raster, fmt: OutputFormat = OutputFormat.PNG) -> PILImage.Image:
        if fmt is OutputFormat.JPEG:
            return PILImage.fromarray(self._flatten_on_black(raster.pixels))
        return PILImage.fromarray(np.ascontiguousarray(raster.pixels))

    def encode(self, raster: Raster, options: EncodeOptions) -> bytes:
        """
        Encode a raster into the requested container format.
        Codec-level rejections surface as EncodingError.
        """
        if raster.is_empty:
            raise EncodingError(f"Cannot encode an empty {raster.width}x{raster.height} raster")

        fmt = options.format
        params = {}
        if fmt is OutputFormat.PNG:
            params["optimize"] = False
        elif fmt is OutputFormat.JPEG:
            params.update({"quality": options.pil_quality, "subsampling": 0})
        elif fmt is OutputFormat.WEBP:
            params.update({"quality": options.pil_quality})

        buf = BytesIO()
        try:
            self.to_pil_image(raster, fmt).save(buf, format=fmt.pil_format, **params)
        except (OSError, ValueError, KeyError) as err:
            raise EncodingError(f"{fmt.pil_format} encoder rejected {raster!r}: {err}") from err
        return buf.getvalue()

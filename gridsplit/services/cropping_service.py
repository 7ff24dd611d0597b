import math
import logging

from ..models.raster import Raster
from ..models.geometry import NormalizedRect
from ..models.exceptions import InvalidRect

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


class CroppingService:

    @staticmethod
    def get_pixel_bounds(raster: Raster, rect: NormalizedRect):
        """
        Resolve a normalized rect to (left, top, width, height) in source pixels.
        Origin is floored, size is rounded, then both are kept inside the source.
        """
        raster.require_non_empty()
        rect = rect.clamped()
        w_img, h_img = raster.width, raster.height

        sx = min(int(math.floor(rect.x * w_img)), w_img)
        sy = min(int(math.floor(rect.y * h_img)), h_img)
        sw = max(1, round_half_up(rect.width * w_img))
        sh = max(1, round_half_up(rect.height * h_img))

        sw = min(sw, w_img - sx)
        sh = min(sh, h_img - sy)
        return sx, sy, sw, sh

    def crop(self, raster: Raster, rect: NormalizedRect) -> Raster:
        sx, sy, sw, sh = self.get_pixel_bounds(raster, rect)
        if sw <= 0 or sh <= 0:
            raise InvalidRect(
                f"Crop {rect} resolves to an empty {sw}x{sh} region",
                details={"left": sx, "top": sy, "width": sw, "height": sh},
            )

        logger.info(f"Crop {raster.width}x{raster.height} → {sw}x{sh} at ({sx},{sy})")
        return Raster.adopt(raster.pixels[sy:sy + sh, sx:sx + sw].copy())

from __future__ import annotations

from typing import Optional
import os
import logging

import cv2
import numpy as np
from dotenv import load_dotenv

from ..models.raster import Raster
from ..models.enhance_config import EnhanceConfig
from ..models.exceptions import InvalidScale
from .cropping_service import round_half_up

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


class ImageEnhancementService:
    """
    Upscale with bilinear interpolation, then optionally sharpen with a
    3×3 Laplacian-style kernel.
    *   Pure numpy/OpenCV on the CPU; no tensor runtime.
    *   Alpha is resampled with the color channels but never sharpened.
    """

    def __init__(self, max_pixels: Optional[int] = None):
        """
        Args:
            max_pixels: Largest newW*newH accepted (defaults to env var)
        """
        if max_pixels is None:
            max_pixels = int(os.getenv("GRIDSPLIT_MAX_ENHANCED_PIXELS", str(8192 * 8192)))
        self.max_pixels = max_pixels

    # ─── Public API ────────────────────────────────────────────────
    def target_size(self, raster: Raster, config: EnhanceConfig):
        new_w = round_half_up(raster.width * config.scale)
        new_h = round_half_up(raster.height * config.scale)
        if new_w <= 0 or new_h <= 0:
            raise InvalidScale(
                f"Enhancement of {raster.width}x{raster.height} yields an empty {new_w}x{new_h} raster",
                details={"width": new_w, "height": new_h},
            )
        if new_w * new_h > self.max_pixels:
            raise InvalidScale(
                f"Enhanced size {new_w}x{new_h} exceeds the {self.max_pixels} pixel limit",
                details={"width": new_w, "height": new_h, "max_pixels": self.max_pixels},
            )
        return new_w, new_h

    def enhance(self, raster: Raster, config: EnhanceConfig) -> Raster:
        new_w, new_h = self.target_size(raster, config)

        upscaled = self.resize_bilinear(raster.pixels, new_w, new_h)
        if config.sharpness > 0:
            upscaled[:, :, :3] = self.sharpen(upscaled[:, :, :3], config.strength)

        out = np.clip(upscaled, 0, 255).astype(np.uint8)
        logger.info(
            f"Enhanced {raster.width}x{raster.height} → {new_w}x{new_h} "
            f"(scale={config.scale}, sharpness={config.sharpness})"
        )
        return Raster.adopt(out)

    # ─── Internal helpers ──────────────────────────────────────────
    @staticmethod
    def resize_bilinear(pixels: np.ndarray, new_w: int, new_h: int) -> np.ndarray:
        """
        Bilinear resample to (new_h, new_w), float64 output.
        Destination pixel d maps to source coordinate d * (src / dst); the
        two nearest rows and columns are blended by the fractional offset.
        """
        h, w = pixels.shape[:2]
        src = pixels.astype(np.float64)

        in_y = np.arange(new_h, dtype=np.float64) * (h / new_h)
        y0 = np.floor(in_y).astype(np.intp)
        y1 = np.minimum(y0 + 1, h - 1)
        dy = (in_y - y0)[:, None, None]

        in_x = np.arange(new_w, dtype=np.float64) * (w / new_w)
        x0 = np.floor(in_x).astype(np.intp)
        x1 = np.minimum(x0 + 1, w - 1)
        dx = (in_x - x0)[None, :, None]

        top = src[y0]
        rows = top + (src[y1] - top) * dy
        left = rows[:, x0]
        return left + (rows[:, x1] - left) * dx

    @staticmethod
    def sharpen_kernel(strength: float) -> np.ndarray:
        s = strength
        return np.array([
            [0.0,    -s,         0.0],
            [-s,     1 + 4 * s,  -s],
            [0.0,    -s,         0.0],
        ], dtype=np.float64)

    def sharpen(self, rgb: np.ndarray, strength: float) -> np.ndarray:
        """
        Same-size convolution per channel with zero padding past the border,
        clamped to [0, 255].
        """
        kernel = self.sharpen_kernel(strength)
        conved = cv2.filter2D(
            np.ascontiguousarray(rgb, dtype=np.float64), -1, kernel,
            borderType=cv2.BORDER_CONSTANT,
        )
        return np.clip(conved, 0, 255)

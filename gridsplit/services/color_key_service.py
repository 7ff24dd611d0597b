import logging

import cv2
import numpy as np

from ..models.raster import Raster
from ..models.color_key import ColorKeyConfig

logger = logging.getLogger(__name__)


class ColorKeyService:
    """
    Chroma-key background removal.

    • Blanket mode clears alpha on every pixel within T of the target color.
    • Confined mode only clears the matching region connected to the border,
      so enclosed islands of the same color stay opaque.
    • Optional Gaussian smoothing over the full RGBA buffer softens the cut.
    """

    @staticmethod
    def match_mask(pixels: np.ndarray, config: ColorKeyConfig) -> np.ndarray:
        """(H, W) bool: Euclidean RGB distance to the target ≤ T."""
        diff = pixels[:, :, :3].astype(np.float64) - np.asarray(config.target_color, dtype=np.float64)
        dist = np.sqrt(np.sum(diff * diff, axis=2))
        return dist <= config.distance_bound

    @staticmethod
    def _border_connected(match: np.ndarray) -> np.ndarray:
        """
        4-connected flood fill seeded from every matching border pixel.
        Explicit stack over flat indices with a width*height visited bitmap.
        """
        height, width = match.shape
        flat_match = np.ascontiguousarray(match, dtype=np.uint8).tobytes()
        visited = bytearray(width * height)

        seeds = set()
        for x in range(width):
            seeds.add(x)
            seeds.add((height - 1) * width + x)
        for y in range(height):
            seeds.add(y * width)
            seeds.add(y * width + width - 1)

        stack = [i for i in seeds if flat_match[i]]
        for i in stack:
            visited[i] = 1

        while stack:
            idx = stack.pop()
            y, x = divmod(idx, width)
            if x + 1 < width:
                n = idx + 1
                if flat_match[n] and not visited[n]:
                    visited[n] = 1
                    stack.append(n)
            if x > 0:
                n = idx - 1
                if flat_match[n] and not visited[n]:
                    visited[n] = 1
                    stack.append(n)
            if y + 1 < height:
                n = idx + width
                if flat_match[n] and not visited[n]:
                    visited[n] = 1
                    stack.append(n)
            if y > 0:
                n = idx - width
                if flat_match[n] and not visited[n]:
                    visited[n] = 1
                    stack.append(n)

        return np.frombuffer(visited, dtype=np.uint8).reshape(height, width).astype(bool)

    @staticmethod
    def smooth(pixels: np.ndarray, radius: int) -> np.ndarray:
        """Gaussian blur (sigma = radius) over every channel, alpha included."""
        return cv2.GaussianBlur(pixels, (0, 0), sigmaX=radius, sigmaY=radius)

    def removal_mask(self, raster: Raster, config: ColorKeyConfig) -> np.ndarray:
        """(H, W) bool of the pixels whose alpha will be cleared."""
        raster.require_non_empty()
        match = self.match_mask(raster.pixels, config)
        if config.confine_to_background:
            return self._border_connected(match)
        return match

    def remove(self, raster: Raster, config: ColorKeyConfig) -> Raster:
        """
        Return a new raster with the keyed pixels made transparent.

        Args:
            raster: Source raster (left untouched).
            config: Target color, threshold and confinement/smoothing switches.

        Returns:
            Raster: Fresh snapshot with edited alpha.
        """
        mask = self.removal_mask(raster, config)

        out = raster.pixels.copy()
        out[:, :, 3][mask] = 0

        removed = int(mask.sum())
        logger.info(
            f"Color key {config.target_color} T={config.distance_bound:.2f} "
            f"({'confined' if config.confine_to_background else 'blanket'}): "
            f"{removed}/{raster.width * raster.height} pixels cleared"
        )

        if config.smooth:
            out = self.smooth(out, config.smooth_radius)

        return Raster.adopt(out)

from pathlib import Path
import logging
import numpy as np
from ..models.raster_image import RasterImage
from ..models.fingerprint import Fingerprint
from .image_service import ImageService

logger = logging.getLogger(__name__)

# Bit convention shared by every fingerprint: both sides of a comparison
# must use the same one, the absolute meaning does not affect the score.
DARK_BIT = 1
LIGHT_BIT = 0


class FingerprintService:
    """
    Reduces an image to a binary fingerprint:
    resize -> grayscale -> Otsu threshold -> binarize.
    """

    def __init__(self, image_service: ImageService | None = None):
        self.image_service = image_service or ImageService()

    @staticmethod
    def otsu_threshold(grid: np.ndarray) -> int:
        """
        Otsu's method over a 256-bucket histogram.

        Args:
            grid (np.ndarray): Luminance values, any length.

        Returns:
            (int): The threshold t maximising the between-class variance.
                   The first maximum wins. Empty or uniform grids give 0.
        """
        values = np.asarray(grid, dtype=np.int64).ravel() & 0xFF
        hist = np.bincount(values, minlength=256)
        total = int(values.size)
        total_sum = int(np.dot(np.arange(256, dtype=np.int64), hist))

        sum_background = 0
        weight_background = 0
        var_max = 0.0
        threshold = 0

        for t in range(256):
            count = int(hist[t])
            weight_background += count
            if weight_background == 0:
                continue
            weight_foreground = total - weight_background
            if weight_foreground == 0:
                break

            sum_background += t * count

            mean_background = sum_background / weight_background
            mean_foreground = (total_sum - sum_background) / weight_foreground

            var_between = weight_background * weight_foreground * (mean_background - mean_foreground) ** 2

            if var_between > var_max:
                var_max = var_between
                threshold = t

        return threshold

    @staticmethod
    def binarize(grid: np.ndarray, threshold: int) -> np.ndarray:
        """Values above the threshold are light, the rest dark."""
        grid = np.asarray(grid).ravel()
        return np.where(grid > threshold, LIGHT_BIT, DARK_BIT).astype(np.uint8)

    def fingerprint(self, img: RasterImage, width: int | None = None, height: int | None = None) -> Fingerprint:
        resized = self.image_service.resize(img, width, height)
        grid = self.image_service.to_gray(resized)
        threshold = self.otsu_threshold(grid)
        mask = self.binarize(grid, threshold)
        logger.debug(f"Fingerprint {img.path or '<memory>'}: threshold={threshold}, "
                     f"dark={int(mask.sum())}/{mask.size}")
        return Fingerprint(
            mask=mask,
            threshold=threshold,
            width=resized.width,
            height=resized.height,
            path=img.path,
        )

    def fingerprint_bytes(self, data: bytes, width: int | None = None, height: int | None = None) -> Fingerprint:
        return self.fingerprint(self.image_service.decode(data), width, height)

    def fingerprint_file(self, path: str | Path, width: int | None = None, height: int | None = None) -> Fingerprint:
        return self.fingerprint(self.image_service.load(path), width, height)

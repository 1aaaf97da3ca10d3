from pathlib import Path
from typing import List, Union
import cv2
import os
import numpy as np
from dotenv import load_dotenv
from ..models.raster_image import RasterImage
from ..models.fingerprint import Fingerprint
from ..repositories.image_repository import ImageRepository

# Load environment variables
load_dotenv()

# Luminance weights (ITU-R BT.601)
GRAY_WEIGHTS = (0.299, 0.587, 0.114)


class ImageService:
    """I/O helpers plus the resize and grayscale steps of fingerprinting."""
    def __init__(self):
        self.FINGERPRINT_SIZE = int(os.getenv("FINGERPRINT_SIZE", "50"))
        self.image_repository = ImageRepository()

    def create_image(self, pixels: np.ndarray, path: Union[str, Path] = None) -> RasterImage:
        return self.image_repository.create_image(pixels, path)

    def load(self, path: str | Path) -> RasterImage:
        """Load a single image from disk into a RasterImage object."""
        return self.image_repository.load(path)

    def decode(self, data: bytes, path: str | Path | None = None) -> RasterImage:
        return self.image_repository.decode(data, path)

    def exists(self, path: str | Path) -> bool:
        return self.image_repository.exists(path)

    def list_names(self, folder: str | Path) -> List[str]:
        return self.image_repository.list_names(folder)

    def resize(self, img: RasterImage, width: int | None = None, height: int | None = None) -> RasterImage:
        """
        Scale the whole image into a width x height grid (bilinear).

        Args:
            img (RasterImage): Any decoded image, at least 1x1.
            width (int): Target width, FINGERPRINT_SIZE when omitted.
            height (int): Target height, FINGERPRINT_SIZE when omitted.

        Returns:
            (RasterImage): A new image; the input is never modified.
        """
        width = width or self.FINGERPRINT_SIZE
        height = height or self.FINGERPRINT_SIZE
        if img.width < 1 or img.height < 1:
            raise ValueError(f"Cannot resize an empty image: {img.width}x{img.height}")

        if (img.width, img.height) == (width, height):
            return self.create_image(img.pixels.copy(), img.path)

        resized = cv2.resize(img.pixels, (width, height), interpolation=cv2.INTER_LINEAR)
        return self.create_image(resized, img.path)

    @staticmethod
    def to_gray(img: RasterImage) -> np.ndarray:
        """
        Luminance per pixel, row-major, as int64 in [0, 255].
        Truncates instead of rounding, so cv2.cvtColor is not a substitute.
        """
        rgb = img.pixels[:, :, :3].astype(np.float64)
        r_w, g_w, b_w = GRAY_WEIGHTS
        gray = rgb[:, :, 0] * r_w + rgb[:, :, 1] * g_w + rgb[:, :, 2] * b_w
        return np.floor(gray).astype(np.int64).ravel()

    def save_fingerprint(self, fingerprint: Fingerprint, path: str | Path) -> None:
        """
        Write the black/white preview of a fingerprint to *path*.
        """
        self.image_repository.save(fingerprint.to_pixels(), path)

from pathlib import Path
from typing import Union, Iterable, List
import numpy as np
import cv2
from PIL import Image as PILImage
from dotenv import load_dotenv
import logging
import os
from ..models.raster_image import RasterImage
from ..errors import DecodeError

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


class ImageRepository:
    """
    Handles file I/O and decoding for RasterImage entities.
    """
    def __init__(self):
        # Empty setting means "accept every file"
        raw_exts = os.getenv("VALID_IMAGE_EXTENSIONS", "")
        self.VALID_EXTS = {ext.strip().lower() for ext in raw_exts.split(",") if ext.strip()}

    @staticmethod
    def create_image(pixels: np.ndarray, path: Union[str, Path] = None) -> RasterImage:
        if path is None:
            return RasterImage(pixels)
        return RasterImage(pixels=pixels, path=Path(path))

    @staticmethod
    def decode(data: bytes, path: Union[str, Path] = None) -> RasterImage:
        """
        Decode PNG/JPEG/... bytes into an RGBA RasterImage.
        Raises DecodeError when OpenCV cannot interpret the bytes.
        """
        label = str(path) if path is not None else "<bytes>"
        if not data:
            raise DecodeError(f"Empty image data: {label}")

        try:
            arr = cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_UNCHANGED)
        except cv2.error as err:
            raise DecodeError(f"Image could not be decoded: {label}") from err
        if arr is None:
            raise DecodeError(f"Image could not be decoded: {label}")

        if arr.dtype == np.uint16:
            arr = (arr >> 8).astype(np.uint8)
        elif arr.dtype != np.uint8:
            raise DecodeError(f"Unsupported sample type {arr.dtype}: {label}")

        if arr.ndim == 3 and arr.shape[2] == 1:
            arr = arr[:, :, 0]

        if arr.ndim == 2:
            rgba = cv2.cvtColor(arr, cv2.COLOR_GRAY2RGBA)
        elif arr.shape[2] == 3:
            rgba = cv2.cvtColor(arr, cv2.COLOR_BGR2RGBA)
        elif arr.shape[2] == 4:
            rgba = cv2.cvtColor(arr, cv2.COLOR_BGRA2RGBA)
        else:
            raise DecodeError(f"Unsupported channel count {arr.shape[2]}: {label}")

        if rgba.shape[0] < 1 or rgba.shape[1] < 1:
            raise DecodeError(f"Image has no pixels: {label}")

        return RasterImage(pixels=rgba, path=Path(path) if path is not None else None)

    @staticmethod
    def read_bytes(path: Union[str, Path]) -> bytes:
        path = Path(path)
        try:
            return path.read_bytes()
        except OSError as err:
            raise DecodeError(f"Image not readable: {path} ({err})") from err

    def load(self, path: Union[str, Path]) -> RasterImage:
        path = Path(path)
        return self.decode(self.read_bytes(path), path)

    @staticmethod
    def save(pixels: np.ndarray, path: Union[str, Path]) -> None:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        PILImage.fromarray(pixels).save(path)

    @staticmethod
    def exists(path: Union[str, Path]) -> bool:
        return Path(path).exists()

    def list_names(
        self,
        folder: Union[str, Path],
        *,
        exts: Iterable[str] | None = None,
    ) -> List[str]:
        """
        Names of the regular files directly inside *folder*, sorted.
        """
        folder = Path(folder)
        if not folder.is_dir():
            raise NotADirectoryError(folder)

        allowed = {e.lower() for e in exts} if exts is not None else self.VALID_EXTS

        names = []
        for p in sorted(folder.iterdir()):
            if not p.is_file():
                logger.debug(f"Skipping because not file: {p}")
                continue
            if allowed and p.suffix.lower() not in allowed:
                logger.debug(f"Skipping due to extension: {p}")
                continue
            names.append(p.name)
        return names

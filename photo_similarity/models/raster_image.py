from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
import numpy as np


@dataclass
class RasterImage:
    """
    Simple data object: RGBA pixels (+ optional source path for bookkeeping).
    Also used for the fixed-size resized image inside a fingerprint run.
    """
    pixels: np.ndarray # Shape (H, W, 4), dtype uint8, RGBA order.
    path: Path | None = None # Source of the image.

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

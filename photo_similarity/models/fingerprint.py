from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
import numpy as np


@dataclass(eq=False)
class Fingerprint:
    """
    Binary mask of a downscaled image plus the Otsu threshold that produced it.
    Bit 1 marks the dark class (gray <= threshold), bit 0 the light class.
    """
    mask: np.ndarray  # Shape (width*height,), dtype uint8, values 0/1, row-major.
    threshold: int    # Otsu threshold in [0, 255]
    width: int
    height: int
    path: Path | None = None

    def __len__(self) -> int:
        return int(self.mask.size)

    @property
    def dark_ratio(self) -> float:
        """Fraction of bits in the dark class."""
        if self.mask.size == 0:
            return 0.0
        return float(self.mask.sum()) / self.mask.size

    def hexdigest(self) -> str:
        # np.packbits pads the last byte with zeros
        return np.packbits(self.mask).tobytes().hex()

    def to_pixels(self) -> np.ndarray:
        """Render as an (H, W) uint8 array: dark bits black, light bits white."""
        return np.where(self.mask == 1, 0, 255).astype(np.uint8).reshape(self.height, self.width)

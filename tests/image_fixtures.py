from io import BytesIO
from pathlib import Path

import numpy as np
from PIL import Image as PILImage


def solid(width, height, rgb):
    arr = np.zeros((height, width, 3), dtype=np.uint8)
    arr[:, :] = rgb
    return arr


def checkerboard(width, height, cell=1):
    ys, xs = np.indices((height, width))
    on = ((ys // cell + xs // cell) % 2).astype(bool)
    arr = np.zeros((height, width, 3), dtype=np.uint8)
    arr[on] = (255, 255, 255)
    return arr


def encode(arr, fmt="PNG"):
    buffer = BytesIO()
    PILImage.fromarray(arr).save(buffer, format=fmt)
    return buffer.getvalue()


def write_image(path, arr, fmt="PNG"):
    path = Path(path)
    path.write_bytes(encode(arr, fmt))
    return path

from __future__ import annotations

import numpy as np

from autobgremover.buffers import ConfidenceMask, PixelBuffer


def make_gradient_buffer(width: int, height: int) -> PixelBuffer:
    """Opaque buffer where every pixel has a distinct, non-zero colour."""
    pixels = np.zeros((height, width, 4), dtype=np.uint8)
    ys, xs = np.mgrid[0:height, 0:width]
    pixels[..., 0] = 10 + xs * 7
    pixels[..., 1] = 20 + ys * 11
    pixels[..., 2] = 30
    pixels[..., 3] = 255
    return PixelBuffer(pixels)


def make_mask(values) -> ConfidenceMask:
    return ConfidenceMask(np.asarray(values, dtype=np.float32))

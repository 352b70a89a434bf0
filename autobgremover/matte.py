from __future__ import annotations

import numpy as np
from loguru import logger

from .buffers import ConfidenceMask, PixelBuffer
from .config import MIN_CONFIDENCE, TRANSPARENT
from .errors import DimensionMismatch


def background_mask(mask: ConfidenceMask, severity: float = MIN_CONFIDENCE) -> np.ndarray:
    """
    Boolean (H, W) array, True where the pixel is classified as background.

    Confidences are widened to float64 before comparing so a float32 value that
    rounds to the threshold is not misclassified.
    """
    return mask.values.astype(np.float64) < float(severity)


def apply_matte(buffer: PixelBuffer, mask: ConfidenceMask, severity: float = MIN_CONFIDENCE) -> float:
    """
    Make every background pixel of `buffer` fully transparent, in place.

    Pixels with confidence >= severity keep their colour and alpha untouched.

    Returns:
      - fraction of pixels that were marked transparent, in [0, 1]
    """
    if buffer.size != mask.size:
        raise DimensionMismatch(buffer.size, mask.size)

    background = background_mask(mask, severity)
    buffer.pixels[background] = TRANSPARENT

    transparent = int(np.count_nonzero(background))
    ratio = transparent / float(buffer.width * buffer.height)
    logger.debug(
        f"matte: {transparent}/{buffer.width * buffer.height} px transparent "
        f"(ratio={ratio:.4f}, severity={severity})"
    )
    return ratio

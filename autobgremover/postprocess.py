from __future__ import annotations

import cv2
import numpy as np

from .preprocess import PreprocessMeta


def restore_mask_to_original(mask: np.ndarray, meta: PreprocessMeta) -> np.ndarray:
    """
    Map a square model-space confidence map back to the source image size.

    Steps:
      1) drop the padding using the recorded offsets
      2) resize back to (orig_w, orig_h)
    """
    if mask.ndim != 2:
        raise ValueError(f"Expected 2D mask, got shape={mask.shape}")
    mask = mask.astype(np.float32, copy=False)

    x0, y0 = meta.x_offset, meta.y_offset
    x1, y1 = x0 + meta.resized_w, y0 + meta.resized_h
    cropped = mask[y0:y1, x0:x1]
    if cropped.size == 0:
        raise ValueError("Mask crop is empty; check preprocessing meta.")

    restored = cv2.resize(np.ascontiguousarray(cropped), (meta.orig_w, meta.orig_h), interpolation=cv2.INTER_LINEAR)
    return np.clip(restored, 0.0, 1.0).astype(np.float32, copy=False)

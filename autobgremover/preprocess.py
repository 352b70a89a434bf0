from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import cv2
import numpy as np
import torch

from .config import IMAGENET_MEAN, IMAGENET_STD, PAD_COLOR, TARGET_SIZE


@dataclass(frozen=True)
class PreprocessMeta:
    """Where the source image sits inside the padded model input."""

    orig_h: int
    orig_w: int
    resized_h: int
    resized_w: int
    scale: float
    x_offset: int
    y_offset: int
    target_size: int = TARGET_SIZE


def resize_with_padding(img: np.ndarray, target_size: int = TARGET_SIZE) -> Tuple[np.ndarray, PreprocessMeta]:
    """
    Scale the longest side to `target_size` and pad the rest to a square.

    Returns:
      - padded_rgb: uint8 ndarray (target_size, target_size, 3)
      - meta: offsets needed to map the model output back
    """
    if img.ndim != 3 or img.shape[2] != 3:
        raise ValueError(f"Expected RGB image (H,W,3), got shape={img.shape}")

    orig_h, orig_w = img.shape[:2]
    if orig_h <= 0 or orig_w <= 0:
        raise ValueError(f"Invalid image size: {(orig_h, orig_w)}")

    scale = float(target_size) / float(max(orig_h, orig_w))
    resized_w = max(1, int(round(orig_w * scale)))
    resized_h = max(1, int(round(orig_h * scale)))
    interp = cv2.INTER_AREA if scale < 1 else cv2.INTER_CUBIC
    resized = cv2.resize(np.ascontiguousarray(img), (resized_w, resized_h), interpolation=interp)

    padded = np.full((target_size, target_size, 3), PAD_COLOR, dtype=np.uint8)
    x_offset = (target_size - resized_w) // 2
    y_offset = (target_size - resized_h) // 2
    padded[y_offset : y_offset + resized_h, x_offset : x_offset + resized_w] = resized

    meta = PreprocessMeta(
        orig_h=orig_h,
        orig_w=orig_w,
        resized_h=resized_h,
        resized_w=resized_w,
        scale=scale,
        x_offset=x_offset,
        y_offset=y_offset,
        target_size=target_size,
    )
    return padded, meta


def normalize(img: np.ndarray) -> torch.Tensor:
    """uint8 RGB (S,S,3) -> ImageNet-normalized float32 tensor (1,3,S,S)."""
    if img.ndim != 3 or img.shape[2] != 3 or img.shape[0] != img.shape[1]:
        raise ValueError(f"Expected square RGB image (S,S,3), got {img.shape}")
    x = img.astype(np.float32) / 255.0
    mean = np.array(IMAGENET_MEAN, dtype=np.float32).reshape(1, 1, 3)
    std = np.array(IMAGENET_STD, dtype=np.float32).reshape(1, 1, 3)
    x = (x - mean) / std
    x = np.transpose(x, (2, 0, 1))  # CHW
    return torch.from_numpy(np.ascontiguousarray(x)).unsqueeze(0).float()

"""
Segmenter contract.

A segmenter turns an image into a ConfidenceMask of the same size. The
remover treats it as a black box: it only checks the mask dimensions and
wraps any exception it raises in SegmenterFailure.

Implementations:
    CallableSegmenter  - adapts fn(rgb) -> (H, W) float array
    BiRefNetSegmenter  - torch/transformers model (autobgremover.birefnet)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Callable, Optional

import numpy as np

from .buffers import ConfidenceMask, PixelBuffer


class Segmenter(ABC):
    @abstractmethod
    def segment(self, image: PixelBuffer) -> ConfidenceMask:
        """Return per-pixel foreground confidence for `image`. Must not modify it."""
        raise NotImplementedError

    def close(self) -> None:
        """Release model resources. Safe to call more than once."""


class CallableSegmenter(Segmenter):
    """
    Wrap any `fn(rgb: ndarray (H,W,3) uint8) -> ndarray (H,W) float` model,
    e.g. a MediaPipe selfie segmenter or an ONNX session.
    """

    def __init__(self, fn: Callable[[np.ndarray], np.ndarray], name: Optional[str] = None):
        self._fn = fn
        self.name = name or getattr(fn, "__name__", type(fn).__name__)

    def segment(self, image: PixelBuffer) -> ConfidenceMask:
        out = np.asarray(self._fn(image.rgb.copy()))
        # (H, W, 1) is common for single-channel model outputs.
        if out.ndim == 3 and out.shape[2] == 1:
            out = out[..., 0]
        return ConfidenceMask(out)

    def __repr__(self) -> str:
        return f"CallableSegmenter({self.name})"

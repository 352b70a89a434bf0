from __future__ import annotations

from typing import Optional, Tuple


class BackgroundRemovalError(Exception):
    """Base class for every error raised by the remover."""


class DimensionMismatch(BackgroundRemovalError, ValueError):
    def __init__(self, buffer_size: Tuple[int, int], mask_size: Tuple[int, int]):
        self.buffer_size = buffer_size
        self.mask_size = mask_size
        super().__init__(
            f"Mask size {mask_size[0]}x{mask_size[1]} does not match image size "
            f"{buffer_size[0]}x{buffer_size[1]}"
        )


class ForegroundNotFound(BackgroundRemovalError, RuntimeError):
    """
    The segmenter found (almost) no foreground.

    This is an expected outcome for photos without a clear subject; callers
    should handle it separately from crashes (e.g. ask for a clearer photo).
    """

    def __init__(self, transparency_ratio: float, bound: Optional[float] = None):
        self.transparency_ratio = transparency_ratio
        self.bound = bound
        msg = f"No foreground detected (transparency={transparency_ratio:.4f}"
        if bound is not None:
            msg += f" > {bound}"
        super().__init__(msg + ").")


class SegmenterFailure(BackgroundRemovalError, RuntimeError):
    """The segmentation model failed. The original exception is kept as __cause__."""


class EmptyTrimRegion(BackgroundRemovalError, ValueError):
    def __init__(self, box: Tuple[int, int, int, int], reason: str = "no non-transparent pixels"):
        self.box = box
        super().__init__(f"Cannot trim to an empty region {box}: {reason}")

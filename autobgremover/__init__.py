"""
Background removal from a per-pixel foreground confidence mask.

The torch-backed BiRefNetSegmenter lives in `autobgremover.birefnet` and is
not imported here.
"""

from .buffers import ConfidenceMask, PixelBuffer
from .config import MIN_CONFIDENCE, TRANSPARENCY_BOUND
from .errors import (
    BackgroundRemovalError,
    DimensionMismatch,
    EmptyTrimRegion,
    ForegroundNotFound,
    SegmenterFailure,
)
from .matte import apply_matte
from .pipeline import BackgroundRemover, RemovalResult, process, run_matte_pipeline
from .segmenter import CallableSegmenter, Segmenter
from .trim import BoundingBox, find_bounding_box, trim, trim_with_box

__version__ = "0.1.0"

__all__ = [
    "BackgroundRemovalError",
    "BackgroundRemover",
    "BoundingBox",
    "CallableSegmenter",
    "ConfidenceMask",
    "DimensionMismatch",
    "EmptyTrimRegion",
    "ForegroundNotFound",
    "MIN_CONFIDENCE",
    "PixelBuffer",
    "RemovalResult",
    "Segmenter",
    "SegmenterFailure",
    "TRANSPARENCY_BOUND",
    "apply_matte",
    "find_bounding_box",
    "process",
    "run_matte_pipeline",
    "trim",
    "trim_with_box",
]

from __future__ import annotations

import asyncio
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional

from loguru import logger

from .buffers import ConfidenceMask, PixelBuffer
from .config import MIN_CONFIDENCE, TRANSPARENCY_BOUND
from .errors import BackgroundRemovalError, ForegroundNotFound, SegmenterFailure
from .matte import apply_matte
from .segmenter import Segmenter
from .trim import BoundingBox, trim_with_box


@dataclass(frozen=True)
class StageTimings:
    segment_s: float
    matte_s: float
    trim_s: float
    total_s: float


@dataclass(frozen=True)
class RemovalResult:
    image: PixelBuffer
    transparency_ratio: float
    bbox: Optional[BoundingBox]
    timings: StageTimings


def run_matte_pipeline(
    buffer: PixelBuffer,
    mask: ConfidenceMask,
    *,
    trim_empty_part: bool = False,
    severity: float = MIN_CONFIDENCE,
) -> RemovalResult:
    """
    Deterministic, linear pipeline:
      1) Copy the input (the caller's buffer is never touched)
      2) Matte: background pixels -> transparent
      3) Fail with ForegroundNotFound above the transparency bound
      4) Optionally trim to content
    """
    t0 = time.perf_counter()
    working = buffer.copy()

    ratio = apply_matte(working, mask, severity)
    t_matte = time.perf_counter()

    if ratio > TRANSPARENCY_BOUND:
        raise ForegroundNotFound(ratio, TRANSPARENCY_BOUND)

    bbox = None
    if trim_empty_part:
        working, bbox = trim_with_box(working)
    t_trim = time.perf_counter()

    return RemovalResult(
        image=working,
        transparency_ratio=ratio,
        bbox=bbox,
        timings=StageTimings(
            segment_s=0.0,
            matte_s=t_matte - t0,
            trim_s=t_trim - t_matte,
            total_s=t_trim - t0,
        ),
    )


def process(
    buffer: PixelBuffer,
    mask: ConfidenceMask,
    trim_empty_part: bool = False,
    severity: float = MIN_CONFIDENCE,
) -> PixelBuffer:
    """Remove the background of `buffer` using a precomputed confidence mask."""
    return run_matte_pipeline(buffer, mask, trim_empty_part=trim_empty_part, severity=severity).image


class BackgroundRemover:
    """
    Segmenter + matte/trim pipeline with an explicit lifecycle.

    Construct once, reuse across images, then `close()` (or use as a context
    manager). Each call works on its own copy of the image, so concurrent
    calls through `submit()` do not share mutable state.
    """

    def __init__(
        self,
        segmenter: Segmenter,
        *,
        severity: float = MIN_CONFIDENCE,
        trim_empty_part: bool = False,
        max_workers: int = 1,
    ):
        self.segmenter = segmenter
        self.severity = severity
        self.trim_empty_part = trim_empty_part
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="bg-remover")
        self._closed = False

    def _segment(self, image: PixelBuffer) -> ConfidenceMask:
        try:
            return self.segmenter.segment(image)
        except BackgroundRemovalError:
            raise
        except Exception as e:
            raise SegmenterFailure(f"Segmentation failed: {type(e).__name__}: {e}") from e

    def remove(
        self,
        image: PixelBuffer,
        *,
        trim_empty_part: Optional[bool] = None,
        severity: Optional[float] = None,
    ) -> RemovalResult:
        if self._closed:
            raise RuntimeError("BackgroundRemover is closed.")
        trim_empty_part = self.trim_empty_part if trim_empty_part is None else trim_empty_part
        severity = self.severity if severity is None else severity

        t0 = time.perf_counter()
        mask = self._segment(image)
        t_seg = time.perf_counter() - t0

        result = run_matte_pipeline(image, mask, trim_empty_part=trim_empty_part, severity=severity)
        logger.debug(
            f"removed background {image.width}x{image.height} -> "
            f"{result.image.width}x{result.image.height} (ratio={result.transparency_ratio:.4f})"
        )
        t = result.timings
        return RemovalResult(
            image=result.image,
            transparency_ratio=result.transparency_ratio,
            bbox=result.bbox,
            timings=StageTimings(
                segment_s=t_seg,
                matte_s=t.matte_s,
                trim_s=t.trim_s,
                total_s=t_seg + t.total_s,
            ),
        )

    def submit(
        self,
        image: PixelBuffer,
        *,
        trim_empty_part: Optional[bool] = None,
        severity: Optional[float] = None,
    ) -> "Future[RemovalResult]":
        if self._closed:
            raise RuntimeError("BackgroundRemover is closed.")
        return self._executor.submit(self.remove, image, trim_empty_part=trim_empty_part, severity=severity)

    async def remove_async(
        self,
        image: PixelBuffer,
        *,
        trim_empty_part: Optional[bool] = None,
        severity: Optional[float] = None,
    ) -> RemovalResult:
        """Run `remove` on the engine's worker without blocking the event loop."""
        if self._closed:
            raise RuntimeError("BackgroundRemover is closed.")
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            self._executor,
            lambda: self.remove(image, trim_empty_part=trim_empty_part, severity=severity),
        )

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._executor.shutdown(wait=True)
        self.segmenter.close()

    @property
    def closed(self) -> bool:
        return self._closed

    def __enter__(self) -> "BackgroundRemover":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

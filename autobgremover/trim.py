from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np
from loguru import logger

from .buffers import PixelBuffer
from .errors import EmptyTrimRegion


@dataclass(frozen=True)
class BoundingBox:
    """Half-open box [first_x, last_x) x [first_y, last_y) in source coordinates."""

    first_x: int
    first_y: int
    last_x: int
    last_y: int

    @property
    def width(self) -> int:
        return self.last_x - self.first_x

    @property
    def height(self) -> int:
        return self.last_y - self.first_y

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def as_tuple(self) -> Tuple[int, int, int, int]:
        return self.first_x, self.first_y, self.last_x, self.last_y


def content_mask(buffer: PixelBuffer) -> np.ndarray:
    """
    True for every pixel that is not exactly (0, 0, 0, 0).

    A pixel with zero alpha but some colour left counts as content.
    """
    return np.any(buffer.pixels != 0, axis=2)


def _bounding_box(content: np.ndarray) -> BoundingBox:
    h, w = content.shape
    first_x, first_y, last_x, last_y = 0, 0, w, h

    # Each pass keeps its default when it finds nothing.
    cols = np.flatnonzero(content.any(axis=0))
    if cols.size:
        first_x = int(cols[0])

    rows = np.flatnonzero(content[:, first_x:].any(axis=1))
    if rows.size:
        first_y = int(rows[0])

    region = content[first_y:, first_x:]
    cols = np.flatnonzero(region.any(axis=0))
    if cols.size:
        last_x = first_x + int(cols[-1]) + 1

    rows = np.flatnonzero(region.any(axis=1))
    if rows.size:
        last_y = first_y + int(rows[-1]) + 1

    return BoundingBox(first_x=first_x, first_y=first_y, last_x=last_x, last_y=last_y)


def find_bounding_box(buffer: PixelBuffer) -> BoundingBox:
    """
    Minimal box holding every non-transparent pixel.

    A fully transparent buffer yields the full-image box (0, 0, W, H).
    """
    return _bounding_box(content_mask(buffer))


def trim_with_box(buffer: PixelBuffer, *, fail_fast: bool = True) -> Tuple[PixelBuffer, BoundingBox]:
    """
    Crop `buffer` to its non-transparent content and return the box used.
    Always returns a new buffer.

    If the buffer holds no content at all:
      - fail_fast=True: raise EmptyTrimRegion
      - fail_fast=False: return a full-size copy and the full-image box
    """
    content = content_mask(buffer)
    box = _bounding_box(content)

    if not content.any():
        if fail_fast:
            raise EmptyTrimRegion(box.as_tuple())
        logger.warning(f"trim: {buffer.width}x{buffer.height} buffer is fully transparent, keeping full size")
        return buffer.copy(), box
    if box.is_empty:
        raise EmptyTrimRegion(box.as_tuple(), reason="degenerate box")

    logger.debug(f"trim: {buffer.width}x{buffer.height} -> {box.width}x{box.height} at {box.as_tuple()}")
    return buffer.crop(*box.as_tuple()), box


def trim(buffer: PixelBuffer, *, fail_fast: bool = True) -> PixelBuffer:
    """Crop `buffer` to its non-transparent content. See trim_with_box."""
    return trim_with_box(buffer, fail_fast=fail_fast)[0]

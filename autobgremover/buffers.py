from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence, Tuple, Union

import numpy as np
from PIL import Image

Pixel = Tuple[int, int, int, int]


def _as_uint8(arr: np.ndarray) -> np.ndarray:
    """
    Accept uint8 as-is, and other integer arrays only if every value fits in
    [0, 255]. Floats are rejected rather than truncated.
    """
    if arr.dtype == np.uint8:
        return arr
    if not np.issubdtype(arr.dtype, np.integer):
        raise ValueError(f"Expected 8-bit integer pixel components, got dtype={arr.dtype}")
    lo, hi = int(arr.min()), int(arr.max())
    if lo < 0 or hi > 255:
        raise ValueError(f"Pixel components out of range [0, 255]: min={lo}, max={hi}")
    return arr.astype(np.uint8)


@dataclass(eq=False)
class PixelBuffer:
    """
    Mutable RGBA pixel grid.

    `pixels` is a uint8 ndarray of shape (H, W, 4), row-major, so pixel (x, y)
    lives at pixels[y, x]. A buffer belongs to whichever stage is currently
    transforming it; stages hand over copies, never shared views.
    """

    pixels: np.ndarray

    def __post_init__(self) -> None:
        p = self.pixels
        if not isinstance(p, np.ndarray):
            p = np.asarray(p)
        if p.ndim != 3 or p.shape[2] != 4:
            raise ValueError(f"Expected RGBA pixels (H,W,4), got shape={p.shape}")
        if p.shape[0] <= 0 or p.shape[1] <= 0:
            raise ValueError(f"Invalid image size: {p.shape[:2]}")
        self.pixels = _as_uint8(p)

    @classmethod
    def new(cls, width: int, height: int, fill: Sequence[int] = (0, 0, 0, 0)) -> "PixelBuffer":
        if width <= 0 or height <= 0:
            raise ValueError(f"Invalid image size: {(width, height)}")
        pixels = np.empty((height, width, 4), dtype=np.uint8)
        pixels[...] = np.asarray(fill, dtype=np.uint8)
        return cls(pixels)

    @classmethod
    def from_rgb(cls, rgb: np.ndarray, alpha: int = 255) -> "PixelBuffer":
        """Wrap an RGB uint8 array (H,W,3) as a fully opaque RGBA buffer."""
        if rgb.ndim != 3 or rgb.shape[2] != 3:
            raise ValueError(f"Expected RGB image (H,W,3), got {rgb.shape}")
        a = np.full(rgb.shape[:2], alpha, dtype=np.uint8)
        return cls(np.dstack([_as_uint8(rgb), a]))

    @classmethod
    def from_pil(cls, img: Image.Image) -> "PixelBuffer":
        if img.mode != "RGBA":
            img = img.convert("RGBA")
        return cls(np.array(img, dtype=np.uint8))

    def to_pil(self) -> Image.Image:
        return Image.fromarray(np.ascontiguousarray(self.pixels))

    @property
    def width(self) -> int:
        return int(self.pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self.pixels.shape[0])

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    @property
    def rgb(self) -> np.ndarray:
        """View of the colour channels, (H,W,3)."""
        return self.pixels[..., :3]

    def _check_xy(self, x: int, y: int) -> None:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Pixel ({x}, {y}) outside {self.width}x{self.height} buffer")

    def get_pixel(self, x: int, y: int) -> Pixel:
        self._check_xy(x, y)
        r, g, b, a = self.pixels[y, x]
        return int(r), int(g), int(b), int(a)

    def set_pixel(self, x: int, y: int, value: Sequence[int]) -> None:
        self._check_xy(x, y)
        if len(value) != 4:
            raise ValueError(f"Expected an (R,G,B,A) pixel, got {tuple(value)}")
        self.pixels[y, x] = value

    def copy(self) -> "PixelBuffer":
        return PixelBuffer(self.pixels.copy())

    def crop(self, x0: int, y0: int, x1: int, y1: int) -> "PixelBuffer":
        """Copy of the half-open rectangle [x0, x1) x [y0, y1)."""
        if not (0 <= x0 < x1 <= self.width and 0 <= y0 < y1 <= self.height):
            raise ValueError(f"Crop box {(x0, y0, x1, y1)} invalid for {self.width}x{self.height} buffer")
        return PixelBuffer(self.pixels[y0:y1, x0:x1].copy())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PixelBuffer):
            return NotImplemented
        return self.pixels.shape == other.pixels.shape and bool(np.array_equal(self.pixels, other.pixels))

    def __repr__(self) -> str:
        return f"PixelBuffer(width={self.width}, height={self.height})"


@dataclass(frozen=True, eq=False)
class ConfidenceMask:
    """
    Read-only per-pixel foreground confidence, float32 (H, W).

    Values are nominally in [0, 1] but are only ever compared, never validated.
    """

    values: np.ndarray

    def __post_init__(self) -> None:
        v = np.array(self.values, dtype=np.float32, copy=True)
        if v.ndim != 2:
            raise ValueError(f"Expected 2D confidence mask, got shape={v.shape}")
        if v.shape[0] <= 0 or v.shape[1] <= 0:
            raise ValueError(f"Invalid mask size: {v.shape}")
        v.setflags(write=False)
        object.__setattr__(self, "values", v)

    @classmethod
    def from_buffer(
        cls,
        width: int,
        height: int,
        buffer: Union[bytes, bytearray, memoryview],
        byteorder: str = "<",
    ) -> "ConfidenceMask":
        """
        Build a mask from a flat, row-major float32 byte buffer, the way
        segmenters usually hand their output over.
        """
        count = int(width) * int(height)
        if width <= 0 or height <= 0:
            raise ValueError(f"Invalid mask size: {(width, height)}")
        flat = np.frombuffer(buffer, dtype=np.dtype(f"{byteorder}f4"))
        if flat.size != count:
            raise ValueError(f"Mask buffer holds {flat.size} floats, expected {width}x{height}={count}")
        return cls(flat.reshape(height, width))

    @classmethod
    def from_values(cls, width: int, height: int, values: Sequence[float]) -> "ConfidenceMask":
        flat = np.asarray(values, dtype=np.float32).ravel()
        if flat.size != int(width) * int(height):
            raise ValueError(f"Got {flat.size} confidence values, expected {width}x{height}")
        return cls(flat.reshape(height, width))

    @property
    def width(self) -> int:
        return int(self.values.shape[1])

    @property
    def height(self) -> int:
        return int(self.values.shape[0])

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    def confidence(self, x: int, y: int) -> float:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"({x}, {y}) outside {self.width}x{self.height} mask")
        return float(self.values[y, x])

    def __repr__(self) -> str:
        return f"ConfidenceMask(width={self.width}, height={self.height})"

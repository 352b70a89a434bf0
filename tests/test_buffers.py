from __future__ import annotations

import numpy as np
import pytest
from PIL import Image

from autobgremover.buffers import ConfidenceMask, PixelBuffer


def test_new_buffer_is_filled():
    buf = PixelBuffer.new(3, 2, fill=(1, 2, 3, 4))
    assert buf.size == (3, 2)
    assert buf.pixels.shape == (2, 3, 4)
    assert buf.get_pixel(2, 1) == (1, 2, 3, 4)


def test_get_set_pixel_uses_x_y_order():
    buf = PixelBuffer.new(3, 2)
    buf.set_pixel(2, 0, (9, 8, 7, 6))
    assert buf.pixels[0, 2].tolist() == [9, 8, 7, 6]
    assert buf.get_pixel(2, 0) == (9, 8, 7, 6)
    assert buf.get_pixel(0, 1) == (0, 0, 0, 0)


@pytest.mark.parametrize("xy", [(-1, 0), (0, -1), (3, 0), (0, 2)])
def test_pixel_access_out_of_range(xy):
    buf = PixelBuffer.new(3, 2)
    with pytest.raises(IndexError):
        buf.get_pixel(*xy)
    with pytest.raises(IndexError):
        buf.set_pixel(*xy, (1, 1, 1, 1))


def test_rejects_bad_shapes():
    with pytest.raises(ValueError):
        PixelBuffer(np.zeros((2, 2, 3), dtype=np.uint8))
    with pytest.raises(ValueError):
        PixelBuffer(np.zeros((0, 2, 4), dtype=np.uint8))
    with pytest.raises(ValueError):
        PixelBuffer.new(0, 5)


def test_copy_is_independent(opaque_4x4):
    dup = opaque_4x4.copy()
    dup.set_pixel(0, 0, (0, 0, 0, 0))
    assert opaque_4x4.get_pixel(0, 0) != (0, 0, 0, 0)
    assert dup != opaque_4x4


def test_crop_copies_half_open_rectangle(opaque_4x4):
    out = opaque_4x4.crop(1, 2, 3, 4)
    assert out.size == (2, 2)
    np.testing.assert_array_equal(out.pixels, opaque_4x4.pixels[2:4, 1:3])
    out.pixels[...] = 0
    assert opaque_4x4.get_pixel(1, 2) != (0, 0, 0, 0)


def test_crop_rejects_empty_box(opaque_4x4):
    with pytest.raises(ValueError):
        opaque_4x4.crop(2, 0, 2, 4)


def test_pil_round_trip_keeps_alpha():
    img = Image.new("RGBA", (5, 3), (10, 20, 30, 40))
    buf = PixelBuffer.from_pil(img)
    assert buf.size == (5, 3)
    assert buf.get_pixel(4, 2) == (10, 20, 30, 40)
    assert buf.to_pil().getpixel((4, 2)) == (10, 20, 30, 40)


def test_from_rgb_is_opaque():
    rgb = np.full((2, 3, 3), 7, dtype=np.uint8)
    buf = PixelBuffer.from_rgb(rgb)
    assert buf.get_pixel(1, 1) == (7, 7, 7, 255)


def test_mask_is_read_only_copy():
    src = np.full((2, 3), 0.5, dtype=np.float32)
    mask = ConfidenceMask(src)
    src[0, 0] = 0.0
    assert mask.confidence(0, 0) == pytest.approx(0.5)
    assert mask.size == (3, 2)
    with pytest.raises(ValueError):
        mask.values[0, 0] = 1.0


def test_mask_from_float32_byte_buffer():
    flat = np.arange(6, dtype="<f4") / 10.0
    mask = ConfidenceMask.from_buffer(3, 2, flat.tobytes())
    assert mask.width == 3 and mask.height == 2
    # row-major: index = y * width + x
    assert mask.confidence(2, 1) == pytest.approx(0.5)
    assert mask.confidence(1, 0) == pytest.approx(0.1)


def test_mask_from_buffer_length_mismatch():
    flat = np.zeros(5, dtype="<f4")
    with pytest.raises(ValueError):
        ConfidenceMask.from_buffer(3, 2, flat.tobytes())


def test_mask_values_are_not_range_checked():
    mask = ConfidenceMask.from_values(2, 1, [-1.0, 3.5])
    assert mask.confidence(0, 0) == pytest.approx(-1.0)
    assert mask.confidence(1, 0) == pytest.approx(3.5)


def test_integer_pixels_in_range_are_accepted():
    buf = PixelBuffer(np.array([[[255, 0, 7, 128]]], dtype=np.int64))
    assert buf.pixels.dtype == np.uint8
    assert buf.get_pixel(0, 0) == (255, 0, 7, 128)


@pytest.mark.parametrize("bad", [[[[300, 0, 0, 255]]], [[[-1, 0, 0, 255]]]])
def test_integer_pixels_out_of_range_are_rejected(bad):
    with pytest.raises(ValueError, match="out of range"):
        PixelBuffer(np.array(bad, dtype=np.int64))


def test_float_pixels_are_rejected():
    with pytest.raises(ValueError, match="dtype"):
        PixelBuffer(np.array([[[0.5, 0.9, 1.0, 1.0]]]))


def test_from_rgb_rejects_values_that_do_not_fit_uint8():
    with pytest.raises(ValueError):
        PixelBuffer.from_rgb(np.full((2, 2, 3), 256, dtype=np.int32))
    with pytest.raises(ValueError):
        PixelBuffer.from_rgb(np.full((2, 2, 3), 0.5, dtype=np.float32))

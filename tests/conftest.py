from __future__ import annotations

import pytest

from autobgremover.buffers import PixelBuffer
from helpers import make_gradient_buffer


@pytest.fixture
def opaque_4x4() -> PixelBuffer:
    return make_gradient_buffer(4, 4)


@pytest.fixture
def bordered_4x4() -> PixelBuffer:
    """4x4 opaque buffer with a 1-pixel fully transparent border."""
    buf = make_gradient_buffer(4, 4)
    buf.pixels[0, :] = 0
    buf.pixels[-1, :] = 0
    buf.pixels[:, 0] = 0
    buf.pixels[:, -1] = 0
    return buf

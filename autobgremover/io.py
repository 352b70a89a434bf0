from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Iterator

from PIL import Image

from .buffers import PixelBuffer

IMAGE_EXTS = {".jpg", ".jpeg", ".png", ".webp", ".bmp", ".tif", ".tiff"}


def load_image(path: str) -> PixelBuffer:
    """Decode any Pillow-readable image into an RGBA PixelBuffer."""
    try:
        img = Image.open(path)
        img.load()
    except FileNotFoundError:
        raise
    except OSError as e:
        raise ValueError(f"Could not read image: {path}") from e
    return PixelBuffer.from_pil(img)


def save_rgba_png(buffer: PixelBuffer, out_path: str) -> None:
    """Save as lossless RGBA PNG."""
    p = Path(out_path)
    p.parent.mkdir(parents=True, exist_ok=True)
    buffer.to_pil().save(str(p), format="PNG", optimize=False)


def write_json(path: str, data: Dict[str, Any]) -> None:
    p = Path(path)
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(json.dumps(data, indent=2, sort_keys=True), encoding="utf-8")


def iter_images(input_path: Path) -> Iterator[Path]:
    if input_path.is_file():
        yield input_path
        return
    for p in sorted(input_path.rglob("*")):
        if p.is_file() and p.suffix.lower() in IMAGE_EXTS:
            yield p

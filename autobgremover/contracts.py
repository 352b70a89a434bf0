from __future__ import annotations

from typing import Literal, Optional, Tuple

from pydantic import BaseModel


class RemovalReport(BaseModel):
    """Per-image metadata emitted next to the RGBA output."""

    source_path: str
    output_path: Optional[str] = None
    status: Literal["ok", "no_foreground", "segmenter_failure", "empty_trim"]
    width: int
    height: int
    output_width: Optional[int] = None
    output_height: Optional[int] = None
    severity: float
    trimmed: bool
    transparency_ratio: Optional[float] = None
    bbox: Optional[Tuple[int, int, int, int]] = None
    total_s: Optional[float] = None
    error: str = ""

from __future__ import annotations

from typing import Optional

import numpy as np
import torch
from loguru import logger

from .buffers import ConfidenceMask, PixelBuffer
from .config import DEFAULT_MODEL, TARGET_SIZE
from .inference import predict_matte
from .model import freeze_model, get_device, load_model
from .postprocess import restore_mask_to_original
from .preprocess import normalize, resize_with_padding
from .segmenter import Segmenter


class BiRefNetSegmenter(Segmenter):
    """
    Salient-object segmenter backed by BiRefNet (or any TorchScript model with
    the same single-logit-map output).

    Pass `model` to reuse an already loaded module instead of `model_spec`.
    """

    def __init__(
        self,
        model_spec: str = DEFAULT_MODEL,
        *,
        device: Optional[str] = None,
        model: Optional[torch.nn.Module] = None,
        target_size: int = TARGET_SIZE,
    ):
        self.model_spec = model_spec
        self.target_size = target_size
        if model is None:
            self.model, self.device = load_model(model_spec, device=get_device(device))
        else:
            self.device = get_device(device)
            self.model = freeze_model(model, self.device)

    def segment(self, image: PixelBuffer) -> ConfidenceMask:
        if self.model is None:
            raise RuntimeError("Segmenter has been closed.")
        padded, meta = resize_with_padding(np.ascontiguousarray(image.rgb), target_size=self.target_size)
        matte = predict_matte(self.model, normalize(padded), self.device)
        return ConfidenceMask(restore_mask_to_original(matte, meta))

    def close(self) -> None:
        if self.model is None:
            return
        self.model = None
        if self.device.type == "cuda":
            torch.cuda.empty_cache()
        logger.debug(f"Released segmentation model {self.model_spec}")

    def __repr__(self) -> str:
        return f"BiRefNetSegmenter({self.model_spec!r}, device={self.device})"

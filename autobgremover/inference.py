from __future__ import annotations

import numpy as np
import torch

from .model import forward_model


def _primary_output(y):
    """
    Segmentation models return a bare tensor, a list/tuple of stage outputs
    (final stage last), or a dict / ModelOutput. Pick the final logits.
    """
    if isinstance(y, torch.Tensor):
        return y
    if hasattr(y, "logits") and isinstance(y.logits, torch.Tensor):
        return y.logits
    if isinstance(y, (list, tuple)) and len(y) > 0:
        for item in reversed(y):
            if isinstance(item, torch.Tensor):
                return item
        return _primary_output(y[-1])
    if isinstance(y, dict):
        for k in ("logits", "pred", "alpha", "mask"):
            if isinstance(y.get(k), torch.Tensor):
                return y[k]
        for v in y.values():
            if isinstance(v, torch.Tensor):
                return v
    return y


def predict_matte(model: torch.nn.Module, x: torch.Tensor, device: torch.device) -> np.ndarray:
    """
    Forward pass, logits -> foreground probability.

    Output:
      - float32 ndarray in [0,1], shape (S, S) matching the input tensor
    """
    if x.ndim != 4 or x.shape[0] != 1:
        raise ValueError(f"Expected input tensor (1,3,H,W), got {tuple(x.shape)}")
    size = tuple(x.shape[-2:])

    y = _primary_output(forward_model(model, x.float().to(device)))
    if not isinstance(y, torch.Tensor):
        raise RuntimeError(f"Model output is not a tensor: {type(y)}")

    # (1,C,H,W) / (1,H,W) / (H,W) -> (H,W)
    if y.ndim == 4:
        y = y[0, 0]
    elif y.ndim == 3:
        y = y[0]
    elif y.ndim != 2:
        raise RuntimeError(f"Unexpected output tensor shape: {tuple(y.shape)}")

    if tuple(y.shape) != size:
        y = torch.nn.functional.interpolate(
            y[None, None].float(),
            size=size,
            mode="bilinear",
            align_corners=False,
        )[0, 0]

    p = torch.sigmoid(y.float())
    if torch.isnan(p).any():
        raise RuntimeError("NaNs detected in predicted matte.")

    return p.detach().to("cpu").numpy().astype(np.float32, copy=False)

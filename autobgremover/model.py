from __future__ import annotations

import os
from typing import Any, Optional, Tuple

import torch
from loguru import logger


def get_device(preferred: Optional[str] = None) -> torch.device:
    """
    Pick an inference device: explicit choice, else cuda, else mps, else cpu.
    """
    if preferred:
        return torch.device(preferred)
    if torch.cuda.is_available():
        return torch.device("cuda")
    if torch.backends.mps.is_available():
        return torch.device("mps")
    return torch.device("cpu")


def freeze_model(model: torch.nn.Module, device: torch.device) -> torch.nn.Module:
    model.eval()
    for p in model.parameters():
        p.requires_grad_(False)
    # float32 only; some archives carry float64 attributes that MPS rejects.
    return model.to(dtype=torch.float32).to(device)


def load_torchscript_matting_model(model_path: str, device: Optional[torch.device] = None) -> torch.nn.Module:
    """
    Load a TorchScript segmentation model saved with torch.jit.save().

    Pure state_dict checkpoints need the original model code and are rejected.
    """
    if device is None:
        device = get_device()

    if not os.path.exists(model_path):
        raise FileNotFoundError(f"Model not found: {model_path}")

    try:
        # Registers torchvision's TorchScript ops (e.g. deform_conv2d) before loading.
        import torchvision  # noqa: F401

        model = torch.jit.load(model_path, map_location="cpu")
    except Exception as e:  # noqa: BLE001 - surface a helpful error
        raise RuntimeError(
            f"Failed to load TorchScript model from {model_path}. "
            "Export state_dict checkpoints with torch.jit.save() first."
        ) from e

    return freeze_model(model, device)


def load_birefnet_hf(hf_repo: str = "ZhengPeng7/BiRefNet", device: Optional[torch.device] = None) -> torch.nn.Module:
    """
    Load BiRefNet via Hugging Face transformers (trust_remote_code).

    Meta-device init is disabled; BiRefNet calls `.item()` while building.
    """
    if device is None:
        device = get_device()

    try:
        from transformers import AutoModelForImageSegmentation
    except Exception as e:  # noqa: BLE001
        raise RuntimeError("transformers is not installed. Run: pip install transformers") from e

    try:
        model = AutoModelForImageSegmentation.from_pretrained(
            hf_repo,
            trust_remote_code=True,
            low_cpu_mem_usage=False,
            device_map=None,
        )
    except Exception as e:  # noqa: BLE001
        raise RuntimeError(f"Failed to load segmentation model '{hf_repo}' from Hugging Face.") from e

    return freeze_model(model, device)


def load_model(model_spec: str, device: Optional[torch.device] = None) -> Tuple[torch.nn.Module, torch.device]:
    """
    Model spec:
      - "hf:<repo id>"  -> transformers BiRefNet-style model
      - anything else   -> TorchScript file path
    """
    if device is None:
        device = get_device()
    if model_spec.startswith("hf:"):
        model = load_birefnet_hf(model_spec[len("hf:"):], device=device)
    else:
        model = load_torchscript_matting_model(model_spec, device=device)
    logger.info(f"Loaded segmentation model {model_spec} on {device}")
    return model, device


def forward_model(model: torch.nn.Module, x: torch.Tensor) -> Any:
    with torch.no_grad():
        return model(x)

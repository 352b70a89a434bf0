"""
Centralized configuration constants for the background removal pipeline.

Ground rules:
- Confidence masks are float32 in [0, 1], same size as the source image
- Output is RGBA; "transparent" means all four channels are zero
"""

# [0, 1]. Pixels whose confidence is below this are treated as background.
MIN_CONFIDENCE = 0.4

# Above this fraction of transparent pixels the segmenter is considered to
# have found no foreground at all.
TRANSPARENCY_BOUND = 0.99

TRANSPARENT = (0, 0, 0, 0)

DEFAULT_MODEL = "hf:ZhengPeng7/BiRefNet"

# NOTE: BiRefNet internally splits into patches; this size must be divisible by
# its patching grid. 1088 is the closest "1080-class" square that works reliably.
TARGET_SIZE = 1088
PAD_COLOR = 127

IMAGENET_MEAN = [0.485, 0.456, 0.406]
IMAGENET_STD = [0.229, 0.224, 0.225]

LOG_LEVEL = "INFO"

# Environment overrides read by run.py (after load_dotenv()).
ENV_MODEL = "AUTOBG_MODEL"
ENV_SEVERITY = "AUTOBG_SEVERITY"
ENV_DEVICE = "AUTOBG_DEVICE"
ENV_LOG_LEVEL = "AUTOBG_LOG_LEVEL"

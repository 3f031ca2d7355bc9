"""Scanner constants and the tunable ``ScannerConfig``."""
from __future__ import annotations

from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from .entities import AspectRatioWindow
from .exceptions import ConfigError

# ============================================================
#  CARD GEOMETRY
# ============================================================
# ISO/IEC 7810 ID-1 card: 85.60mm x 53.98mm
CARD_ASPECT_RATIO = 85.60 / 53.98

ASPECT_RATIO_WINDOW = AspectRatioWindow.around(CARD_ASPECT_RATIO, below=0.05, above=0.10)

# ============================================================
#  OCR-A DIGIT TEMPLATES
# ============================================================
FONT_PATH_DIGITS = 'font_images/ocr_a_reference.png'

TEMPLATE_SIZE = (57, 88)  # (width, height) passed to cv2.resize

# Card crop is resized to this width before looking for 4-digit groups;
# the group limits below are in pixels at that width.
CARD_WIDTH_PX = 300
GROUP_ASPECT_RANGE = (2.0, 5.0)
GROUP_WIDTH_RANGE = (35, 65)
GROUP_HEIGHT_RANGE = (8, 25)
GROUP_PADDING_PX = 5

MAX_CANDIDATES = 10

RECOGNIZERS = ('template', 'tesseract', 'paddle')


@dataclass
class ScannerConfig:
    camera_index: Optional[int] = None  # None -> try 0 then 1
    frame_width: int = 1280
    frame_height: int = 720

    recognizer: str = 'template'
    font_path: str = FONT_PATH_DIGITS
    tesseract_config: str = '--psm 6 -c tessedit_char_whitelist=0123456789'
    paddle_lang: str = 'en'

    max_candidates: int = MAX_CANDIDATES
    min_card_area: float = 0.1  # fraction of the frame
    tracker_min_iou: float = 0.5

    log_level: str = 'INFO'

    def __post_init__(self) -> None:
        if self.recognizer not in RECOGNIZERS:
            raise ConfigError(
                f"Unknown recognizer '{self.recognizer}', expected one of {', '.join(RECOGNIZERS)}"
            )
        if self.max_candidates < 1:
            raise ConfigError(f"max_candidates must be >= 1, got {self.max_candidates}")
        if not 0.0 < self.min_card_area < 1.0:
            raise ConfigError(f"min_card_area must be in (0, 1), got {self.min_card_area}")
        if not 0.0 < self.tracker_min_iou <= 1.0:
            raise ConfigError(f"tracker_min_iou must be in (0, 1], got {self.tracker_min_iou}")

    @staticmethod
    def from_dict(d: Dict[str, Any]) -> "ScannerConfig":
        known = {f.name for f in fields(ScannerConfig)}
        unknown = sorted(set(d) - known)
        if unknown:
            raise ConfigError(f"Unknown config keys: {', '.join(unknown)}")
        return ScannerConfig(**d)


def load_config(path: str | Path) -> ScannerConfig:
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Config not found: {path.resolve()}")
    try:
        with path.open('r', encoding='utf-8') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return ScannerConfig()
    if not isinstance(data, dict):
        raise ConfigError(f"Config root must be a mapping: {path}")
    return ScannerConfig.from_dict(data)

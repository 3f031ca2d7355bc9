"""Wire the OpenCV providers and a recognizer into a scan session."""
from __future__ import annotations

import logging
from typing import Optional

from .config import ScannerConfig
from .detector import CardGeometryDetector
from .entities import Frame, NormalizedRegion
from .exceptions import ScannerError
from .parser import parse
from .providers import TextRecognizer
from .recognizers import PaddleRecognizer, TemplateDigitRecognizer, TesseractRecognizer
from .session import RegionCallback, ScanSession
from .tracker import CardTracker
from .vision import ContourRectangleDetector, ContourRectangleTracker, DigitGroupTextDetector

logger = logging.getLogger(__name__)


def build_recognizer(cfg: ScannerConfig) -> TextRecognizer:
    if cfg.recognizer == 'tesseract':
        return TesseractRecognizer(config=cfg.tesseract_config)
    if cfg.recognizer == 'paddle':
        return PaddleRecognizer(lang=cfg.paddle_lang)
    return TemplateDigitRecognizer.from_font(cfg.font_path, cfg.max_candidates)


def build_detector(cfg: ScannerConfig) -> CardGeometryDetector:
    return CardGeometryDetector(ContourRectangleDetector(min_area=cfg.min_card_area),
                                DigitGroupTextDetector())


def build_session(cfg: ScannerConfig, recognizer: TextRecognizer,
                  on_region_update: Optional[RegionCallback] = None) -> ScanSession:
    tracker = CardTracker(ContourRectangleTracker(min_iou=cfg.tracker_min_iou))
    return ScanSession(build_detector(cfg), tracker, recognizer,
                       on_region_update=on_region_update,
                       max_candidates=cfg.max_candidates)


def scan_image(frame: Frame, detector: CardGeometryDetector, recognizer: TextRecognizer,
               max_candidates: int) -> tuple:
    """Single-shot read of a still image: (number or None, region used).

    Falls back to the whole image when no card rectangle is found, which is
    the usual case for photos already cropped to the card. A failing recognizer
    raises ``ScannerError``.
    """
    region = detector.detect(frame)
    if region is None:
        logger.info("No card rectangle found, reading the whole image")
        region = NormalizedRegion(0.0, 0.0, 1.0, 1.0)
    try:
        fragments = recognizer.recognize(frame.crop(region))
    except Exception as e:
        raise ScannerError(f"Text recognition failed: {e}") from e
    logger.info("Recognizer returned %d fragments", len(fragments))
    return parse(fragments, max_candidates), region

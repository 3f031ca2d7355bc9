"""Per-frame card detection: a card-shaped rectangle that has text printed inside it."""
from __future__ import annotations

import logging
from typing import Optional

from .config import ASPECT_RATIO_WINDOW
from .entities import Frame, NormalizedRegion
from .providers import RectangleDetector, TextRegionDetector

logger = logging.getLogger(__name__)


class CardGeometryDetector:
    """Finds a card-shaped rectangle that has printed text inside it."""

    def __init__(self, rectangles: RectangleDetector, text_regions: TextRegionDetector):
        self.rectangles = rectangles
        self.text_regions = text_regions

    def detect(self, frame: Frame) -> Optional[NormalizedRegion]:
        try:
            rects = list(self.rectangles.detect_rectangles(frame, ASPECT_RATIO_WINDOW))
            if not rects:
                return None
            texts = list(self.text_regions.detect_text_regions(frame))
        except Exception:
            logger.debug("Card detection failed for this frame", exc_info=True)
            return None

        card = rects[0]
        if any(card.contains(text) for text in texts):
            return card

        logger.debug("Rectangle %s holds none of %d text regions", card, len(texts))
        return None

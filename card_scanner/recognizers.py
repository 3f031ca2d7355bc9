"""Text-recognition backends producing ranked ``RawTextFragment``s from a card crop."""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

import cv2
import imutils
from imutils import contours
import numpy as np
import pytesseract

from .config import (CARD_WIDTH_PX, GROUP_ASPECT_RANGE, GROUP_HEIGHT_RANGE, GROUP_PADDING_PX,
                     GROUP_WIDTH_RANGE, MAX_CANDIDATES, TEMPLATE_SIZE)
from .entities import NormalizedRegion, RawTextFragment
from .exceptions import TemplateError
from .vision import preprocessing_find_contours, to_gray

logger = logging.getLogger(__name__)


# ============================================================
#  LOAD OCR-A DIGIT TEMPLATES
# ============================================================
def load_digit_templates(path) -> Dict[int, Any]:
    """Split the OCR-A reference sheet (dark digits 0-9 on light background) into templates."""
    img = cv2.imread(str(path))
    if img is None:
        raise TemplateError(f"Cannot load template: {path}")

    gray = cv2.cvtColor(img, cv2.COLOR_BGR2GRAY)
    thresh = cv2.threshold(gray, 10, 255, cv2.THRESH_BINARY_INV)[1]

    cnts = cv2.findContours(thresh.copy(), cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)
    cnts = imutils.grab_contours(cnts)
    if len(cnts) != 10:
        raise TemplateError(f"Expected 10 digits in {path}, found {len(cnts)} shapes")
    cnts = contours.sort_contours(cnts, method='left-to-right')[0]

    templates = {}
    for (i, c) in enumerate(cnts):
        (x, y, w, h) = cv2.boundingRect(c)
        roi = thresh[y:y + h, x:x + w]
        templates[i] = cv2.resize(roi, TEMPLATE_SIZE)

    logger.info("Loaded %d digit templates from %s", len(templates), path)
    return templates


# ============================================================
#  CANDIDATE RANKING
# ============================================================
def rank_candidates(score_rows: Sequence[Sequence[float]], limit: int = MAX_CANDIDATES) -> List[str]:
    """Readings of a digit group, best first.

    ``score_rows[i][d]`` is how well position ``i`` matches digit ``d``. The
    first reading takes the best digit everywhere; the rest swap a single
    position to another digit, ordered by how much score that costs.
    """
    best = [int(np.argmax(row)) for row in score_rows]
    base = ''.join(str(d) for d in best)

    swaps = []
    for pos, row in enumerate(score_rows):
        for digit, score in enumerate(row):
            if digit != best[pos]:
                swaps.append((row[best[pos]] - score, pos, digit))
    swaps.sort()

    readings = [base]
    for _, pos, digit in swaps[:max(0, limit - 1)]:
        readings.append(base[:pos] + str(digit) + base[pos + 1:])
    return readings


# ============================================================
#  TEMPLATE MATCHING RECOGNIZER
# ============================================================
def locate_digit_groups(cnts) -> List[tuple]:
    """Boxes of contours shaped like a 4-digit group, left to right."""
    locs = []
    for c in cnts:
        (x, y, w, h) = cv2.boundingRect(c)
        ar = w / float(h)
        if (GROUP_ASPECT_RANGE[0] < ar < GROUP_ASPECT_RANGE[1]
                and GROUP_WIDTH_RANGE[0] < w < GROUP_WIDTH_RANGE[1]
                and GROUP_HEIGHT_RANGE[0] < h < GROUP_HEIGHT_RANGE[1]):
            locs.append((x, y, w, h))
    return sorted(locs, key=lambda loc: loc[0])


class TemplateDigitRecognizer:
    """Reads embossed/printed OCR-A digit groups by template matching."""

    def __init__(self, templates: Dict[int, Any], max_candidates: int = MAX_CANDIDATES):
        if len(templates) != 10:
            raise TemplateError(f"Need 10 digit templates, got {len(templates)}")
        self.templates = templates
        self.max_candidates = max_candidates

    @classmethod
    def from_font(cls, path, max_candidates: int = MAX_CANDIDATES) -> "TemplateDigitRecognizer":
        return cls(load_digit_templates(path), max_candidates)

    def recognize(self, image) -> List[RawTextFragment]:
        gray = imutils.resize(to_gray(image), width=CARD_WIDTH_PX)
        gray = cv2.bilateralFilter(gray, 11, 17, 17)
        h_img, w_img = gray.shape[:2]
        cnts, _ = preprocessing_find_contours(gray)

        fragments = []
        for (gX, gY, gW, gH) in locate_digit_groups(cnts):
            x1, y1 = max(0, gX - GROUP_PADDING_PX), max(0, gY - GROUP_PADDING_PX)
            x2, y2 = min(w_img, gX + gW + GROUP_PADDING_PX), min(h_img, gY + gH + GROUP_PADDING_PX)
            group = gray[y1:y2, x1:x2]
            group = cv2.threshold(group, 0, 255, cv2.THRESH_BINARY | cv2.THRESH_OTSU)[1]

            rows = self._score_digits(group)
            if not rows:
                continue
            fragments.append(RawTextFragment(
                tuple(rank_candidates(rows, self.max_candidates)),
                NormalizedRegion.from_pixels(x1, y1, x2, y2, w_img, h_img),
            ))

        logger.debug("Template matcher read %d digit groups", len(fragments))
        return fragments

    def _score_digits(self, group) -> List[List[float]]:
        grpcnts = cv2.findContours(group.copy(), cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)
        grpcnts = imutils.grab_contours(grpcnts)
        if len(grpcnts) == 0:
            return []
        grpcnts = contours.sort_contours(grpcnts, method='left-to-right')[0]

        rows = []
        for c in grpcnts:
            (x, y, w, h) = cv2.boundingRect(c)
            if w > 5 and h > 5:
                roi = cv2.resize(group[y:y + h, x:x + w], TEMPLATE_SIZE)
                scores = []
                for digit in range(10):
                    result = cv2.matchTemplate(roi, self.templates[digit], cv2.TM_CCOEFF_NORMED)
                    (_, score, _, _) = cv2.minMaxLoc(result)
                    scores.append(score)
                rows.append(scores)
        return rows


# ============================================================
#  TESSERACT RECOGNIZER
# ============================================================
class TesseractRecognizer:
    """One fragment per word reported by Tesseract. Tesseract gives no alternates."""

    def __init__(self, config: str = '--psm 6 -c tessedit_char_whitelist=0123456789',
                 min_confidence: float = 0.0):
        self.config = config
        self.min_confidence = min_confidence

    def recognize(self, image) -> List[RawTextFragment]:
        gray = to_gray(image)
        h_img, w_img = gray.shape[:2]
        data = pytesseract.image_to_data(gray, config=self.config,
                                         output_type=pytesseract.Output.DICT)

        fragments = []
        words = zip(data['text'], data['conf'], data['left'], data['top'],
                    data['width'], data['height'])
        for text, conf, left, top, width, height in words:
            text = str(text).strip()
            if not text or float(conf) < self.min_confidence:
                continue
            region = None
            if width > 0 and height > 0:
                region = NormalizedRegion.from_pixels(left, top, left + width, top + height,
                                                      w_img, h_img)
            fragments.append(RawTextFragment((text,), region))
        return fragments


# ============================================================
#  PADDLE RECOGNIZER
# ============================================================
def _polygon_region(points, w_img, h_img) -> Optional[NormalizedRegion]:
    if points is None:
        return None
    pts = np.asarray(points, dtype=float).reshape(-1, 2)
    if len(pts) == 0:
        return None
    (x1, y1), (x2, y2) = pts.min(axis=0), pts.max(axis=0)
    try:
        return NormalizedRegion.from_pixels(x1, y1, x2, y2, w_img, h_img)
    except ValueError:
        return None


def _line_fragments(text, region: Optional[NormalizedRegion]) -> List[RawTextFragment]:
    """One fragment per word of a recognized line, all sharing the line's region."""
    return [RawTextFragment((word,), region) for word in str(text).split()]


class PaddleRecognizer:
    """PaddleOCR lines split into words, so '4539 1488 0343 6467' gives four groups."""

    def __init__(self, lang: str = 'en', engine=None):
        if engine is None:
            from paddleocr import PaddleOCR  # "paddle" extra
            engine = PaddleOCR(lang=lang, use_angle_cls=True)
        self.ocr = engine

    def recognize(self, image) -> List[RawTextFragment]:
        h_img, w_img = image.shape[:2]
        raw = self.ocr.ocr(image)
        fragments: List[RawTextFragment] = []
        if not raw:
            return fragments

        # PaddleX style: list of dicts with rec_texts / rec_polys
        if isinstance(raw[0], dict):
            for page in raw:
                texts = page.get('rec_texts') or []
                polys = page.get('rec_polys')
                if polys is None:
                    polys = [None] * len(texts)
                for text, poly in zip(texts, polys):
                    fragments.extend(_line_fragments(text, _polygon_region(poly, w_img, h_img)))
            return fragments

        # legacy: [[[box, (text, score)], ...]] per page
        for page in raw:
            for item in page or []:
                box, (text, _score) = item[0], item[1]
                fragments.extend(_line_fragments(text, _polygon_region(box, w_img, h_img)))
        return fragments

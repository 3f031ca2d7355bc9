"""OpenCV capability providers: card rectangles, text regions, rectangle tracking."""
from __future__ import annotations

import logging
from typing import List, Optional

import cv2
import imutils
from imutils import contours
import numpy as np

from .entities import AspectRatioWindow, Frame, NormalizedRegion, PixelBox
from .providers import TrackingLevel

logger = logging.getLogger(__name__)

# Text-line shaped contours, relative to the processed frame
TEXT_ASPECT_RANGE = (1.5, 15.0)
TEXT_HEIGHT_RANGE = (0.01, 0.12)
TEXT_MIN_WIDTH = 0.02

TRACKING_WIDTHS = {TrackingLevel.FAST: 320, TrackingLevel.ACCURATE: 640}


# ============================================================
#  PREPROCESSING
# ============================================================
def to_gray(image):
    if image.ndim == 3:
        return cv2.cvtColor(image, cv2.COLOR_BGR2GRAY)
    return image


def preprocessing_find_contours(gray):
    """Top-hat + horizontal gradient + closing: bright, dense text blocks become blobs.

    Returns the contours sorted left-to-right and the final threshold image.
    """
    rectkernel = cv2.getStructuringElement(cv2.MORPH_RECT, (9, 3))
    sqkernel = cv2.getStructuringElement(cv2.MORPH_RECT, (5, 5))
    tophat = cv2.morphologyEx(gray, cv2.MORPH_TOPHAT, rectkernel)

    gradX = cv2.Sobel(tophat, ddepth=cv2.CV_32F, dx=1, dy=0, ksize=-1)
    gradX = np.absolute(gradX)
    (minVal, maxVal) = (np.min(gradX), np.max(gradX))
    if maxVal - minVal > 0:
        gradX = 255 * (gradX - minVal) / (maxVal - minVal)
    gradX = gradX.astype('uint8')

    gradX = cv2.morphologyEx(gradX, cv2.MORPH_CLOSE, rectkernel)
    thresh = cv2.threshold(gradX, 0, 255, cv2.THRESH_BINARY | cv2.THRESH_OTSU)[1]
    thresh = cv2.morphologyEx(thresh, cv2.MORPH_CLOSE, sqkernel)

    cnts = cv2.findContours(thresh.copy(), cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)
    cnts = imutils.grab_contours(cnts)
    if len(cnts) > 0:
        cnts = contours.sort_contours(cnts, method='left-to-right')[0]

    return cnts, thresh


def find_quads(gray, window: Optional[AspectRatioWindow] = None,
               min_area: float = 0.1) -> List[PixelBox]:
    """Bounding boxes of 4-cornered contours, largest first.

    ``min_area`` is a fraction of the image; ``window`` (if given) limits the
    long/short side ratio of the box.
    """
    h_img, w_img = gray.shape[:2]
    gray = cv2.bilateralFilter(gray, 11, 17, 17)
    edges = cv2.Canny(gray, 50, 150)
    edges = cv2.dilate(edges, cv2.getStructuringElement(cv2.MORPH_RECT, (3, 3)), iterations=1)

    cnts = cv2.findContours(edges.copy(), cv2.RETR_LIST, cv2.CHAIN_APPROX_SIMPLE)
    cnts = imutils.grab_contours(cnts)

    boxes = []
    for c in sorted(cnts, key=cv2.contourArea, reverse=True):
        peri = cv2.arcLength(c, True)
        approx = cv2.approxPolyDP(c, 0.02 * peri, True)
        if len(approx) != 4:
            continue
        (x, y, w, h) = cv2.boundingRect(approx)
        if w * h < min_area * w_img * h_img:
            continue
        ar = max(w, h) / float(min(w, h))
        if window is not None and not window.contains(ar):
            continue
        boxes.append((x, y, x + w, y + h))
    return boxes


# ============================================================
#  RECTANGLE DETECTION
# ============================================================
class ContourRectangleDetector:
    def __init__(self, process_width: int = 600, min_area: float = 0.1, max_results: int = 5):
        self.process_width = process_width
        self.min_area = min_area
        self.max_results = max_results

    def detect_rectangles(self, frame: Frame, window: AspectRatioWindow) -> List[NormalizedRegion]:
        gray = imutils.resize(to_gray(frame.image), width=self.process_width)
        h, w = gray.shape[:2]
        boxes = find_quads(gray, window, self.min_area)[:self.max_results]
        return [NormalizedRegion.from_pixels(*box, w, h) for box in boxes]


# ============================================================
#  TEXT REGION DETECTION
# ============================================================
class DigitGroupTextDetector:
    """Text lines found with the same morphology used to locate card digit groups."""

    def __init__(self, process_width: int = 600):
        self.process_width = process_width

    def detect_text_regions(self, frame: Frame) -> List[NormalizedRegion]:
        gray = imutils.resize(to_gray(frame.image), width=self.process_width)
        gray = cv2.bilateralFilter(gray, 11, 17, 17)
        h_img, w_img = gray.shape[:2]
        cnts, _ = preprocessing_find_contours(gray)

        regions = []
        for c in cnts:
            (x, y, w, h) = cv2.boundingRect(c)
            ar = w / float(h)
            rel_h = h / float(h_img)
            if (TEXT_ASPECT_RANGE[0] < ar < TEXT_ASPECT_RANGE[1]
                    and TEXT_HEIGHT_RANGE[0] < rel_h < TEXT_HEIGHT_RANGE[1]
                    and w / float(w_img) > TEXT_MIN_WIDTH):
                regions.append(NormalizedRegion.from_pixels(x, y, x + w, y + h, w_img, h_img))
        return regions


# ============================================================
#  RECTANGLE TRACKING
# ============================================================
class ContourRectangleTracker:
    """Re-finds the card quad in a padded window around its last position."""

    def __init__(self, search_margin: float = 0.15, min_iou: float = 0.5, min_area: float = 0.2):
        self.search_margin = search_margin
        self.min_iou = min_iou
        self.min_area = min_area

    def track_rectangle(self, previous: NormalizedRegion, frame: Frame,
                        level: TrackingLevel = TrackingLevel.FAST) -> Optional[NormalizedRegion]:
        search = previous.expanded(self.search_margin)
        sx1, sy1, sx2, sy2 = search.to_pixels(frame.width, frame.height)
        crop = to_gray(frame.image)[sy1:sy2, sx1:sx2]

        width = TRACKING_WIDTHS[level]
        small = imutils.resize(crop, width=width) if crop.shape[1] > width else crop
        scale = crop.shape[1] / float(small.shape[1])

        best, best_iou = None, 0.0
        for (x1, y1, x2, y2) in find_quads(small, None, self.min_area):
            candidate = NormalizedRegion.from_pixels(
                sx1 + x1 * scale, sy1 + y1 * scale, sx1 + x2 * scale, sy1 + y2 * scale,
                frame.width, frame.height)
            overlap = candidate.iou(previous)
            if overlap > best_iou:
                best, best_iou = candidate, overlap

        if best is None or best_iou < self.min_iou:
            logger.debug("Card lost (best IoU %.2f)", best_iou)
            return None
        return best

"""OpenCV providers on synthetic frames."""
import pytest

from card_scanner.config import ASPECT_RATIO_WINDOW
from card_scanner.entities import Frame, NormalizedRegion
from card_scanner.providers import TrackingLevel
from card_scanner.vision import (ContourRectangleDetector, ContourRectangleTracker,
                                 DigitGroupTextDetector, find_quads, to_gray)
from tests.fakes import CARD_BOX, blank_image, card_image

CARD = NormalizedRegion.from_pixels(*CARD_BOX, 640, 480)


class TestContourRectangleDetector:

    def test_finds_card_shaped_rectangle(self):
        found = ContourRectangleDetector().detect_rectangles(Frame.from_image(card_image()),
                                                              ASPECT_RATIO_WINDOW)
        assert found
        assert found[0].iou(CARD) > 0.9

    def test_rejects_square(self):
        frame = Frame.from_image(card_image(box=(100, 100, 340, 340)))
        assert ContourRectangleDetector().detect_rectangles(frame, ASPECT_RATIO_WINDOW) == []

    def test_rejects_small_rectangle(self):
        frame = Frame.from_image(card_image(box=(10, 10, 74, 50)))
        assert ContourRectangleDetector().detect_rectangles(frame, ASPECT_RATIO_WINDOW) == []

    def test_blank_frame(self):
        frame = Frame.from_image(blank_image())
        assert ContourRectangleDetector().detect_rectangles(frame, ASPECT_RATIO_WINDOW) == []

    def test_portrait_card_matches_window(self):
        frame = Frame.from_image(card_image(box=(200, 20, 470, 448)))
        found = ContourRectangleDetector().detect_rectangles(frame, ASPECT_RATIO_WINDOW)
        assert found


def test_find_quads_without_window_accepts_square():
    gray = to_gray(card_image(box=(100, 100, 340, 340)))
    assert len(find_quads(gray, None, 0.1)) >= 1


def test_text_detector_on_blank_frame():
    assert DigitGroupTextDetector().detect_text_regions(Frame.from_image(blank_image())) == []


class TestContourRectangleTracker:

    @pytest.mark.parametrize('level', list(TrackingLevel))
    def test_follows_shifted_card(self, level):
        x1, y1, x2, y2 = CARD_BOX
        moved = Frame.from_image(card_image(box=(x1 + 12, y1 + 8, x2 + 12, y2 + 8)))
        region = ContourRectangleTracker().track_rectangle(CARD, moved, level)
        assert region is not None
        expected = NormalizedRegion.from_pixels(x1 + 12, y1 + 8, x2 + 12, y2 + 8, 640, 480)
        assert region.iou(expected) > 0.9

    def test_loses_card_on_blank_frame(self):
        frame = Frame.from_image(blank_image())
        assert ContourRectangleTracker().track_rectangle(CARD, frame, TrackingLevel.FAST) is None

    def test_loses_card_that_jumped_away(self):
        far = Frame.from_image(card_image(box=(10, 10, 224, 145)))
        previous = NormalizedRegion.from_pixels(400, 300, 630, 445, 640, 480)
        assert ContourRectangleTracker().track_rectangle(previous, far, TrackingLevel.FAST) is None

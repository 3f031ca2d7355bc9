"""Capability providers the scanning core depends on.

Any object with the matching method works; the OpenCV versions live in
``vision`` and ``recognizers``, the tests use scripted fakes.
"""
from __future__ import annotations

from enum import Enum
from typing import Any, Optional, Protocol, Sequence

from .entities import AspectRatioWindow, Frame, NormalizedRegion, RawTextFragment


class TrackingLevel(Enum):
    FAST = "fast"
    ACCURATE = "accurate"


class RectangleDetector(Protocol):
    def detect_rectangles(self, frame: Frame, window: AspectRatioWindow) -> Sequence[NormalizedRegion]:
        """Rectangles whose aspect ratio lies in ``window``, most prominent first."""
        ...


class TextRegionDetector(Protocol):
    def detect_text_regions(self, frame: Frame) -> Sequence[NormalizedRegion]:
        ...


class RectangleTracker(Protocol):
    def track_rectangle(self, previous: NormalizedRegion, frame: Frame,
                        level: TrackingLevel) -> Optional[NormalizedRegion]:
        """Updated region, or None when the rectangle is lost."""
        ...


class TextRecognizer(Protocol):
    def recognize(self, image: Any) -> Sequence[RawTextFragment]:
        """Input: BGR image (numpy array). Output: fragments in reading order."""
        ...

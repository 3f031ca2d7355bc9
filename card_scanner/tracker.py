"""Frame-to-frame card tracking on top of a rectangle-tracking provider."""
from __future__ import annotations

import logging
from typing import Optional

from .entities import Frame, NormalizedRegion
from .providers import RectangleTracker, TrackingLevel

logger = logging.getLogger(__name__)


class CardTracker:
    """Follows a known card region into the next frame. None means tracking loss."""

    def __init__(self, tracker: RectangleTracker, level: TrackingLevel = TrackingLevel.FAST):
        self.tracker = tracker
        self.level = level

    def track(self, previous: NormalizedRegion, frame: Frame) -> Optional[NormalizedRegion]:
        try:
            return self.tracker.track_rectangle(previous, frame, self.level)
        except Exception:
            logger.debug("Tracker failed, treating as lost", exc_info=True)
            return None

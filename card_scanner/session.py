"""Per-scan state machine: Searching -> Tracking -> Completed.

``submit_frame`` is synchronous and serialized; the caller decides which
thread runs it (see ``lane.FrameLane``). ``cancel`` may come from any thread.
"""
from __future__ import annotations

import logging
import threading
from typing import Callable, Optional

from .config import MAX_CANDIDATES
from .detector import CardGeometryDetector
from .entities import Frame, NormalizedRegion, SessionPhase, SessionState
from .exceptions import SessionError
from .parser import parse
from .providers import TextRecognizer
from .tracker import CardTracker

logger = logging.getLogger(__name__)

ResultCallback = Callable[[str], None]
RegionCallback = Callable[[Optional[NormalizedRegion]], None]


class ScanSession:
    """One card scan from the first frame to a single checksum-valid number.

    ``on_region_update`` receives the tracked region (None when it is lost);
    the ``on_result`` callback given to ``start`` fires at most once. Nothing
    fires and the state no longer changes once ``cancel`` has been called.
    """

    def __init__(self, detector: CardGeometryDetector, tracker: CardTracker,
                 recognizer: TextRecognizer,
                 on_region_update: Optional[RegionCallback] = None,
                 max_candidates: int = MAX_CANDIDATES):
        self.detector = detector
        self.tracker = tracker
        self.recognizer = recognizer
        self.on_region_update = on_region_update
        self.max_candidates = max_candidates

        self._state = SessionState.searching()
        self._on_result: Optional[ResultCallback] = None
        self._lock = threading.Lock()
        self._cancelled = threading.Event()

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def running(self) -> bool:
        return (self._on_result is not None and not self._cancelled.is_set()
                and not self._state.is_terminal)

    def start(self, on_result: ResultCallback) -> None:
        if self._on_result is not None:
            raise SessionError("Session already started")
        self._on_result = on_result
        logger.info("Scan session started")

    def cancel(self) -> None:
        if not self._cancelled.is_set():
            self._cancelled.set()
            logger.info("Scan session cancelled in %s state", self._state.phase.value)

    def submit_frame(self, frame: Frame) -> None:
        with self._lock:
            if not self.running:
                return
            if self._state.phase is SessionPhase.SEARCHING:
                self._search(frame)
            elif self._state.phase is SessionPhase.TRACKING:
                self._track(frame)

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------
    def _search(self, frame: Frame) -> None:
        region = self.detector.detect(frame)
        if region is None or self._cancelled.is_set():
            return
        logger.debug("Card found at %s", region)
        self._state = SessionState.tracking(region)
        self._emit_region(region)

    def _track(self, frame: Frame) -> None:
        region = self._state.region
        new_region = self.tracker.track(region, frame)
        if self._cancelled.is_set():
            return
        if new_region is None:
            logger.debug("Tracking lost, searching again")
            self._state = SessionState.searching()
            self._emit_region(None)
            return

        self._emit_region(new_region)

        # crop against the region the tracker was seeded with
        number = self._extract(frame, region)
        if self._cancelled.is_set():
            return
        if number is None:
            self._state = SessionState.tracking(new_region)
            return

        self._state = SessionState.completed(number)
        logger.info("Card number recognized, session complete")
        self._emit_result(number)

    def _extract(self, frame: Frame, region: NormalizedRegion) -> Optional[str]:
        try:
            fragments = self.recognizer.recognize(frame.crop(region))
        except Exception:
            logger.debug("Text recognition failed for this frame", exc_info=True)
            return None
        return parse(fragments, self.max_candidates)

    # ------------------------------------------------------------------
    # Emission
    # ------------------------------------------------------------------
    def _emit_region(self, region: Optional[NormalizedRegion]) -> None:
        if self.on_region_update is None or self._cancelled.is_set():
            return
        try:
            self.on_region_update(region)
        except Exception:
            logger.exception("Region update callback failed")

    def _emit_result(self, number: str) -> None:
        if self._cancelled.is_set():
            return
        try:
            self._on_result(number)
        except Exception:
            logger.exception("Result callback failed")

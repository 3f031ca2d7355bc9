"""Background frame-processing lane.

The capture loop hands frames to ``submit`` which never blocks. A single worker
thread runs the handler; while it is busy only the newest frame is kept.
"""
from __future__ import annotations

import logging
import queue
import threading
from typing import Callable, Optional

from .entities import Frame

logger = logging.getLogger(__name__)

_STOP = object()


class FrameLane:
    """Runs ``handler`` on one daemon thread with a single-slot frame queue.

    ``dropped`` counts frames replaced before the worker got to them.
    """

    def __init__(self, handler: Callable[[Frame], None], name: str = "frame-lane"):
        self.handler = handler
        self.name = name
        self.dropped = 0
        self._queue: "queue.Queue[object]" = queue.Queue(maxsize=1)
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.running:
            return
        self._thread = threading.Thread(target=self._run, name=self.name, daemon=True)
        self._thread.start()

    def submit(self, frame: Frame) -> bool:
        """Queue ``frame``; returns False if the lane is not running."""
        if not self.running:
            return False
        try:
            self._queue.put_nowait(frame)
        except queue.Full:
            # replace the stale frame with the newest one
            try:
                self._queue.get_nowait()
                self.dropped += 1
            except queue.Empty:
                pass
            try:
                self._queue.put_nowait(frame)
            except queue.Full:
                self.dropped += 1
        return True

    def stop(self, timeout: float = 2.0) -> None:
        if self._thread is None:
            return
        while True:
            try:
                self._queue.get_nowait()
            except queue.Empty:
                break
        self._queue.put(_STOP)
        self._thread.join(timeout)
        if self._thread.is_alive():
            logger.warning("%s did not stop within %.1fs", self.name, timeout)
        self._thread = None
        logger.debug("%s stopped, %d frames dropped", self.name, self.dropped)

    def _run(self) -> None:
        while True:
            item = self._queue.get()
            if item is _STOP:
                return
            try:
                self.handler(item)
            except Exception:
                logger.exception("Frame handler failed")

"""Data-only structures shared by the scanning pipeline."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional, Tuple

PixelBox = Tuple[int, int, int, int]  # (x1, y1, x2, y2)


@dataclass(frozen=True)
class Frame:
    """One video frame. The capture loop owns ``image``; the core only reads it."""
    image: Any  # numpy ndarray (BGR)
    width: int
    height: int

    @classmethod
    def from_image(cls, image) -> "Frame":
        h, w = image.shape[:2]
        return cls(image=image, width=w, height=h)

    def crop(self, region: "NormalizedRegion"):
        x1, y1, x2, y2 = region.to_pixels(self.width, self.height)
        return self.image[y1:y2, x1:x2]


@dataclass(frozen=True)
class NormalizedRegion:
    """Rectangle in the unit square, origin top-left."""
    x: float
    y: float
    width: float
    height: float

    def __post_init__(self) -> None:
        for name in ('x', 'y', 'width', 'height'):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"{name} must lie within [0, 1], got {value}")
        if self.width <= 0.0 or self.height <= 0.0:
            raise ValueError(f"Region size must be positive, got {self.width}x{self.height}")
        # small tolerance for float accumulation in from_pixels / expanded
        if self.x + self.width > 1.0 + 1e-9 or self.y + self.height > 1.0 + 1e-9:
            raise ValueError(f"Region exceeds the unit square: {self}")

    @property
    def x2(self) -> float:
        return self.x + self.width

    @property
    def y2(self) -> float:
        return self.y + self.height

    @property
    def area(self) -> float:
        return self.width * self.height

    def contains(self, other: "NormalizedRegion") -> bool:
        return (self.x <= other.x and self.y <= other.y
                and other.x2 <= self.x2 and other.y2 <= self.y2)

    def iou(self, other: "NormalizedRegion") -> float:
        ix1, iy1 = max(self.x, other.x), max(self.y, other.y)
        ix2, iy2 = min(self.x2, other.x2), min(self.y2, other.y2)
        inter = max(0.0, ix2 - ix1) * max(0.0, iy2 - iy1)
        union = self.area + other.area - inter
        return inter / union if union > 0 else 0.0

    def expanded(self, ratio: float) -> "NormalizedRegion":
        """Grow by ``ratio`` of the size on every side, clipped to the unit square."""
        dx, dy = self.width * ratio, self.height * ratio
        x1, y1 = max(0.0, self.x - dx), max(0.0, self.y - dy)
        x2, y2 = min(1.0, self.x2 + dx), min(1.0, self.y2 + dy)
        return NormalizedRegion(x1, y1, x2 - x1, y2 - y1)

    def to_pixels(self, width: int, height: int) -> PixelBox:
        x1 = min(int(round(self.x * width)), width - 1)
        y1 = min(int(round(self.y * height)), height - 1)
        x2 = max(min(int(round(self.x2 * width)), width), x1 + 1)
        y2 = max(min(int(round(self.y2 * height)), height), y1 + 1)
        return x1, y1, x2, y2

    @classmethod
    def from_pixels(cls, x1: float, y1: float, x2: float, y2: float,
                    width: int, height: int) -> "NormalizedRegion":
        x1, x2 = max(0.0, min(x1, width)), max(0.0, min(x2, width))
        y1, y2 = max(0.0, min(y1, height)), max(0.0, min(y2, height))
        if x2 <= x1 or y2 <= y1:
            raise ValueError(f"Degenerate pixel box ({x1}, {y1}, {x2}, {y2})")
        return cls(x1 / width, y1 / height, (x2 - x1) / width, (y2 - y1) / height)


@dataclass(frozen=True)
class AspectRatioWindow:
    """Closed range of long-side / short-side ratios."""
    minimum: float
    maximum: float

    def __post_init__(self) -> None:
        if self.minimum <= 0 or self.maximum < self.minimum:
            raise ValueError(f"Invalid aspect ratio window [{self.minimum}, {self.maximum}]")

    @classmethod
    def around(cls, ratio: float, below: float, above: float) -> "AspectRatioWindow":
        return cls(ratio * (1.0 - below), ratio * (1.0 + above))

    def contains(self, ratio: float) -> bool:
        return self.minimum <= ratio <= self.maximum


@dataclass(frozen=True)
class RawTextFragment:
    candidates: Tuple[str, ...]  # ranked, best first
    region: Optional[NormalizedRegion] = None

    def __post_init__(self) -> None:
        if not self.candidates:
            raise ValueError("RawTextFragment needs at least one candidate")

    @property
    def text(self) -> str:
        return self.candidates[0]


class SessionPhase(Enum):
    SEARCHING = "searching"
    TRACKING = "tracking"
    COMPLETED = "completed"


@dataclass(frozen=True)
class SessionState:
    phase: SessionPhase
    region: Optional[NormalizedRegion] = None
    number: Optional[str] = None

    @classmethod
    def searching(cls) -> "SessionState":
        return cls(SessionPhase.SEARCHING)

    @classmethod
    def tracking(cls, region: NormalizedRegion) -> "SessionState":
        return cls(SessionPhase.TRACKING, region=region)

    @classmethod
    def completed(cls, number: str) -> "SessionState":
        return cls(SessionPhase.COMPLETED, number=number)

    @property
    def is_terminal(self) -> bool:
        return self.phase is SessionPhase.COMPLETED

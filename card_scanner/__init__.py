"""Live payment-card number scanner: detect, track, read, validate."""
from .checksum import is_valid
from .config import ASPECT_RATIO_WINDOW, CARD_ASPECT_RATIO, ScannerConfig, load_config
from .detector import CardGeometryDetector
from .entities import (AspectRatioWindow, Frame, NormalizedRegion, RawTextFragment,
                       SessionPhase, SessionState)
from .exceptions import (CameraError, ConfigError, ScannerError, SessionError,
                         TemplateError)
from .lane import FrameLane
from .parser import parse
from .providers import TrackingLevel
from .session import ScanSession
from .tracker import CardTracker

__version__ = '0.1.0'

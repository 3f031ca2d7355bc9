"""Exceptions raised while setting up a scan.

Per-frame failures never raise; they only mean "no result this frame".
"""


class ScannerError(Exception):
    """Base scanner error."""
    pass


class ConfigError(ScannerError):
    """Configuration file or value errors."""
    pass


class TemplateError(ScannerError):
    """OCR-A reference sheet could not be loaded."""
    pass


class CameraError(ScannerError):
    """Camera access errors."""
    pass


class SessionError(ScannerError):
    """Scan session lifecycle misuse."""
    pass

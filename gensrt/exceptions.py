"""Custom Exceptions for the gensrt application."""

from typing import Optional


class GenSrtError(Exception):
    """Base class for exceptions in this module."""
    pass

class ConfigurationError(GenSrtError):
    """Exception raised for errors in configuration loading."""
    pass

class AudioExtractionError(GenSrtError):
    """Exception raised for errors during audio extraction."""
    pass

class RecognitionError(GenSrtError):
    """Exception raised when the speech recognition service fails."""
    pass

class FormattingError(GenSrtError):
    """Exception raised for errors during subtitle formatting."""
    pass

class InvalidDurationError(FormattingError):
    """
    Exception raised for malformed timing data (negative seconds, nanos out of range).

    Attributes:
        entry_index: Index of the caption entry being built, if known.
        field: Name of the offending field, e.g. 'start_time.nanos'.
    """

    def __init__(self, message: str, entry_index: Optional[int] = None, field: Optional[str] = None):
        super().__init__(message)
        self.entry_index = entry_index
        self.field = field

class EmptyAlternativeError(FormattingError):
    """Exception raised for an alternative that carries no word timings."""
    pass

class SinkWriteError(FormattingError):
    """Exception raised when the output destination rejects a write."""
    pass

class FileSystemError(GenSrtError):
    """Exception raised for file system related errors (permissions, not found etc)."""
    pass

"""Utility functions for gensrt."""

import os
import re
import logging
from typing import Tuple

from .exceptions import FileSystemError, InvalidDurationError

logger = logging.getLogger(__name__)

MAX_NANOS = 999_999_999
SRT_TIMESTAMP_PATTERN = re.compile(r"^(\d{2,}):(\d{2}):(\d{2}),(\d{3})$")

def ensure_dir_exists(dir_path: str) -> None:
    """
    Ensures that a directory exists. Creates it if it doesn't.

    Args:
        dir_path: The path to the directory.

    Raises:
        FileSystemError: If the directory cannot be created due to permissions
                         or if the path exists but is not a directory.
    """
    if not dir_path:
        raise ValueError("Directory path cannot be empty.")
    try:
        if not os.path.exists(dir_path):
            os.makedirs(dir_path)
            logger.info(f"Created directory: {dir_path}")
        elif not os.path.isdir(dir_path):
            raise FileSystemError(f"Path exists but is not a directory: {dir_path}")
    except OSError as e:
        logger.error(f"Error creating or accessing directory {dir_path}: {e}", exc_info=True)
        raise FileSystemError(f"Could not create or access directory {dir_path}: {e}") from e

def split_timestamp(seconds: int, nanos: int) -> Tuple[int, int, int, int]:
    """
    Splits a duration into the fields of an SRT timestamp.

    Args:
        seconds: Whole seconds, non-negative.
        nanos: Sub-second fraction in nanoseconds, 0..999,999,999.

    Returns:
        A (hours, minutes, seconds, milliseconds) tuple. Milliseconds are
        truncated, not rounded, so they never carry into the seconds field.

    Raises:
        InvalidDurationError: If seconds is negative or nanos is out of range.
    """
    if isinstance(seconds, bool) or not isinstance(seconds, int):
        raise InvalidDurationError(f"seconds must be an integer, got {seconds!r}", field="seconds")
    if isinstance(nanos, bool) or not isinstance(nanos, int):
        raise InvalidDurationError(f"nanos must be an integer, got {nanos!r}", field="nanos")
    if seconds < 0:
        raise InvalidDurationError(f"seconds={seconds} is negative", field="seconds")
    if not 0 <= nanos <= MAX_NANOS:
        raise InvalidDurationError(f"nanos={nanos} is outside 0..{MAX_NANOS}", field="nanos")

    hrs, remainder = divmod(seconds, 3600)
    mins, secs = divmod(remainder, 60)
    return hrs, mins, secs, nanos // 1_000_000

def format_timestamp(seconds: int, nanos: int = 0) -> str:
    """
    Formats a duration into SRT time format HH:MM:SS,mmm.

    Widths are minimums: a duration of 100 hours or more renders with
    three or more hour digits.

    Raises:
        InvalidDurationError: If seconds is negative or nanos is out of range.
    """
    hrs, mins, secs, millis = split_timestamp(seconds, nanos)
    return f"{hrs:02d}:{mins:02d}:{secs:02d},{millis:03d}"

def parse_timestamp(text: str) -> Tuple[int, int, int, int]:
    """Parses HH:MM:SS,mmm back into (hours, minutes, seconds, milliseconds)."""
    match = SRT_TIMESTAMP_PATTERN.match(text.strip())
    if not match:
        raise InvalidDurationError(f"Malformed SRT timestamp: {text!r}", field="timestamp")
    hrs, mins, secs, millis = (int(group) for group in match.groups())
    if mins > 59 or secs > 59:
        raise InvalidDurationError(f"Out of range SRT timestamp: {text!r}", field="timestamp")
    return hrs, mins, secs, millis

"""Data models for gensrt."""

import datetime
import math
import os
from dataclasses import dataclass, field
from enum import IntEnum
from typing import List, Optional, Union

NANOS_PER_SECOND = 1_000_000_000


class AudioEncoding(IntEnum):
    """Audio encodings understood by the recognition service."""
    UNSPECIFIED = 0
    # Uncompressed 16-bit signed little-endian samples (Linear PCM).
    LINEAR16 = 1
    FLAC = 2
    # 8-bit samples that compand 14-bit audio samples using G.711 PCMU/mu-law.
    MULAW = 3
    # Adaptive Multi-Rate Narrowband, sample rate must be 8000.
    AMR = 4
    # Adaptive Multi-Rate Wideband, sample rate must be 16000.
    AMR_WB = 5
    # Opus frames in an Ogg container.
    OGG_OPUS = 6
    SPEEX_WITH_HEADER_BYTE = 7


@dataclass(frozen=True)
class Duration:
    """An offset into the source audio, split the way recognizers report it."""
    seconds: int = 0
    nanos: int = 0

    @classmethod
    def from_seconds(cls, value: float) -> "Duration":
        """Builds a Duration from float seconds (Whisper style offsets)."""
        whole = math.floor(value)
        nanos = int(round((value - whole) * NANOS_PER_SECOND))
        if nanos >= NANOS_PER_SECOND: # rounding carried into the next second
            whole += 1
            nanos -= NANOS_PER_SECOND
        return cls(seconds=int(whole), nanos=nanos)

    @classmethod
    def from_timedelta(cls, value: datetime.timedelta) -> "Duration":
        """Builds a Duration from a timedelta (google-cloud-speech offsets)."""
        return cls(
            seconds=value.days * 86400 + value.seconds,
            nanos=value.microseconds * 1000
        )

    @property
    def total_seconds(self) -> float:
        return self.seconds + self.nanos / NANOS_PER_SECOND


@dataclass
class WordSpan:
    """A single recognized word with its offsets in the source audio."""
    text: str
    start_time: Duration
    end_time: Duration


@dataclass
class Alternative:
    """One candidate transcription for a chunk of audio."""
    transcript: str
    words: List[WordSpan] = field(default_factory=list)


@dataclass
class SegmentResult:
    """One recognizer result segment. Alternatives are ordered best first."""
    alternatives: List[Alternative] = field(default_factory=list)


@dataclass
class RecognitionResult:
    """Holds the structured output from the recognition service."""
    segments: List[SegmentResult] = field(default_factory=list)
    language: Optional[str] = None
    source: Optional[str] = None # Keep track of the audio source if needed


@dataclass(frozen=True)
class CaptionEntry:
    """One timed caption block, numbered from 1."""
    index: int
    start_time: Duration
    end_time: Duration
    text: str


@dataclass(frozen=True)
class UriSource:
    """Audio the recognition service fetches itself (e.g. gs://bucket/audio.wav)."""
    uri: str

    def __post_init__(self):
        if not self.uri:
            raise ValueError("Audio URI cannot be empty.")

    @property
    def description(self) -> str:
        return self.uri


@dataclass(frozen=True)
class InlineBytesSource:
    """Audio content sent along with the recognition request."""
    content: bytes
    name: Optional[str] = None

    @classmethod
    def from_file(cls, audio_path: str) -> "InlineBytesSource":
        """
        Reads a local audio file into an inline source.

        Raises:
            FileNotFoundError: If the audio file does not exist.
        """
        if not os.path.isfile(audio_path):
            raise FileNotFoundError(f"Audio file not found: {audio_path}")
        with open(audio_path, 'rb') as f:
            return cls(content=f.read(), name=audio_path)

    @property
    def description(self) -> str:
        return self.name or f"<{len(self.content)} inline bytes>"


AudioSource = Union[UriSource, InlineBytesSource]

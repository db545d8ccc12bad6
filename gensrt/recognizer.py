"""Interface for speech recognition collaborators."""

from abc import ABC, abstractmethod

from .models import AudioSource, RecognitionResult


class Recognizer(ABC):
    """Abstract base class for speech recognition services."""

    @abstractmethod
    def recognize(self, source: AudioSource) -> RecognitionResult:
        """
        Recognizes speech in the given audio source.

        Args:
            source: Either a UriSource or an InlineBytesSource, chosen by the caller.

        Returns:
            A RecognitionResult with word level timings.

        Raises:
            RecognitionError: If recognition fails.
        """
        pass

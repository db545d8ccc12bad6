"""Handles Speech-to-Text recognition using Google Cloud Speech."""

import datetime
import logging
import os
from typing import Optional

from google.cloud import speech

from .recognizer import Recognizer
from .models import (
    Alternative,
    AudioEncoding,
    AudioSource,
    Duration,
    InlineBytesSource,
    RecognitionResult,
    SegmentResult,
    UriSource,
    WordSpan,
)
from .exceptions import ConfigurationError, RecognitionError

logger = logging.getLogger(__name__)

DEFAULT_LANGUAGE_CODE = "en-US"
DEFAULT_SAMPLE_RATE_HZ = 16000
DEFAULT_OPERATION_TIMEOUT = 600


def _to_duration(offset) -> Duration:
    # proto-plus hands back timedelta, raw protobuf messages carry seconds/nanos
    if isinstance(offset, datetime.timedelta):
        return Duration.from_timedelta(offset)
    return Duration(seconds=int(offset.seconds), nanos=int(offset.nanos))


def response_to_result(response, source: Optional[str] = None, language: Optional[str] = None) -> RecognitionResult:
    """Converts a LongRunningRecognizeResponse into a RecognitionResult."""
    segments = []
    for result in response.results:
        alternatives = []
        for alt in result.alternatives:
            words = [
                WordSpan(
                    text=word_info.word,
                    start_time=_to_duration(word_info.start_time),
                    end_time=_to_duration(word_info.end_time)
                )
                for word_info in alt.words
            ]
            alternatives.append(Alternative(transcript=alt.transcript, words=words))
        segments.append(SegmentResult(alternatives=alternatives))
    return RecognitionResult(segments=segments, language=language, source=source)


class GoogleSpeechRecognizer(Recognizer):
    """Implements recognition using the Google Cloud Speech-to-Text long running API."""

    def __init__(
        self,
        credentials_file: str,
        language_code: str = DEFAULT_LANGUAGE_CODE,
        encoding: AudioEncoding = AudioEncoding.LINEAR16,
        sample_rate_hz: int = DEFAULT_SAMPLE_RATE_HZ,
        operation_timeout: float = DEFAULT_OPERATION_TIMEOUT,
        client: Optional[speech.SpeechClient] = None
    ):
        """
        Initializes the GoogleSpeechRecognizer.

        Args:
            credentials_file: Path to a service account JSON key.
            language_code: BCP-47 language of the audio, e.g. "en-US".
            encoding: Encoding of the audio content.
            sample_rate_hz: Sample rate of the audio content.
            operation_timeout: Seconds to wait for the long running operation.
            client: An already constructed client. Skips credential loading.

        Raises:
            ConfigurationError: If the credentials file is missing or the client
                                cannot be created.
        """
        self.language_code = language_code
        self.encoding = AudioEncoding(encoding)
        self.sample_rate_hz = sample_rate_hz
        self.operation_timeout = operation_timeout

        if client is not None:
            self.client = client
            return

        if not credentials_file or not os.path.isfile(credentials_file):
            raise ConfigurationError(f"Credentials file not found: {credentials_file}")
        logger.info(f"Creating Google Speech client with credentials from {credentials_file}")
        try:
            self.client = speech.SpeechClient.from_service_account_file(credentials_file)
        except Exception as e:
            logger.error(f"Failed to create Google Speech client: {e}", exc_info=True)
            raise ConfigurationError(f"Could not create Google Speech client: {e}") from e

    def build_config(self) -> speech.RecognitionConfig:
        """Recognition settings for a request, with word time offsets always on."""
        return speech.RecognitionConfig(
            encoding=speech.RecognitionConfig.AudioEncoding(int(self.encoding)),
            sample_rate_hertz=self.sample_rate_hz,
            language_code=self.language_code,
            enable_word_time_offsets=True,
        )

    def build_audio(self, source: AudioSource) -> speech.RecognitionAudio:
        """
        Wraps the source as request audio: a URI the service fetches, or inline content.

        Raises:
            RecognitionError: If the source is neither a UriSource nor an InlineBytesSource.
        """
        if isinstance(source, UriSource):
            return speech.RecognitionAudio(uri=source.uri)
        if isinstance(source, InlineBytesSource):
            return speech.RecognitionAudio(content=source.content)
        raise RecognitionError(f"Unsupported audio source type: {type(source).__name__}")

    def recognize(self, source: AudioSource) -> RecognitionResult:
        """
        Sends the audio for long running recognition and waits for the response.

        Raises:
            RecognitionError: If the request or the operation fails.
        """
        logger.info(
            f"Starting recognition for: {source.description} "
            f"(language={self.language_code}, encoding={self.encoding.name}, rate={self.sample_rate_hz})"
        )
        audio = self.build_audio(source)
        try:
            operation = self.client.long_running_recognize(config=self.build_config(), audio=audio)
            logger.info("Waiting for long running recognition to complete...")
            response = operation.result(timeout=self.operation_timeout)
        except Exception as e:
            logger.error(f"Google Speech recognition failed for {source.description}: {e}", exc_info=True)
            raise RecognitionError(f"Google Speech recognition failed for {source.description}: {e}") from e

        result = response_to_result(response, source=source.description, language=self.language_code)
        logger.info(f"Recognition completed. Received {len(result.segments)} result segments.")
        return result

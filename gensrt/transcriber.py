"""Handles Speech-to-Text recognition using Whisper."""

import whisper
import logging
import torch
import os
import tempfile
from typing import Optional

from .recognizer import Recognizer
from .models import (
    Alternative,
    AudioSource,
    Duration,
    InlineBytesSource,
    RecognitionResult,
    SegmentResult,
    UriSource,
    WordSpan,
)
from .exceptions import RecognitionError

logger = logging.getLogger(__name__)


def whisper_output_to_result(output: dict, source: Optional[str] = None) -> RecognitionResult:
    """
    Converts the dict returned by whisper's transcribe() into a RecognitionResult.

    Each Whisper segment becomes one result segment with a single alternative.
    Segments decoded without word timings keep an empty word list.
    """
    segments = []
    for seg_data in output.get('segments', []):
        if 'text' not in seg_data:
            logger.warning(f"Skipping incomplete segment data: {seg_data}")
            continue
        words = [
            WordSpan(
                text=word['word'].strip(),
                start_time=Duration.from_seconds(float(word['start'])),
                end_time=Duration.from_seconds(float(word['end']))
            )
            for word in seg_data.get('words', [])
        ]
        segments.append(SegmentResult(alternatives=[
            Alternative(transcript=seg_data['text'].strip(), words=words)
        ]))
    return RecognitionResult(segments=segments, language=output.get('language'), source=source)


class WhisperTranscriber(Recognizer):
    """Implements recognition using OpenAI's Whisper model with word timestamps."""

    def __init__(
        self,
        model_name: str = "medium.en",
        device: str = "cuda",
        fp16: bool = True,
        language: Optional[str] = "en"
    ):
        """
        Initializes the WhisperTranscriber.

        Args:
            model_name: The name of the Whisper model to use (e.g., "base", "medium.en").
            device: The device to run the model on ("cuda" or "cpu").
            fp16: Whether to use float16 precision (faster on compatible GPUs).
            language: Language to decode in, or None to let Whisper detect it.

        Raises:
            ValueError: If the specified device is invalid or unavailable.
            RecognitionError: If the model fails to load.
        """
        self.model_name = model_name
        self.device = device
        self.fp16 = fp16
        self.language = language

        if self.device == "cuda" and not torch.cuda.is_available():
            logger.warning("CUDA device requested but not available. Falling back to CPU.")
            self.device = "cpu"
        elif self.device not in ["cuda", "cpu"]:
             raise ValueError(f"Invalid device specified: {self.device}. Choose 'cuda' or 'cpu'.")

        logger.info(f"Initializing WhisperTranscriber with model '{self.model_name}' on device '{self.device}' (FP16: {self.fp16})")
        try:
            self.model = whisper.load_model(self.model_name, device=self.device)
            logger.info(f"Whisper model '{self.model_name}' loaded successfully.")
        except Exception as e:
            logger.error(f"Failed to load Whisper model '{self.model_name}': {e}", exc_info=True)
            raise RecognitionError(f"Failed to load Whisper model '{self.model_name}': {e}") from e

    def _transcribe_path(self, audio_path: str, description: str) -> RecognitionResult:
        try:
            output = self.model.transcribe(
                audio_path,
                language=self.language,
                fp16=self.fp16 if self.device == "cuda" else False, # FP16 only works on CUDA
                word_timestamps=True,
                verbose=None
            )
        except Exception as e:
            logger.error(f"Error during Whisper transcription process for {description}: {e}", exc_info=True)
            raise RecognitionError(f"Whisper transcription failed for {description}: {e}") from e

        logger.info(f"Transcription completed. Detected language: {output.get('language', 'N/A')}")
        result = whisper_output_to_result(output, source=description)
        logger.info(f"Processed {len(result.segments)} segments from transcription.")
        return result

    def recognize(self, source: AudioSource) -> RecognitionResult:
        """
        Transcribes the audio source using the loaded Whisper model.

        URIs are handed to ffmpeg as-is, so they must be something ffmpeg can
        read (local paths, http(s) URLs). Inline bytes are spooled to a
        temporary file first.

        Raises:
            RecognitionError: If transcription fails during processing.
        """
        logger.info(f"Starting transcription for: {source.description}")
        if isinstance(source, UriSource):
            return self._transcribe_path(source.uri, source.description)
        if not isinstance(source, InlineBytesSource):
            raise RecognitionError(f"Unsupported audio source type: {type(source).__name__}")

        suffix = os.path.splitext(source.name)[1] if source.name else ".wav"
        fd, temp_path = tempfile.mkstemp(prefix="gensrt_", suffix=suffix or ".wav")
        try:
            with os.fdopen(fd, 'wb') as f:
                f.write(source.content)
            return self._transcribe_path(temp_path, source.description)
        finally:
            try:
                os.remove(temp_path)
            except OSError as e:
                logger.warning(f"Could not remove temporary audio file {temp_path}: {e}")

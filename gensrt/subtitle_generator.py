"""Orchestrates the subtitle generation pipeline."""

import logging
import os
import time
from typing import Optional

from .audio_extractor import AudioExtractor, is_video_file
from .recognizer import Recognizer
from .subtitle_formatter import SubtitleFormatter, SRTFormatter, Sink
from .models import AudioSource, InlineBytesSource
from .exceptions import GenSrtError, FileSystemError
from .utils import ensure_dir_exists

logger = logging.getLogger(__name__)

class SubtitleGenerator:
    """
    Manages the end-to-end process of generating a subtitle file for an audio source.
    """

    def __init__(
        self,
        config: dict,
        recognizer: Recognizer,
        audio_extractor: Optional[AudioExtractor] = None,
        subtitle_formatter: Optional[SubtitleFormatter] = None
    ):
        """
        Initializes the SubtitleGenerator.

        Args:
            config: A dictionary containing configuration settings.
            recognizer: The speech recognition service to use.
            audio_extractor: Needed only to process video inputs.
            subtitle_formatter: Defaults to an SRTFormatter built from config.
        """
        self.config = config
        self.recognizer = recognizer
        self.audio_extractor = audio_extractor
        self.temp_dir = config.get('temp_dir', 'temp')

        if subtitle_formatter is None:
            try:
                subtitle_formatter = SRTFormatter(
                    timing_mode=config.get('timing_mode', 'utterance'),
                    alternatives=config.get('alternatives', 'all'),
                    font_color=config.get('font_color', '#808080')
                )
            except ValueError as e:
                raise GenSrtError(f"Invalid formatter settings in config: {e}") from e
        self.subtitle_formatter = subtitle_formatter

    def _cleanup_files(self, *file_paths: Optional[str]) -> None:
        """Removes the files specified, logging rather than raising on failure."""
        for file_path in file_paths:
            if file_path and os.path.exists(file_path):
                try:
                    os.remove(file_path)
                    logger.info(f"Cleaned up file: {file_path}")
                except OSError as e:
                    logger.warning(f"Could not remove file {file_path}: {e}")

    def generate(self, source: AudioSource, output: Sink) -> str:
        """
        Recognizes speech in the source and writes the subtitle document.

        Args:
            source: The audio to recognize.
            output: Path of the subtitle file, or a stream owned by the caller.

        Returns:
            The subtitle document text.

        Raises:
            GenSrtError: For any recognition, formatting or writing error.
            FileSystemError: If the output directory is invalid/unwritable.
        """
        start_time = time.time()
        logger.info(f"--- Starting gensrt process for: {source.description} ---")

        output_path = None
        created_output = False
        if isinstance(output, (str, os.PathLike)):
            output_path = os.fspath(output)
            output_dir = os.path.dirname(output_path)
            if output_dir:
                ensure_dir_exists(output_dir)
            created_output = not os.path.exists(output_path)

        try:
            logger.info("Step 1: Recognizing speech...")
            result = self.recognizer.recognize(source)
            logger.info(f"Recognition complete. Found {len(result.segments)} result segments.")
            if not result.segments:
                logger.warning("No speech detected. Writing an empty subtitle document.")

            logger.info("Step 2: Assembling and writing subtitles...")
            document = self.subtitle_formatter.format_subtitles(result, output)

            logger.info(f"--- gensrt process completed successfully in {time.time() - start_time:.2f} seconds ---")
            return document

        except GenSrtError as e:
            logger.error(f"gensrt process failed: {e}")
            if created_output:
                self._cleanup_files(output_path)
            raise
        except Exception as e:
            logger.critical(f"An unexpected critical error occurred during subtitle generation: {e}", exc_info=True)
            if created_output:
                self._cleanup_files(output_path)
            raise GenSrtError(f"An unexpected critical error occurred: {e}") from e

    def generate_from_file(self, input_path: str, output: Sink) -> str:
        """
        Generates subtitles for a local audio or video file.

        Video files have their audio track extracted into temp_dir first.

        Raises:
            FileNotFoundError: If the input file is not found.
            GenSrtError: For any processing error in the pipeline.
        """
        if not os.path.isfile(input_path):
            raise FileNotFoundError(f"Input file not found or is not a file: {input_path}")

        extracted_audio_path = None
        try:
            if is_video_file(input_path):
                if self.audio_extractor is None:
                    raise GenSrtError(f"Video input {input_path} needs an audio extractor.")
                try:
                    ensure_dir_exists(self.temp_dir)
                except (FileSystemError, ValueError) as e:
                    raise GenSrtError(f"Temporary directory '{self.temp_dir}' is invalid: {e}") from e
                base_name = os.path.splitext(os.path.basename(input_path))[0]
                extracted_audio_path = self.audio_extractor.extract_audio(
                    input_path, self.temp_dir, f"{base_name}_{int(time.time())}"
                )
                audio_path = extracted_audio_path
            else:
                audio_path = input_path

            source = InlineBytesSource.from_file(audio_path)
            return self.generate(source, output)
        finally:
            self._cleanup_files(extracted_audio_path)

#!/usr/bin/env python3
"""
gensrt Batch Processing Entry Point

Processes all audio and video files in a specified directory, ordered by size,
writing one SRT subtitle file per input into a Subs subfolder.
"""

import argparse
import logging
import os
import sys
import time
from typing import List, Tuple

from tqdm import tqdm

from gensrt.config_loader import ConfigLoader
from gensrt.log_setup import setup_bootstrap_logging, setup_logging
from gensrt.audio_extractor import AudioExtractor, VIDEO_EXTENSIONS
from gensrt.cli import build_recognizer
from gensrt.subtitle_generator import SubtitleGenerator
from gensrt.exceptions import GenSrtError, ConfigurationError, FileSystemError
from gensrt.utils import ensure_dir_exists

logger = logging.getLogger(__name__)

AUDIO_EXTENSIONS = (".wav", ".flac", ".ogg", ".opus", ".amr", ".raw")
MEDIA_EXTENSIONS = AUDIO_EXTENSIONS + VIDEO_EXTENSIONS

def find_and_sort_media(input_dir: str) -> List[Tuple[str, int]]:
    """
    Finds all audio and video files in the input directory and sorts them by size.

    Args:
        input_dir: The directory to search for media files.

    Returns:
        A list of (filepath, filesize) tuples sorted by filesize, smallest first.

    Raises:
        FileNotFoundError: If the input directory doesn't exist.
        ValueError: If the input path is not a directory.
    """
    if not os.path.exists(input_dir):
        raise FileNotFoundError(f"Input directory not found: {input_dir}")
    if not os.path.isdir(input_dir):
        raise ValueError(f"Input path is not a directory: {input_dir}")

    media = []
    logger.info(f"Scanning directory for media files: {input_dir}")
    for filename in os.listdir(input_dir):
        if os.path.splitext(filename)[1].lower() in MEDIA_EXTENSIONS:
            filepath = os.path.join(input_dir, filename)
            try:
                if os.path.isfile(filepath):
                    media.append((filepath, os.path.getsize(filepath)))
            except OSError as e:
                logger.warning(f"Could not access file {filepath}: {e}. Skipping.")

    media.sort(key=lambda item: item[1])
    logger.info(f"Found {len(media)} media files. Sorted by size (smallest first).")
    return media


def run_batch_processing():
    """Parses arguments, sets up, and runs the batch subtitle generation."""
    parser = argparse.ArgumentParser(
        description="gensrt Batch: Generate SRT subtitles for all audio/video files in a directory.",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )
    parser.add_argument(
        "-i", "--input-dir",
        required=True,
        help="Directory containing the input audio or video files."
    )
    parser.add_argument(
        "-c", "--config",
        default="config.yaml",
        help="Path to the configuration YAML file."
    )
    parser.add_argument(
        "--temp-dir",
        default=None,
        help="Override the temporary directory specified in the config file."
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Set the logging level for console and file output."
    )

    args = parser.parse_args()

    log_level = getattr(logging, args.log_level.upper(), logging.INFO)
    setup_bootstrap_logging(log_level, log_file='gensrt_batch_init.log')

    try:
        config = ConfigLoader().load_config(args.config)
    except (ConfigurationError, FileNotFoundError) as e:
        logger.critical(f"Failed to load configuration: {e}")
        sys.exit(1)

    setup_logging(log_level=log_level, log_dir=config['log_dir'], log_file='gensrt_batch.log')
    logger.info("Logging re-configured with settings from config file for batch processing.")

    if args.temp_dir:
        logger.info(f"Overriding temp_dir from config with CLI argument: {args.temp_dir}")
        config['temp_dir'] = args.temp_dir

    try:
        media_paths = [item[0] for item in find_and_sort_media(args.input_dir)]
    except (FileNotFoundError, ValueError) as e:
        logger.critical(f"Input directory error: {e}")
        sys.exit(1)
    if not media_paths:
        logger.warning(f"No media files found in {args.input_dir}. Exiting.")
        sys.exit(0)

    subs_dir = os.path.join(args.input_dir, "Subs")
    try:
        ensure_dir_exists(subs_dir)
    except FileSystemError as e:
        logger.critical(f"Could not create output directory: {e}")
        sys.exit(1)

    # One recognizer for the whole batch
    try:
        logger.info("Initializing gensrt components for batch processing...")
        generator = SubtitleGenerator(
            config=config,
            recognizer=build_recognizer(config),
            audio_extractor=AudioExtractor(
                ffmpeg_path=config.get('ffmpeg_path'),
                sample_rate_hz=int(config['sample_rate_hz'])
            )
        )
        logger.info("Components initialized successfully.")
    except GenSrtError as e:
        logger.critical(f"Failed to initialize gensrt components: {e}")
        sys.exit(1)
    except Exception as e:
        logger.critical(f"An unexpected error occurred during component initialization: {e}", exc_info=True)
        sys.exit(1)

    total_files = len(media_paths)
    files_processed = 0
    files_failed = 0
    batch_start_time = time.time()

    logger.info(f"--- Starting Batch Subtitle Generation for {total_files} files ---")

    with tqdm(total=total_files, unit="file", desc="Starting Batch") as pbar:
        for media_path in media_paths:
            media_filename = os.path.basename(media_path)
            pbar.set_description(f"Processing: {media_filename[:30]}...")
            output_path = os.path.join(subs_dir, f"{os.path.splitext(media_filename)[0]}.srt")

            try:
                file_start_time = time.time()
                generator.generate_from_file(media_path, output_path)
                logger.info(f"Subtitles for {media_filename} written to {output_path} ({time.time() - file_start_time:.2f}s).")
                files_processed += 1
            except GenSrtError as e:
                logger.error(f"gensrt failed for '{media_filename}': {e}")
                files_failed += 1
            except KeyboardInterrupt:
                logger.warning("Batch process interrupted by user (Ctrl+C). Exiting.")
                sys.exit(1)
            except Exception as e:
                logger.error(f"An unexpected error occurred processing '{media_filename}': {e}", exc_info=True)
                files_failed += 1
            finally:
                pbar.update(1)

    logger.info("--- Batch Subtitle Generation Finished ---")
    logger.info(f"Total time: {time.time() - batch_start_time:.2f} seconds")
    logger.info(f"Successfully processed: {files_processed}/{total_files} files")
    logger.info(f"Failed: {files_failed}/{total_files} files")

    sys.exit(1 if files_failed > 0 else 0)


if __name__ == "__main__":
    if sys.version_info < (3, 8):
        sys.stderr.write("gensrt requires Python 3.8 or later.\n")
        sys.exit(1)
    run_batch_processing()

"""Command-Line Interface handler for gensrt."""

import argparse
import logging
import os
import sys

from .config_loader import ConfigLoader, RECOGNIZERS
from .log_setup import setup_bootstrap_logging, setup_logging
from .audio_extractor import AudioExtractor
from .recognizer import Recognizer
from .subtitle_formatter import ALTERNATIVE_MODES, TIMING_MODES
from .subtitle_generator import SubtitleGenerator
from .models import AudioEncoding, UriSource
from .exceptions import GenSrtError, ConfigurationError

logger = logging.getLogger(__name__)

def build_recognizer(config: dict) -> Recognizer:
    """
    Creates the recognition service named by config['recognizer'].

    Engines are imported here so that only the selected one has to be installed
    and initialized.
    """
    name = config.get('recognizer', 'google')
    if name == 'google':
        from .google_speech import GoogleSpeechRecognizer
        return GoogleSpeechRecognizer(
            credentials_file=config.get('credentials_file'),
            language_code=config.get('language_code', 'en-US'),
            encoding=AudioEncoding[str(config.get('encoding', 'LINEAR16')).upper()],
            sample_rate_hz=int(config.get('sample_rate_hz', 16000)),
            operation_timeout=config.get('operation_timeout', 600)
        )
    if name == 'whisper':
        from .transcriber import WhisperTranscriber
        device = config.get('device', 'cuda')
        language = config.get('language_code')
        return WhisperTranscriber(
            model_name=config.get('whisper_model', 'medium.en'),
            device=device,
            fp16=config.get('whisper_fp16', True) if device == 'cuda' else False,
            # Whisper takes bare ISO 639-1 codes, "en-US" -> "en"
            language=language.split('-')[0].lower() if language else None
        )
    raise ConfigurationError(f"Unknown recognizer '{name}'. Choose one of {RECOGNIZERS}.")

class CLIHandler:
    """Parses arguments and orchestrates the gensrt process."""

    def __init__(self):
        self.parser = self._create_parser()

    def _create_parser(self) -> argparse.ArgumentParser:
        """Creates the argument parser for the CLI."""
        parser = argparse.ArgumentParser(
            prog="gensrt",
            description="gensrt: Generate SRT subtitles from speech recognition results.",
            formatter_class=argparse.ArgumentDefaultsHelpFormatter
        )
        source_group = parser.add_mutually_exclusive_group(required=True)
        source_group.add_argument(
            "-a", "--audio",
            help="Path to a local audio (or video) file, sent inline to the recognizer."
        )
        source_group.add_argument(
            "-u", "--uri",
            help="Audio URI fetched by the recognizer itself (e.g. gs://bucket/audio.wav)."
        )
        parser.add_argument(
            "-o", "--output",
            required=True,
            help="Path of the subtitle file (.srt) to write."
        )
        parser.add_argument(
            "-c", "--config",
            default="config.yaml",
            help="Path to the configuration YAML file."
        )
        parser.add_argument(
            "--recognizer",
            default=None, # Default taken from config
            choices=RECOGNIZERS,
            help="Override the recognition service specified in config."
        )
        parser.add_argument(
            "--credentials",
            default=None,
            help="Override the service account credentials file specified in config."
        )
        parser.add_argument(
            "--language",
            default=None,
            help="Override the language code (e.g. en-US) specified in config."
        )
        parser.add_argument(
            "--encoding",
            default=None,
            choices=list(AudioEncoding.__members__),
            help="Override the audio encoding specified in config."
        )
        parser.add_argument(
            "--sample-rate",
            type=int,
            default=None,
            help="Override the audio sample rate (Hz) specified in config."
        )
        parser.add_argument(
            "--timing-mode",
            default=None,
            choices=TIMING_MODES,
            help="Override how caption times are derived from word timings."
        )
        parser.add_argument(
            "--alternatives",
            default=None,
            choices=ALTERNATIVE_MODES,
            help="Override which recognition alternatives become captions."
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
        return parser

    def apply_overrides(self, config: dict, args: argparse.Namespace) -> dict:
        """Copies CLI overrides into the config dictionary."""
        overrides = {
            'recognizer': args.recognizer,
            'credentials_file': args.credentials,
            'language_code': args.language,
            'encoding': args.encoding,
            'sample_rate_hz': args.sample_rate,
            'timing_mode': args.timing_mode,
            'alternatives': args.alternatives,
            'temp_dir': args.temp_dir,
        }
        for key, value in overrides.items():
            if value is not None:
                logger.info(f"Overriding {key} from config with CLI argument: {value}")
                config[key] = value
        return config

    def run(self, argv=None) -> None:
        """Parses arguments, sets up logging, loads config, and runs the generator."""
        args = self.parser.parse_args(argv)

        log_level = getattr(logging, args.log_level.upper(), logging.INFO)
        setup_bootstrap_logging(log_level)

        config_loader = ConfigLoader()
        try:
            config = config_loader.load_config(args.config)
            self.apply_overrides(config, args)
            config_loader.validate(config)
        except ConfigurationError as e:
            logger.critical(f"Invalid configuration from {args.config}: {e}")
            sys.exit(1)
        except FileNotFoundError:
            logger.critical(f"Configuration file not found: {args.config}")
            sys.exit(1)

        setup_logging(log_level=log_level, log_dir=config['log_dir'], log_file=config['log_file'])
        logger.info("Logging re-configured with settings from config file.")

        if args.audio and not os.path.isfile(args.audio):
            logger.critical(f"Input audio file not found or is not a file: {args.audio}")
            sys.exit(1)

        try:
            logger.info("Initializing gensrt components...")
            recognizer = build_recognizer(config)
            audio_extractor = AudioExtractor(
                ffmpeg_path=config.get('ffmpeg_path'),
                sample_rate_hz=int(config['sample_rate_hz'])
            )
            generator = SubtitleGenerator(
                config=config,
                recognizer=recognizer,
                audio_extractor=audio_extractor
            )
            logger.info("Components initialized successfully.")

            if args.uri:
                generator.generate(UriSource(args.uri), args.output)
            else:
                generator.generate_from_file(args.audio, args.output)
            logger.info(f"Subtitles written to: {args.output}")
            sys.exit(0)

        except GenSrtError as e:
            logger.error(f"A gensrt error occurred: {e}")
            sys.exit(1)
        except KeyboardInterrupt:
            logger.warning("Process interrupted by user (Ctrl+C). Exiting.")
            sys.exit(1)
        except Exception as e:
            logger.critical(f"An unexpected critical error occurred at the top level: {e}", exc_info=True)
            sys.exit(2)

def main() -> None:
    CLIHandler().run()

"""Handles loading configuration from YAML files."""

import yaml
import os
import logging
from .exceptions import ConfigurationError
from .models import AudioEncoding
from .subtitle_formatter import ALTERNATIVE_MODES, DEFAULT_FONT_COLOR, TIMING_MODES

logger = logging.getLogger(__name__)

RECOGNIZERS = ("google", "whisper")

DEFAULT_CONFIG = {
    'recognizer': 'google',
    'credentials_file': 'key.json',
    'language_code': 'en-US',
    'encoding': 'LINEAR16',
    'sample_rate_hz': 16000,
    'operation_timeout': 600,
    'whisper_model': 'medium.en',
    'device': 'cuda',
    'whisper_fp16': True,
    'ffmpeg_path': None,
    'temp_dir': 'temp',
    'timing_mode': 'utterance',
    'alternatives': 'all',
    'font_color': DEFAULT_FONT_COLOR,
    'log_dir': 'logs',
    'log_file': 'gensrt.log',
}

class ConfigLoader:
    """Loads configuration settings from a YAML file."""

    def load_config(self, config_path: str) -> dict:
        """
        Loads configuration from the specified YAML file path.

        Keys missing from the file fall back to DEFAULT_CONFIG.

        Args:
            config_path: The path to the YAML configuration file.

        Returns:
            A dictionary containing the loaded configuration settings.

        Raises:
            FileNotFoundError: If the configuration file does not exist.
            ConfigurationError: If the file cannot be parsed as YAML, if there
                              are other reading errors, or if a value is invalid.
        """
        logger.info(f"Attempting to load configuration from: {config_path}")
        if not os.path.exists(config_path):
            logger.error(f"Configuration file not found at path: {config_path}")
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        if not os.path.isfile(config_path):
            logger.error(f"Configuration path is not a file: {config_path}")
            raise ConfigurationError(f"Configuration path is not a file: {config_path}")

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            logger.error(f"Error parsing YAML configuration file {config_path}: {e}", exc_info=True)
            raise ConfigurationError(f"Invalid YAML format in {config_path}: {e}") from e
        except OSError as e:
            logger.error(f"Error reading configuration file {config_path}: {e}", exc_info=True)
            raise ConfigurationError(f"Could not read configuration file {config_path}: {e}") from e

        if loaded is None: # empty file
            loaded = {}
        if not isinstance(loaded, dict):
            logger.error(f"Configuration file {config_path} did not load as a dictionary (root object).")
            raise ConfigurationError(f"Invalid YAML structure in {config_path}. Root must be a mapping (dictionary).")

        config = dict(DEFAULT_CONFIG)
        config.update(loaded)
        self.validate(config)
        logger.info(f"Configuration loaded successfully from {config_path}")
        return config

    def validate(self, config: dict) -> None:
        """
        Checks enumerated and numeric settings.

        Raises:
            ConfigurationError: On the first invalid value.
        """
        choices = {
            'recognizer': RECOGNIZERS,
            'timing_mode': TIMING_MODES,
            'alternatives': ALTERNATIVE_MODES,
        }
        for key, allowed in choices.items():
            if config.get(key) not in allowed:
                raise ConfigurationError(f"Invalid value for '{key}': {config.get(key)!r}. Choose one of {allowed}.")

        encoding = config.get('encoding')
        if str(encoding).upper() not in AudioEncoding.__members__:
            raise ConfigurationError(
                f"Invalid value for 'encoding': {encoding!r}. Choose one of {tuple(AudioEncoding.__members__)}."
            )

        for key in ('sample_rate_hz', 'operation_timeout'):
            value = config.get(key)
            if isinstance(value, bool) or not isinstance(value, (int, float)) or value <= 0:
                raise ConfigurationError(f"Invalid value for '{key}': {value!r}. Must be a positive number.")

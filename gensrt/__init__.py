"""gensrt: generate SRT subtitles from speech recognition results."""

__version__ = "1.0.0"

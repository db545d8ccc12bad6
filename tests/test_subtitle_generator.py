"""Tests for the end-to-end generation pipeline with a fake recognizer."""
import io

import pytest

from gensrt.exceptions import GenSrtError, InvalidDurationError, RecognitionError
from gensrt.models import (
    Alternative,
    Duration,
    InlineBytesSource,
    RecognitionResult,
    SegmentResult,
    UriSource,
    WordSpan,
)
from gensrt.recognizer import Recognizer
from gensrt.subtitle_generator import SubtitleGenerator


class FakeRecognizer(Recognizer):
    def __init__(self, result=None, error=None):
        self.result = result if result is not None else RecognitionResult()
        self.error = error
        self.sources = []

    def recognize(self, source):
        self.sources.append(source)
        if self.error:
            raise self.error
        return self.result


def _hello_result(end_nanos=200_000_000):
    return RecognitionResult(segments=[SegmentResult(alternatives=[Alternative(
        transcript="hello world",
        words=[
            WordSpan("hello", Duration(0, 0), Duration(0, 500_000_000)),
            WordSpan("world", Duration(0, 500_000_000), Duration(1, end_nanos)),
        ],
    )])])


def _generator(recognizer, **config):
    return SubtitleGenerator(config=config, recognizer=recognizer)


def test_generate_writes_file(tmp_path):
    output = tmp_path / "subs" / "out.srt"
    recognizer = FakeRecognizer(_hello_result())
    document = _generator(recognizer).generate(UriSource("gs://bucket/a.wav"), str(output))
    assert output.read_text(encoding="utf-8") == document
    assert document.startswith("1\n00:00:00,000 --> 00:00:01,200\n")
    assert recognizer.sources == [UriSource("gs://bucket/a.wav")]


def test_generate_honours_config_timing_mode():
    sink = io.BytesIO()
    _generator(FakeRecognizer(_hello_result()), timing_mode="first_word").generate(UriSource("gs://b/a.wav"), sink)
    assert b"00:00:00,000 --> 00:00:00,500" in sink.getvalue()


def test_no_speech_writes_empty_file(tmp_path):
    output = tmp_path / "out.srt"
    assert _generator(FakeRecognizer()).generate(UriSource("gs://b/a.wav"), str(output)) == ""
    assert output.read_bytes() == b""


def test_recognition_error_propagates_without_output(tmp_path):
    output = tmp_path / "out.srt"
    recognizer = FakeRecognizer(error=RecognitionError("service unavailable"))
    with pytest.raises(RecognitionError):
        _generator(recognizer).generate(UriSource("gs://b/a.wav"), str(output))
    assert not output.exists()


def test_invalid_duration_aborts_and_leaves_no_file(tmp_path):
    output = tmp_path / "out.srt"
    with pytest.raises(InvalidDurationError):
        _generator(FakeRecognizer(_hello_result(end_nanos=2_000_000_000))).generate(
            UriSource("gs://b/a.wav"), str(output)
        )
    assert not output.exists()


def test_unexpected_error_is_wrapped(tmp_path):
    recognizer = FakeRecognizer(error=RuntimeError("boom"))
    with pytest.raises(GenSrtError):
        _generator(recognizer).generate(UriSource("gs://b/a.wav"), str(tmp_path / "out.srt"))


def test_invalid_formatter_settings_rejected():
    with pytest.raises(GenSrtError):
        _generator(FakeRecognizer(), timing_mode="sideways")


def test_generate_from_audio_file_sends_inline_bytes(tmp_path):
    audio = tmp_path / "clip.wav"
    audio.write_bytes(b"RIFF")
    recognizer = FakeRecognizer(_hello_result())
    _generator(recognizer).generate_from_file(str(audio), str(tmp_path / "clip.srt"))
    assert recognizer.sources == [InlineBytesSource(content=b"RIFF", name=str(audio))]
    assert (tmp_path / "clip.srt").exists()


def test_generate_from_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        _generator(FakeRecognizer()).generate_from_file(str(tmp_path / "nope.wav"), str(tmp_path / "out.srt"))


def test_video_input_without_extractor(tmp_path):
    video = tmp_path / "clip.mp4"
    video.write_bytes(b"\x00")
    with pytest.raises(GenSrtError):
        _generator(FakeRecognizer()).generate_from_file(str(video), str(tmp_path / "out.srt"))


def test_video_input_is_extracted_and_cleaned_up(tmp_path):
    video = tmp_path / "clip.mp4"
    video.write_bytes(b"\x00")
    temp_dir = tmp_path / "temp"

    class FakeExtractor:
        def __init__(self):
            self.extracted = []

        def extract_audio(self, video_filepath, output_audio_dir, output_filename=None):
            path = f"{output_audio_dir}/{output_filename}.wav"
            with open(path, "wb") as f:
                f.write(b"PCM")
            self.extracted.append(path)
            return path

    extractor = FakeExtractor()
    recognizer = FakeRecognizer(_hello_result())
    generator = SubtitleGenerator(
        config={"temp_dir": str(temp_dir)},
        recognizer=recognizer,
        audio_extractor=extractor,
    )
    generator.generate_from_file(str(video), str(tmp_path / "clip.srt"))
    assert recognizer.sources[0].content == b"PCM"
    assert len(extractor.extracted) == 1
    assert list(temp_dir.iterdir()) == []

"""Tests for assembling recognition results into SRT documents."""
import io
import re
import tempfile

import pytest

from gensrt.exceptions import InvalidDurationError, SinkWriteError
from gensrt.models import Alternative, Duration, RecognitionResult, SegmentResult, WordSpan
from gensrt.subtitle_formatter import SRTFormatter

HELLO_WORLD_SRT = (
    "1\n"
    "00:00:00,000 --> 00:00:01,200\n"
    '<font color="#808080">hello world</font>\n'
    "\n"
)


def _word(text, start, end):
    return WordSpan(text=text, start_time=Duration(*start), end_time=Duration(*end))


def _hello_world() -> Alternative:
    return Alternative(
        transcript="hello world",
        words=[
            _word("hello", (0, 0), (0, 500_000_000)),
            _word("world", (0, 500_000_000), (1, 200_000_000)),
        ],
    )


def _result(*segments) -> RecognitionResult:
    return RecognitionResult(segments=[SegmentResult(alternatives=list(alts)) for alts in segments])


def _indices(document):
    return [int(line) for line in document.split("\n") if re.fullmatch(r"\d+", line)]


def test_hello_world_document():
    document = SRTFormatter().assemble(_result([_hello_world()]))
    assert document == HELLO_WORLD_SRT


def test_first_word_timing_mode_uses_first_word_only():
    document = SRTFormatter(timing_mode="first_word").assemble(_result([_hello_world()]))
    assert "00:00:00,000 --> 00:00:00,500\n" in document


def test_empty_result_yields_empty_document():
    assert SRTFormatter().assemble(RecognitionResult()) == ""


def test_only_empty_alternatives_yields_empty_document():
    result = _result([Alternative(transcript="uh")], [Alternative(transcript="")])
    assert SRTFormatter().assemble(result) == ""


def test_indices_are_gap_free_when_alternatives_are_skipped():
    result = _result(
        [Alternative(transcript="no timing")],
        [_hello_world(), Alternative(transcript="also no timing")],
        [_hello_world()],
        [Alternative(transcript="skipped"), _hello_world()],
    )
    document = SRTFormatter().assemble(result)
    assert _indices(document) == [1, 2, 3]
    assert document.count('<font color="#808080">') == 3


def test_best_mode_renders_first_alternative_per_segment():
    runner_up = Alternative(
        transcript="yellow world",
        words=[_word("yellow", (0, 0), (1, 200_000_000))],
    )
    result = _result([_hello_world(), runner_up], [_hello_world(), runner_up])
    assert _indices(SRTFormatter(alternatives="all").assemble(result)) == [1, 2, 3, 4]
    best = SRTFormatter(alternatives="best").assemble(result)
    assert _indices(best) == [1, 2]
    assert "yellow" not in best


def test_entries_carry_utterance_span():
    entries = SRTFormatter().build_entries(_result([_hello_world()]))
    assert len(entries) == 1
    assert entries[0].index == 1
    assert entries[0].start_time == Duration(0, 0)
    assert entries[0].end_time == Duration(1, 200_000_000)
    assert entries[0].text == "hello world"


def test_transcript_whitespace_is_trimmed():
    alt = _hello_world()
    alt.transcript = " hello world "
    assert SRTFormatter().assemble(_result([alt])) == HELLO_WORLD_SRT


def test_custom_font_color():
    document = SRTFormatter(font_color="#ffffff").assemble(_result([_hello_world()]))
    assert '<font color="#ffffff">hello world</font>' in document


def test_invalid_nanos_names_entry_and_field():
    bad = Alternative(
        transcript="broken",
        words=[_word("broken", (2, 0), (3, 1_000_000_000))],
    )
    result = _result([_hello_world()], [Alternative(transcript="skip")], [bad])
    with pytest.raises(InvalidDurationError) as excinfo:
        SRTFormatter().assemble(result)
    assert excinfo.value.entry_index == 2
    assert excinfo.value.field == "end_time.nanos"
    assert "entry 2" in str(excinfo.value)
    assert "end_time.nanos" in str(excinfo.value)


def test_negative_seconds_abort_assembly():
    bad = Alternative(transcript="early", words=[_word("early", (-1, 0), (0, 0))])
    with pytest.raises(InvalidDurationError) as excinfo:
        SRTFormatter().assemble(_result([bad], [_hello_world()]))
    assert excinfo.value.entry_index == 1
    assert excinfo.value.field == "start_time.seconds"


def test_end_before_start_rejected():
    bad = Alternative(
        transcript="backwards",
        words=[_word("back", (5, 0), (6, 0)), _word("wards", (2, 0), (3, 0))],
    )
    with pytest.raises(InvalidDurationError) as excinfo:
        SRTFormatter().assemble(_result([bad]))
    assert excinfo.value.field == "end_time"


def test_assembly_is_repeatable():
    result = _result([_hello_world()], [_hello_world()])
    formatter = SRTFormatter()
    assert formatter.assemble(result) == formatter.assemble(result)


def test_invalid_options_rejected():
    with pytest.raises(ValueError):
        SRTFormatter(timing_mode="last_word")
    with pytest.raises(ValueError):
        SRTFormatter(alternatives="some")


def test_format_subtitles_writes_utf8_file(tmp_path):
    alt = _hello_world()
    alt.transcript = "héllo wörld"
    output = tmp_path / "out.srt"
    document = SRTFormatter().format_subtitles(_result([alt]), str(output))
    assert output.read_bytes() == document.encode("utf-8")
    assert "héllo wörld" in output.read_text(encoding="utf-8")


def test_format_subtitles_writes_binary_stream():
    sink = io.BytesIO()
    SRTFormatter().format_subtitles(_result([_hello_world()]), sink)
    assert sink.getvalue() == HELLO_WORLD_SRT.encode("utf-8")
    assert not sink.closed


def test_format_subtitles_writes_text_stream():
    sink = io.StringIO()
    SRTFormatter().format_subtitles(_result([_hello_world()]), sink)
    assert sink.getvalue() == HELLO_WORLD_SRT


def test_closed_stream_raises_sink_write_error():
    sink = io.BytesIO()
    sink.close()
    with pytest.raises(SinkWriteError):
        SRTFormatter().format_subtitles(_result([_hello_world()]), sink)


def test_unwritable_path_raises_sink_write_error(tmp_path):
    with pytest.raises(SinkWriteError):
        SRTFormatter().format_subtitles(_result([_hello_world()]), str(tmp_path / "missing" / "out.srt"))


def test_failing_stream_raises_sink_write_error():
    class FullDisk(io.RawIOBase):
        def writable(self):
            return True

        def write(self, data):
            raise OSError(28, "No space left on device")

    with pytest.raises(SinkWriteError):
        SRTFormatter().format_subtitles(_result([_hello_world()]), FullDisk())


def test_text_mode_temporary_file_gets_text(tmp_path):
    with tempfile.NamedTemporaryFile(mode="w", encoding="utf-8", dir=tmp_path, suffix=".srt", delete=False) as sink:
        SRTFormatter().format_subtitles(_result([_hello_world()]), sink)
        path = sink.name
    with open(path, encoding="utf-8") as f:
        assert f.read() == HELLO_WORLD_SRT


def test_text_mode_spooled_file_gets_text():
    with tempfile.SpooledTemporaryFile(mode="w+") as sink:
        SRTFormatter().format_subtitles(_result([_hello_world()]), sink)
        sink.seek(0)
        assert sink.read() == HELLO_WORLD_SRT


def test_binary_mode_temporary_file_gets_utf8_bytes():
    with tempfile.TemporaryFile(mode="w+b") as sink:
        SRTFormatter().format_subtitles(_result([_hello_world()]), sink)
        sink.seek(0)
        assert sink.read() == HELLO_WORLD_SRT.encode("utf-8")


def test_stream_type_mismatch_raises_sink_write_error():
    class BytesOnly:
        mode = "w"

        def write(self, data):
            if not isinstance(data, bytes):
                raise TypeError("write() argument must be bytes")

        def flush(self):
            pass

    with pytest.raises(SinkWriteError):
        SRTFormatter().format_subtitles(_result([_hello_world()]), BytesOnly())

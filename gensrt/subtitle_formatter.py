"""Handles formatting recognition results into subtitle files (SRT)."""

import io
import logging
import os
from abc import ABC, abstractmethod
from typing import BinaryIO, List, TextIO, Tuple, Union

from .models import Alternative, CaptionEntry, Duration, RecognitionResult
from .exceptions import EmptyAlternativeError, InvalidDurationError, SinkWriteError
from .utils import format_timestamp, split_timestamp

logger = logging.getLogger(__name__)

DEFAULT_FONT_COLOR = "#808080"

SRT_ENTRY_TEMPLATE = (
    "{index}\n"
    "{start} --> {end}\n"
    '<font color="{color}">{text}</font>\n'
    "\n"
)

TIMING_MODES = ("utterance", "first_word")
ALTERNATIVE_MODES = ("all", "best")

Sink = Union[str, os.PathLike, BinaryIO, TextIO]


def _is_binary_stream(sink) -> bool:
    # tempfile wrappers are not io subclasses, only their mode tells them apart
    if isinstance(sink, (io.RawIOBase, io.BufferedIOBase)):
        return True
    mode = getattr(sink, 'mode', '')
    return isinstance(mode, str) and 'b' in mode


class SubtitleFormatter(ABC):
    """Abstract base class for subtitle formatters."""

    @abstractmethod
    def assemble(self, result: RecognitionResult) -> str:
        """
        Serializes the recognition result into subtitle document text.

        Raises:
            InvalidDurationError: If the result carries malformed timing data.
        """
        pass

    def format_subtitles(self, result: RecognitionResult, sink: Sink) -> str:
        """
        Assembles the document and writes it to the sink.

        Args:
            result: The result from the recognition service.
            sink: A file path, or a binary/text stream owned by the caller.

        Returns:
            The document text that was written.

        Raises:
            InvalidDurationError: If the result carries malformed timing data.
            SinkWriteError: If the sink rejects the write.
        """
        document = self.assemble(result)
        self.write_document(document, sink)
        return document

    def write_document(self, document: str, sink: Sink) -> None:
        """
        Writes the document as UTF-8 to a path or a caller supplied stream.

        Paths are opened and closed here. Streams are written to but left
        open; closing them is up to whoever opened them.

        Raises:
            SinkWriteError: If opening or writing the destination fails.
        """
        if isinstance(sink, (str, os.PathLike)):
            logger.info(f"Writing subtitle document to: {os.fspath(sink)}")
            try:
                with open(sink, 'w', encoding='utf-8', newline='\n') as f:
                    f.write(document)
            except OSError as e:
                logger.error(f"Failed to write subtitle file {os.fspath(sink)}: {e}", exc_info=True)
                raise SinkWriteError(f"Could not write subtitle file {os.fspath(sink)}: {e}") from e
            return

        try:
            if _is_binary_stream(sink):
                sink.write(document.encode('utf-8'))
            else:
                sink.write(document)
            sink.flush()
        except (OSError, ValueError, TypeError) as e: # ValueError: I/O operation on closed file
            logger.error(f"Failed to write subtitle document to stream: {e}", exc_info=True)
            raise SinkWriteError(f"Could not write subtitle document to stream: {e}") from e


class SRTFormatter(SubtitleFormatter):
    """Formats recognition results into the SRT (SubRip Text) format."""

    def __init__(
        self,
        timing_mode: str = "utterance",
        alternatives: str = "all",
        font_color: str = DEFAULT_FONT_COLOR
    ):
        """
        Initializes the SRTFormatter.

        Args:
            timing_mode: "utterance" times a caption from its first word's start
                         to its last word's end. "first_word" uses only the first
                         word's start and end, matching older gensrt output.
            alternatives: "all" renders every alternative of every segment,
                          "best" only the first alternative of each segment.
            font_color: Color attribute of the <font> tag wrapping each caption.
        """
        if timing_mode not in TIMING_MODES:
            raise ValueError(f"Invalid timing mode: {timing_mode}. Choose one of {TIMING_MODES}.")
        if alternatives not in ALTERNATIVE_MODES:
            raise ValueError(f"Invalid alternatives mode: {alternatives}. Choose one of {ALTERNATIVE_MODES}.")
        self.timing_mode = timing_mode
        self.alternatives = alternatives
        self.font_color = font_color

    def _selected_alternatives(self, alternatives: List[Alternative]) -> List[Alternative]:
        if self.alternatives == "best":
            return alternatives[:1]
        return alternatives

    def _caption_span(self, alternative: Alternative) -> Tuple[Duration, Duration]:
        """Returns the (start, end) durations covered by an alternative."""
        if not alternative.words:
            raise EmptyAlternativeError("Alternative has no word timings.")
        first_word = alternative.words[0]
        if self.timing_mode == "first_word":
            return first_word.start_time, first_word.end_time
        return first_word.start_time, alternative.words[-1].end_time

    def _validate_span(self, index: int, start: Duration, end: Duration, position: str) -> None:
        for name, value in (("start_time", start), ("end_time", end)):
            try:
                split_timestamp(value.seconds, value.nanos)
            except InvalidDurationError as e:
                field = f"{name}.{e.field}"
                raise InvalidDurationError(
                    f"Invalid duration in caption entry {index} ({position}): {field}: {e}",
                    entry_index=index,
                    field=field
                ) from e
        if (end.seconds, end.nanos) < (start.seconds, start.nanos):
            raise InvalidDurationError(
                f"Invalid duration in caption entry {index} ({position}): "
                f"end_time {end.total_seconds:.3f}s precedes start_time {start.total_seconds:.3f}s",
                entry_index=index,
                field="end_time"
            )

    def build_entries(self, result: RecognitionResult) -> List[CaptionEntry]:
        """
        Derives one caption entry per alternative that carries word timings.

        Entries are numbered 1..N without gaps; alternatives without words
        are skipped and do not consume an index.

        Raises:
            InvalidDurationError: On the first malformed timestamp. Nothing is
                                  returned for the rest of the result.
        """
        entries = []
        index = 1
        skipped = 0

        for segment_pos, segment in enumerate(result.segments):
            for alternative_pos, alternative in enumerate(self._selected_alternatives(segment.alternatives)):
                position = f"segment {segment_pos}, alternative {alternative_pos}"
                try:
                    start, end = self._caption_span(alternative)
                except EmptyAlternativeError:
                    logger.warning(f"Skipping {position}: no word timings ('{alternative.transcript[:30]}')")
                    skipped += 1
                    continue

                self._validate_span(index, start, end, position)
                entries.append(CaptionEntry(
                    index=index,
                    start_time=start,
                    end_time=end,
                    text=alternative.transcript.strip()
                ))
                index += 1

        logger.debug(f"Built {len(entries)} caption entries, skipped {skipped} empty alternatives.")
        return entries

    def render_entry(self, entry: CaptionEntry) -> str:
        """Renders a single caption block, trailing blank line included."""
        return SRT_ENTRY_TEMPLATE.format(
            index=entry.index,
            start=format_timestamp(entry.start_time.seconds, entry.start_time.nanos),
            end=format_timestamp(entry.end_time.seconds, entry.end_time.nanos),
            color=self.font_color,
            text=entry.text
        )

    def assemble(self, result: RecognitionResult) -> str:
        """
        Serializes the recognition result into SRT text.

        A result with no segments, or with only empty alternatives, yields an
        empty document.
        """
        entries = self.build_entries(result)
        document = "".join(self.render_entry(entry) for entry in entries)
        logger.info(f"Assembled {len(entries)} subtitle blocks.")
        return document

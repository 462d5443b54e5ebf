"""
Paragraph Splitter Module

Splits text into paragraphs: maximal runs of non-blank lines separated by
one or more blank (empty or whitespace-only) lines.
Paragraphs can be pulled from either end of the text.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple
import logging

from .line_producer import Line, LineProducer

logger = logging.getLogger(__name__)

PARAGRAPH = "paragraph"
SEPARATOR = "separator"


@dataclass(frozen=True)
class Paragraph:
    """Offsets of one paragraph into its source text."""

    source: str = field(repr=False)
    start: int
    end: int

    @property
    def text(self) -> str:
        return self.source[self.start:self.end]

    @property
    def line_count(self) -> int:
        return self.source.count("\n", self.start, self.end) + 1

    def __len__(self) -> int:
        return self.end - self.start

    def __str__(self) -> str:
        return self.text


@dataclass(frozen=True)
class Segment:
    kind: str
    start: int
    end: int
    text: str


class Paragraphs:
    """
    Double-ended iterator over the paragraphs of a text.

    Iterating with ``for`` or ``next()`` walks forward; ``next_from_back()``
    and ``reversed()`` walk from the end. Both ends share the same remaining
    lines, so mixing directions never repeats or skips a paragraph. Once
    exhausted the iterator stays exhausted.

    Args:
        text: Text to split. Paragraphs are sliced out of it on demand.
    """

    def __init__(self, text: str):
        self._lines = LineProducer(text)
        self._exhausted = False

    @property
    def source(self) -> str:
        return self._lines.text

    def __iter__(self) -> "Paragraphs":
        return self

    def __next__(self) -> str:
        paragraph = self.next()
        if paragraph is None:
            raise StopIteration
        return paragraph

    def __reversed__(self) -> Iterator[str]:
        while True:
            paragraph = self.next_from_back()
            if paragraph is None:
                return
            yield paragraph

    def next(self) -> Optional[str]:
        span = self.next_span()
        return span.text if span is not None else None

    def next_from_back(self) -> Optional[str]:
        span = self.next_span_from_back()
        return span.text if span is not None else None

    def next_span(self) -> Optional[Paragraph]:
        """Take the next paragraph from the front."""
        if self._exhausted:
            return None

        first = self._lines.next()
        while first is not None and self._lines.is_blank(first):
            first = self._lines.next()
        if first is None:
            return self._exhaust()

        last = first
        while True:
            line = self._lines.next()
            # The blank line ending this paragraph is consumed here
            if line is None or self._lines.is_blank(line):
                break
            last = line

        return self._span(first, last)

    def next_span_from_back(self) -> Optional[Paragraph]:
        """Take the next paragraph from the back."""
        if self._exhausted:
            return None

        last = self._lines.next_back()
        while last is not None and self._lines.is_blank(last):
            last = self._lines.next_back()
        if last is None:
            return self._exhaust()

        first = last
        while True:
            line = self._lines.next_back()
            if line is None or self._lines.is_blank(line):
                break
            first = line

        return self._span(first, last)

    def size_hint(self) -> Tuple[int, Optional[int]]:
        """
        Bounds on the number of paragraphs left, as ``(lower, upper)``.

        At worst every other remaining line is blank. This is an estimate
        for preallocation only.
        """
        if self._exhausted:
            return (0, 0)
        _, max_lines = self._lines.size_hint()
        if max_lines is None:
            return (0, None)
        return (0, (max_lines + 2) // 2)

    def _span(self, first: Line, last: Line) -> Paragraph:
        return Paragraph(self._lines.text, first.start, last.end)

    def _exhaust(self) -> None:
        self._exhausted = True
        return None


def paragraphs(text: str) -> Paragraphs:
    """
    Iterate over the paragraphs of ``text``.

    >>> list(paragraphs("foo\\r\\nbar\\n\\nbaz\\r"))
    ['foo\\r\\nbar', 'baz\\r']
    """
    return Paragraphs(text)


class ParagraphSplitter:
    """Split text into paragraph lists, records and segments."""

    def split_into_paragraphs(self, text: str) -> List[str]:
        """
        Split text into paragraphs.

        Args:
            text: Raw text

        Returns:
            List of paragraph strings in document order
        """
        result = list(paragraphs(text))
        logger.debug(f"Split text into {len(result)} paragraphs")
        return result

    def split_section_into_paragraphs(self, section_text: str) -> List[Dict[str, Any]]:
        """
        Split a section into paragraph records with position metadata.

        Args:
            section_text: Text of a single section

        Returns:
            List of paragraph dictionaries with index, text and offsets
        """
        iterator = paragraphs(section_text)
        records: List[Dict[str, Any]] = []
        span = iterator.next_span()
        while span is not None:
            records.append(build_record(span, index=len(records)))
            span = iterator.next_span()
        return records

    def split_section_from_back(self, section_text: str) -> List[Dict[str, Any]]:
        """
        Same records as split_section_into_paragraphs, collected from the end.
        """
        iterator = paragraphs(section_text)
        spans: List[Paragraph] = []
        span = iterator.next_span_from_back()
        while span is not None:
            spans.append(span)
            span = iterator.next_span_from_back()
        spans.reverse()
        return [build_record(span, index=i) for i, span in enumerate(spans)]

    def segments(self, text: str) -> List[Segment]:
        """
        Partition text into alternating separator and paragraph segments.

        Joining the segment texts gives back the input exactly. Separators
        hold the blank lines and terminators around paragraphs; empty
        separators are omitted.
        """
        result: List[Segment] = []
        position = 0
        iterator = paragraphs(text)
        span = iterator.next_span()
        while span is not None:
            if span.start > position:
                result.append(Segment(SEPARATOR, position, span.start, text[position:span.start]))
            result.append(Segment(PARAGRAPH, span.start, span.end, span.text))
            position = span.end
            span = iterator.next_span()
        if position < len(text):
            result.append(Segment(SEPARATOR, position, len(text), text[position:]))
        return result


def build_record(span: Paragraph, index: int) -> Dict[str, Any]:
    return {
        'index': index,
        'text': span.text,
        'start': span.start,
        'end': span.end,
        'length': len(span),
        'line_count': span.line_count,
    }

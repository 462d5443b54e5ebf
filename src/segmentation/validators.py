import logging
from typing import Dict, List, Sequence

from .line_producer import is_blank_text
from .paragraph_splitter import PARAGRAPH, SEPARATOR, Segment

logger = logging.getLogger(__name__)


class ParagraphValidator:
    REQUIRED_FIELDS = {
        "index",
        "text",
        "start",
        "end",
        "length",
        "line_count",
    }

    @staticmethod
    def _on_line_boundary(text: str, start: int, end: int) -> bool:
        starts_line = start == 0 or text[start - 1] == "\n"
        if end == len(text):
            return starts_line
        rest = text[end:end + 2]
        ends_line = rest.startswith("\n") or rest == "\r\n"
        return starts_line and ends_line

    @staticmethod
    def validate_paragraphs(text: str, records: List[Dict]) -> None:
        previous_end = -1
        for position, record in enumerate(records):
            missing = ParagraphValidator.REQUIRED_FIELDS - set(record.keys())
            if missing:
                raise ValueError(f"Paragraph {record.get('index')} missing fields: {missing}")

            index = record["index"]
            if index != position:
                raise ValueError(f"Paragraph index out of order: expected {position}, got {index}")

            start, end = int(record["start"]), int(record["end"])
            if not 0 <= start < end <= len(text):
                raise ValueError(f"Paragraph {index} has invalid offsets: {start}..{end}")
            if start <= previous_end:
                raise ValueError(f"Paragraph {index} overlaps or precedes paragraph {index - 1}")
            previous_end = end

            body = record["text"]
            if body != text[start:end]:
                raise ValueError(f"Paragraph {index} text does not match source offsets")
            if record["length"] != len(body):
                raise ValueError(f"Paragraph {index} length mismatch: {record['length']} != {len(body)}")

            lines = body.split("\n")
            if record["line_count"] != len(lines):
                raise ValueError(f"Paragraph {index} line count mismatch")
            for line in lines:
                if is_blank_text(line):
                    raise ValueError(f"Paragraph {index} contains a blank line")

            if not ParagraphValidator._on_line_boundary(text, start, end):
                raise ValueError(f"Paragraph {index} does not fall on line boundaries")

    @staticmethod
    def validate_reconstruction(text: str, segments: Sequence[Segment]) -> None:
        rebuilt = "".join(segment.text for segment in segments)
        if rebuilt != text:
            raise ValueError(
                f"Segments do not reconstruct the text: {len(rebuilt)} chars vs {len(text)}"
            )

        previous_kind = None
        for segment in segments:
            if segment.kind not in (PARAGRAPH, SEPARATOR):
                raise ValueError(f"Unknown segment kind: {segment.kind}")
            if segment.kind == previous_kind:
                raise ValueError(f"Adjacent {segment.kind} segments at offset {segment.start}")
            if segment.kind == SEPARATOR and not is_blank_text(segment.text):
                raise ValueError(f"Separator at offset {segment.start} contains text")
            previous_kind = segment.kind

    @staticmethod
    def log_stats(records: List[Dict]) -> None:
        if not records:
            return
        lengths = [r.get("length", 0) for r in records]
        line_counts = [r.get("line_count", 1) for r in records]
        multi_line = sum(1 for count in line_counts if count > 1)
        logger.warning(
            "Paragraph stats: paragraphs=%s, lines=%s, multi_line=%s, "
            "longest=%s chars / %s lines, avg=%.1f chars",
            len(records),
            sum(line_counts),
            multi_line,
            max(lengths),
            max(line_counts),
            sum(lengths) / len(lengths),
        )

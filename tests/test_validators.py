"""Tests for paragraph record and segment validation."""

import logging

import pytest

from segmentation.paragraph_splitter import PARAGRAPH, SEPARATOR, ParagraphSplitter, Segment
from segmentation.validators import ParagraphValidator

TEXT = "intro\n\nbody line one\r\nbody line two\n \nlast\r"


@pytest.fixture
def records():
    return ParagraphSplitter().split_section_into_paragraphs(TEXT)


def test_valid_records_pass(records):
    ParagraphValidator.validate_paragraphs(TEXT, records)


def test_missing_field(records):
    del records[0]["line_count"]
    with pytest.raises(ValueError, match="missing fields"):
        ParagraphValidator.validate_paragraphs(TEXT, records)


def test_out_of_order_index(records):
    records[0], records[1] = records[1], records[0]
    with pytest.raises(ValueError, match="out of order"):
        ParagraphValidator.validate_paragraphs(TEXT, records)


def test_overlapping_records(records):
    records[1]["start"] = records[0]["start"]
    with pytest.raises(ValueError, match="overlaps"):
        ParagraphValidator.validate_paragraphs(TEXT, records)


def test_text_mismatch(records):
    records[2]["text"] = "other"
    with pytest.raises(ValueError, match="does not match"):
        ParagraphValidator.validate_paragraphs(TEXT, records)


def test_truncated_line_is_rejected():
    text = "hello world"
    record = {"index": 0, "text": "hello", "start": 0, "end": 5, "length": 5, "line_count": 1}
    with pytest.raises(ValueError, match="line boundaries"):
        ParagraphValidator.validate_paragraphs(text, [record])


def test_blank_line_inside_record_is_rejected():
    text = "a\n \nb"
    record = {"index": 0, "text": text, "start": 0, "end": 5, "length": 5, "line_count": 3}
    with pytest.raises(ValueError, match="blank line"):
        ParagraphValidator.validate_paragraphs(text, [record])


def test_reconstruction_passes_for_splitter_segments():
    splitter = ParagraphSplitter()
    ParagraphValidator.validate_reconstruction(TEXT, splitter.segments(TEXT))


def test_reconstruction_detects_missing_text():
    segments = [Segment(PARAGRAPH, 0, 5, "intro")]
    with pytest.raises(ValueError, match="do not reconstruct"):
        ParagraphValidator.validate_reconstruction("intro\n", segments)


def test_reconstruction_detects_adjacent_paragraphs():
    segments = [Segment(PARAGRAPH, 0, 1, "a"), Segment(PARAGRAPH, 1, 2, "b")]
    with pytest.raises(ValueError, match="Adjacent"):
        ParagraphValidator.validate_reconstruction("ab", segments)


def test_reconstruction_detects_text_in_separator():
    segments = [Segment(PARAGRAPH, 0, 1, "a"), Segment(SEPARATOR, 1, 3, "\nb")]
    with pytest.raises(ValueError, match="contains text"):
        ParagraphValidator.validate_reconstruction("a\nb", segments)


def test_log_stats(records, caplog):
    with caplog.at_level(logging.WARNING):
        ParagraphValidator.log_stats(records)
    assert "paragraphs=3, lines=4, multi_line=1" in caplog.text
    assert "/ 2 lines" in caplog.text


def test_log_stats_empty(caplog):
    ParagraphValidator.log_stats([])
    assert caplog.text == ""

"""
Line Producer Module

Double-ended line source over a text buffer.
Lines are reported as offset pairs into the buffer, terminators excluded.
"""

from dataclasses import dataclass
from typing import Optional, Tuple
import logging

logger = logging.getLogger(__name__)

# Unicode White_Space property. Narrower than str.isspace(), which also
# accepts the U+001C..U+001F separators.
WHITESPACE = "".join(
    chr(code_point)
    for code_point in (
        0x0009, 0x000A, 0x000B, 0x000C, 0x000D, 0x0020, 0x0085, 0x00A0,
        0x1680, 0x2000, 0x2001, 0x2002, 0x2003, 0x2004, 0x2005, 0x2006,
        0x2007, 0x2008, 0x2009, 0x200A, 0x2028, 0x2029, 0x202F, 0x205F,
        0x3000,
    )
)


@dataclass(frozen=True)
class Line:
    start: int
    end: int

    def __len__(self) -> int:
        return self.end - self.start


def is_blank_text(text: str) -> bool:
    """True if text is empty after trimming Unicode whitespace."""
    return not text.strip(WHITESPACE)


class LineProducer:
    """
    Yield the lines of a text from the front and from the back.

    Only "\\n" terminates a line, and a "\\r" directly before it belongs to
    the terminator. A lone "\\r" is line content. The last line needs no
    terminator, and a trailing terminator does not open an empty line.
    """

    def __init__(self, text: str):
        self.text = text
        # Unconsumed region [front, back), terminators included
        self._front = 0
        self._back = len(text)

    @property
    def remaining(self) -> int:
        return self._back - self._front

    def _content(self, start: int, end: int) -> Line:
        """Strip the terminator from the raw segment [start, end)."""
        if end > start and self.text[end - 1] == "\n":
            end -= 1
            if end > start and self.text[end - 1] == "\r":
                end -= 1
        return Line(start, end)

    def next(self) -> Optional[Line]:
        if self._front >= self._back:
            return None

        start = self._front
        newline = self.text.find("\n", start, self._back)
        end = self._back if newline == -1 else newline + 1
        self._front = end
        return self._content(start, end)

    def next_back(self) -> Optional[Line]:
        if self._front >= self._back:
            return None

        end = self._back
        # A terminator at the very end belongs to the last line
        search_end = end - 1 if self.text[end - 1] == "\n" else end
        newline = self.text.rfind("\n", self._front, search_end)
        start = self._front if newline == -1 else newline + 1
        self._back = start
        return self._content(start, end)

    def text_of(self, line: Line) -> str:
        return self.text[line.start:line.end]

    def is_blank(self, line: Line) -> bool:
        return is_blank_text(self.text[line.start:line.end])

    def size_hint(self) -> Tuple[int, Optional[int]]:
        """
        Bounds on the number of lines left.

        Every line but an unterminated last one takes at least one character,
        so the remaining character count caps the line count.
        """
        remaining = self.remaining
        return (1 if remaining else 0, remaining)

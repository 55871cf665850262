"""Offset to line/column mapping."""

from __future__ import annotations

from bisect import bisect_left


def to_line_column(buffer: str, offset: int) -> tuple[int, int]:
    """Map a character offset to a 1-based ``(line, column)`` pair.

    The line is one plus the number of newlines strictly before ``offset``. An
    offset pointing at a newline belongs to the line that newline terminates,
    so its column is that line's length plus one.
    """
    if offset < 0 or offset > len(buffer):
        raise ValueError(f"offset {offset} outside buffer of length {len(buffer)}")
    line = buffer.count("\n", 0, offset) + 1
    line_start = buffer.rfind("\n", 0, offset) + 1
    return (line, offset - line_start + 1)


class LineIndex:
    """Precomputed newline offsets for repeated O(log n) lookups."""

    def __init__(self, buffer: str) -> None:
        self._buffer = buffer
        self._newlines = [pos for pos, char in enumerate(buffer) if char == "\n"]

    @property
    def line_count(self) -> int:
        return len(self._newlines) + 1

    def locate(self, offset: int) -> tuple[int, int]:
        """Same contract as :func:`to_line_column`."""
        if offset < 0 or offset > len(self._buffer):
            raise ValueError(f"offset {offset} outside buffer of length {len(self._buffer)}")
        preceding = bisect_left(self._newlines, offset)
        line_start = self._newlines[preceding - 1] + 1 if preceding else 0
        return (preceding + 1, offset - line_start + 1)

    def line_text(self, line: int) -> str:
        """Return the text of a 1-based line without its newline."""
        if line < 1 or line > self.line_count:
            raise ValueError(f"line {line} outside 1..{self.line_count}")
        start = self._newlines[line - 2] + 1 if line > 1 else 0
        end = self._newlines[line - 1] if line <= len(self._newlines) else len(self._buffer)
        return self._buffer[start:end]

    def line_offset(self, line: int) -> int:
        """Return the offset of the first character of a 1-based line."""
        if line < 1 or line > self.line_count:
            raise ValueError(f"line {line} outside 1..{self.line_count}")
        return self._newlines[line - 2] + 1 if line > 1 else 0

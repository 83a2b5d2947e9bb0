from __future__ import annotations

from bisect import bisect_right
from dataclasses import dataclass, field


@dataclass(frozen=True)
class SourceBuffer:
    text: str
    name: str = "(string)"
    _line_starts: tuple[int, ...] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        starts = [0]
        for index, char in enumerate(self.text):
            if char == "\n":
                starts.append(index + 1)
        object.__setattr__(self, "_line_starts", tuple(starts))

    def line_of(self, offset: int) -> int:
        """1-based line number containing ``offset``."""
        return bisect_right(self._line_starts, offset)

    def line_start(self, line: int) -> int:
        return self._line_starts[line - 1]

    def column_of(self, offset: int) -> int:
        return offset - self.line_start(self.line_of(offset))

    def line_text(self, line: int) -> str:
        start = self.line_start(line)
        end = self.text.find("\n", start)
        if end < 0:
            end = len(self.text)
        return self.text[start:end]

    def line_indentation(self, line: int) -> str:
        text = self.line_text(line)
        return text[: len(text) - len(text.lstrip(" \t"))]

    def span(self, start: int, end: int) -> SourceSpan:
        return SourceSpan(buffer=self, start=start, end=end)


@dataclass(frozen=True)
class SourceSpan:
    buffer: SourceBuffer = field(repr=False, compare=False)
    start: int
    end: int

    @property
    def text(self) -> str:
        return self.buffer.text[self.start : self.end]

    @property
    def first_line(self) -> int:
        return self.buffer.line_of(self.start)

    @property
    def last_line(self) -> int:
        return self.buffer.line_of(max(self.start, self.end - 1))

    @property
    def column(self) -> int:
        return self.buffer.column_of(self.start)

    @property
    def single_line(self) -> bool:
        return self.first_line == self.last_line

    def ends_line(self) -> bool:
        """True when only whitespace follows the span on its last line."""
        line = self.last_line
        line_end = self.buffer.line_start(line) + len(self.buffer.line_text(line))
        return not self.buffer.text[self.end : line_end].strip()

    def join(self, other: SourceSpan) -> SourceSpan:
        return SourceSpan(
            buffer=self.buffer,
            start=min(self.start, other.start),
            end=max(self.end, other.end),
        )

    def contains(self, other: SourceSpan) -> bool:
        return self.start <= other.start and other.end <= self.end

    def overlaps(self, other: SourceSpan) -> bool:
        return self.start < other.end and other.start < self.end


@dataclass(frozen=True)
class TextEdit:
    span: SourceSpan
    replacement: str

    @property
    def start(self) -> int:
        return self.span.start

    @property
    def end(self) -> int:
        return self.span.end

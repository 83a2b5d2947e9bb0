from __future__ import annotations

from dataclasses import dataclass

from rbcanon.source import SourceSpan, TextEdit


@dataclass(frozen=True)
class Diagnostic:
    rule: str
    message: str
    span: SourceSpan
    edit: TextEdit | None = None

    @property
    def line(self) -> int:
        return self.span.first_line

    @property
    def column(self) -> int:
        return self.span.column

    def render(self, path: str, *, corrected: bool = False) -> str:
        suffix = " [Corrected]" if corrected else ""
        return f"{path}:{self.line}:{self.column + 1}: {self.rule}: {self.message}{suffix}"

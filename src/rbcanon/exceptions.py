"""Exceptions raised at the edges of rbcanon.

Rule guards never raise: an inapplicable construct is simply skipped. These
exceptions only surface where source enters (parsing) or edits leave
(application to a buffer).
"""

from __future__ import annotations

from rbcanon.source import TextEdit


class RbCanonError(Exception):
    """Base class for rbcanon failures."""


class GrammarUnavailableError(RbCanonError):
    """The tree-sitter Ruby grammar could not be loaded."""


class ParseError(RbCanonError):
    def __init__(self, message: str, *, path: str = "", line: int = 0, column: int = 0):
        location = f"{path}:{line}:{column}" if path else f"{line}:{column}"
        super().__init__(f"{location}: {message}")
        self.path = path
        self.line = line
        self.column = column


class EditConflictError(RbCanonError):
    def __init__(self, first: TextEdit, second: TextEdit):
        super().__init__(
            "overlapping edits "
            f"[{first.start}, {first.end}) and [{second.start}, {second.end})"
        )
        self.first = first
        self.second = second

"""Narrow view of the Ruby syntax tree consumed by the ordering rules."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property

from rbcanon.source import SourceBuffer, SourceSpan


class NodeKind(str, Enum):
    ASSOCIATIVE_LITERAL = "associative_literal"
    CALL = "call"
    DEFINITION = "definition"
    PARAMETER = "parameter"
    ARGUMENT = "argument"


class EntryKind(str, Enum):
    PAIR = "pair"
    DOUBLE_SPLAT = "double_splat"
    SYMBOL = "symbol"
    SPLAT = "splat"
    BLOCK_PASS = "block_pass"
    POSITIONAL = "positional"
    KEYWORD_PARAMETER = "keyword_parameter"
    KEYWORD_REST = "keyword_rest"
    OTHER_PARAMETER = "other_parameter"


class KeyForm(str, Enum):
    LABEL = "label"  # key:
    QUOTED_LABEL = "quoted_label"  # "key":
    ROCKET_SYMBOL = "rocket_symbol"  # :key =>
    OTHER = "other"


@dataclass(frozen=True)
class Entry:
    kind: EntryKind
    span: SourceSpan
    key: str | None = None
    key_form: KeyForm = KeyForm.OTHER
    value_span: SourceSpan | None = None
    value_local: str | None = None

    @property
    def text(self) -> str:
        return self.span.text

    @property
    def line(self) -> int:
        return self.span.first_line


@dataclass(frozen=True)
class CallInfo:
    """Facts about the call a literal is passed to."""

    name: str
    has_receiver: bool
    has_block: bool
    in_modifier: bool
    parenthesized: bool = True


@dataclass(frozen=True)
class AssociativeLiteral:
    span: SourceSpan
    braced: bool
    entries: tuple[Entry, ...]
    call: CallInfo | None = None
    enclosing_callee: str | None = None
    ancestors: tuple[AssociativeLiteral, ...] = field(default=(), repr=False)

    kind = NodeKind.ASSOCIATIVE_LITERAL

    @property
    def pairs(self) -> tuple[Entry, ...]:
        return tuple(entry for entry in self.entries if entry.kind is EntryKind.PAIR)

    @property
    def interior(self) -> SourceSpan:
        if not self.braced:
            return self.span
        return self.span.buffer.span(self.span.start + 1, self.span.end - 1)


@dataclass(frozen=True)
class Call:
    span: SourceSpan
    name: str
    selector: SourceSpan
    has_receiver: bool
    arguments: tuple[Entry, ...]
    keyword_literal: AssociativeLiteral | None = None
    has_block: bool = False
    in_modifier: bool = False
    ancestors: tuple[Call, ...] = field(default=(), repr=False)

    kind = NodeKind.CALL


@dataclass(frozen=True)
class Definition:
    span: SourceSpan
    name: str
    keyword: SourceSpan
    parameters: tuple[Entry, ...]
    singleton: bool = False
    ancestors: tuple[Definition, ...] = field(default=(), repr=False)

    kind = NodeKind.DEFINITION

    @property
    def keyword_parameters(self) -> tuple[Entry, ...]:
        return tuple(
            entry
            for entry in self.parameters
            if entry.kind is EntryKind.KEYWORD_PARAMETER
        )


@dataclass(frozen=True)
class ParsedSource:
    buffer: SourceBuffer
    literals: tuple[AssociativeLiteral, ...] = ()
    calls: tuple[Call, ...] = ()
    definitions: tuple[Definition, ...] = ()
    comments: tuple[SourceSpan, ...] = ()

    @cached_property
    def comment_lines(self) -> frozenset[int]:
        return frozenset(comment.first_line for comment in self.comments)

    def nodes(self, kind: NodeKind) -> tuple[object, ...]:
        if kind is NodeKind.ASSOCIATIVE_LITERAL:
            return self.literals
        if kind is NodeKind.CALL:
            return self.calls
        if kind is NodeKind.DEFINITION:
            return self.definitions
        return ()

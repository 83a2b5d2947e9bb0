"""Layout-preserving reconstruction of reordered entry sequences.

Entry texts are copied verbatim and only relocated. Single-line ranges are
rejoined with ``", "``; multi-line ranges put one entry per line, indented
from the column of the first original entry. Comments inside a rewritten
range travel with the entry they belong to.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import re
from typing import Sequence

from rbcanon.nodes import AssociativeLiteral, Entry
from rbcanon.source import SourceSpan, TextEdit

_NON_SPACE_RE = re.compile(r"\S")
_TRAILING_COMMA_RE = re.compile(r"\A\s*,")


@dataclass
class _Item:
    text: str
    leading: list[str] = field(default_factory=list)
    trailing: str | None = None


@dataclass
class _Attached:
    leading: dict[int, list[str]] = field(default_factory=dict)
    trailing: dict[int, str] = field(default_factory=dict)
    head: list[str] = field(default_factory=list)
    tail: list[str] = field(default_factory=list)


def column_indent(span: SourceSpan) -> str:
    """Whitespace reaching the column of ``span`` on its first line."""
    buffer = span.buffer
    prefix = buffer.text[buffer.line_start(span.first_line) : span.start]
    return _NON_SPACE_RE.sub(" ", prefix)


def _attach_comments(
    entries: Sequence[Entry], comments: Sequence[SourceSpan], region: SourceSpan
) -> _Attached:
    attached = _Attached()
    for comment in comments:
        if not region.contains(comment):
            continue
        if any(entry.span.contains(comment) for entry in entries):
            continue
        owner = None
        for index, entry in enumerate(entries):
            if entry.span.end <= comment.start and entry.span.last_line == comment.first_line:
                owner = index
        if owner is not None:
            attached.trailing[owner] = comment.text
            continue
        following = next(
            (index for index, entry in enumerate(entries) if entry.span.start > comment.start),
            None,
        )
        if following is None:
            attached.tail.append(comment.text)
        elif following == 0 and comment.first_line == region.first_line:
            attached.head.append(comment.text)
        else:
            attached.leading.setdefault(following, []).append(comment.text)
    return attached


def _items(
    slots: Sequence[Entry], placed: Sequence[Entry], attached: _Attached
) -> list[_Item]:
    index_of = {id(entry): index for index, entry in enumerate(slots)}
    items: list[_Item] = []
    for entry in placed:
        origin = index_of[id(entry)]
        items.append(
            _Item(
                text=entry.text,
                leading=list(attached.leading.get(origin, [])),
                trailing=attached.trailing.get(origin),
            )
        )
    return items


def _place(slots: Sequence[Entry], participants: Sequence[Entry], order: Sequence[int]) -> list[Entry]:
    """Fill participant slots in canonical order; other slots stay put."""
    members = {id(entry) for entry in participants}
    reordered = iter([participants[index] for index in order])
    return [next(reordered) if id(entry) in members else entry for entry in slots]


def rewrite_slots(
    slots: Sequence[Entry],
    participants: Sequence[Entry],
    order: Sequence[int],
    comments: Sequence[SourceSpan] = (),
) -> TextEdit:
    """Rewrite the range from the first to the last slot.

    ``slots`` holds every entry inside that range, participating or not;
    only ``participants`` are permuted.
    """
    region = slots[0].span.join(slots[-1].span)
    placed = _place(slots, participants, order)
    if region.single_line:
        return TextEdit(region, ", ".join(entry.text for entry in placed))

    indent = column_indent(slots[0].span)
    items = _items(slots, placed, _attach_comments(slots, comments, region))
    pieces: list[str] = []
    for position, item in enumerate(items):
        last = position == len(items) - 1
        if last and item.trailing is not None:
            # Text after the range continues this line; keep the comment above.
            item.leading.append(item.trailing)
            item.trailing = None
        prefix = "" if position == 0 else indent
        for comment in item.leading:
            pieces.append(prefix + comment)
            prefix = indent
        line = prefix + item.text + ("" if last else ",")
        if item.trailing is not None:
            line += " " + item.trailing
        pieces.append(line)
    return TextEdit(region, "\n".join(pieces))


def has_trailing_comma(literal: AssociativeLiteral, entries: Sequence[Entry]) -> bool:
    buffer = literal.span.buffer
    close = literal.span.end - 1 if literal.braced else literal.span.end
    after = buffer.text[entries[-1].span.end : close]
    return _TRAILING_COMMA_RE.match(after) is not None


def rewrite_braced(
    literal: AssociativeLiteral,
    entries: Sequence[Entry],
    order: Sequence[int],
    comments: Sequence[SourceSpan] = (),
) -> TextEdit:
    """Rebuild a multi-line braced literal with one entry per line."""
    buffer = literal.span.buffer
    base = buffer.line_indentation(literal.span.first_line)
    indent = column_indent(entries[0].span)
    trailing_comma = has_trailing_comma(literal, entries)
    attached = _attach_comments(entries, comments, literal.interior)
    items = _items(entries, [entries[index] for index in order], attached)

    lines = ["{"]
    lines.extend(indent + comment for comment in attached.head)
    for position, item in enumerate(items):
        separator = "," if position < len(items) - 1 or trailing_comma else ""
        lines.extend(indent + comment for comment in item.leading)
        line = indent + item.text + separator
        if item.trailing is not None:
            line += " " + item.trailing
        lines.append(line)
    lines.extend(indent + comment for comment in attached.tail)
    lines.append(base + "}")
    return TextEdit(literal.span, "\n".join(lines))


def rewrite_literal(
    literal: AssociativeLiteral,
    entries: Sequence[Entry],
    order: Sequence[int],
    comments: Sequence[SourceSpan] = (),
) -> TextEdit:
    if literal.braced and not literal.span.single_line:
        return rewrite_braced(literal, entries, order, comments)
    return rewrite_slots(entries, entries, order, comments)


def shorthand_edit(entry: Entry, name: str) -> TextEdit:
    return TextEdit(entry.span, f"{name}:")

from __future__ import annotations

import re

from rbcanon.nodes import Entry, EntryKind, KeyForm

_SHORTHAND_RE = re.compile(r"\A\w+:\Z", re.ASCII)

_KEYED_KINDS = frozenset({EntryKind.PAIR, EntryKind.SYMBOL, EntryKind.KEYWORD_PARAMETER})


def key(entry: Entry) -> str | None:
    """Comparison key of an entry, or ``None`` when it has no symbolic name."""
    if entry.kind not in _KEYED_KINDS:
        return None
    if entry.kind is EntryKind.PAIR and entry.key_form is KeyForm.OTHER:
        return None
    return entry.key


def is_shorthand(entry: Entry) -> bool:
    return _SHORTHAND_RE.match(entry.text) is not None

"""Eligibility checks deciding whether an entry sequence may be reordered.

Every check is silent: an ineligible construct yields ``None`` and is left
alone. Nothing here raises.
"""

from __future__ import annotations

from typing import Callable, Iterable, Sequence, TypeVar

from rbcanon.config import RuleConfig
from rbcanon.keys import key
from rbcanon.nodes import AssociativeLiteral, Call, Definition, Entry, EntryKind
from rbcanon.ordering import OrderingPolicy
from rbcanon.source import SourceSpan

NodeT = TypeVar("NodeT", AssociativeLiteral, Call, Definition)

_REST_KINDS = frozenset({EntryKind.DOUBLE_SPLAT, EntryKind.KEYWORD_REST})


def has_rest(entries: Iterable[Entry]) -> bool:
    return any(entry.kind in _REST_KINDS for entry in entries)


def all_keyed(entries: Sequence[Entry]) -> bool:
    return all(key(entry) is not None for entry in entries)


def distinct_keys(entries: Sequence[Entry]) -> bool:
    names = [key(entry) for entry in entries]
    return len(names) == len(set(names))


def _reorderable(entries: Sequence[Entry]) -> bool:
    return len(entries) >= 2 and all_keyed(entries) and distinct_keys(entries)


def entry_range(entries: Sequence[Entry]) -> SourceSpan:
    return entries[0].span.join(entries[-1].span)


def literal_entries(
    literal: AssociativeLiteral, config: RuleConfig
) -> tuple[Entry, ...] | None:
    if has_rest(literal.entries):
        return None
    pairs = literal.pairs
    if not _reorderable(pairs):
        return None
    if literal.enclosing_callee is not None and literal.enclosing_callee in config.exclude_methods:
        return None
    return pairs


def _dsl_call(call: Call, config: RuleConfig) -> bool:
    return not call.has_receiver and call.name in config.methods


def keyword_arguments(call: Call, config: RuleConfig) -> tuple[Entry, ...] | None:
    if not _dsl_call(call, config):
        return None
    literal = call.keyword_literal
    if literal is None or has_rest(literal.entries):
        return None
    pairs = literal.pairs
    if not _reorderable(pairs):
        return None
    return pairs


def symbol_arguments(call: Call, config: RuleConfig) -> tuple[Entry, ...] | None:
    if not _dsl_call(call, config):
        return None
    if any(entry.kind is EntryKind.SPLAT for entry in call.arguments):
        return None
    symbols = tuple(entry for entry in call.arguments if entry.kind is EntryKind.SYMBOL)
    if not _reorderable(symbols):
        return None
    return symbols


def keyword_parameters(definition: Definition) -> tuple[Entry, ...] | None:
    if has_rest(definition.parameters):
        return None
    parameters = definition.keyword_parameters
    if not _reorderable(parameters):
        return None
    # Hand-formatted multi-line signatures are left alone.
    if parameters[0].span.first_line != parameters[-1].span.last_line:
        return None
    return parameters


def flagged_range(
    entries: Sequence[Entry] | None, policy: OrderingPolicy
) -> SourceSpan | None:
    """Range an offense would rewrite, or ``None`` when already canonical."""
    if entries is None or policy.is_canonical(entries):
        return None
    return entry_range(entries)


def nested_in_flagged(
    node: NodeT,
    ancestors: Iterable[NodeT],
    rewritten_range: Callable[[NodeT], SourceSpan | None],
) -> bool:
    """True when an enclosing construct of the same kind will rewrite ``node``."""
    for ancestor in ancestors:
        span = rewritten_range(ancestor)
        if span is not None and span.contains(node.span):
            return True
    return False

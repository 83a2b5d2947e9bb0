from __future__ import annotations

import logging

from rbcanon.config import KEYWORD_SHORTHAND
from rbcanon.diagnostics import Diagnostic
from rbcanon.keys import is_shorthand
from rbcanon.nodes import AssociativeLiteral, Entry, KeyForm, NodeKind, ParsedSource
from rbcanon.rewrite import shorthand_edit
from rbcanon.rules.base import Rule

logger = logging.getLogger(__name__)

MSG = "Use Ruby 3 keyword shorthand `{name}:` instead of `{name}: {name}`."


def _last_pair(literal: AssociativeLiteral, pair: Entry) -> bool:
    pairs = literal.pairs
    return bool(pairs) and pairs[-1] is pair


class KeywordShorthand(Rule):
    """``name: name`` becomes ``name:`` when ``name`` is a local variable.

    Only symbol keys written as labels are considered. A pair is left alone
    when a comment shares its line, or when it is the last pair passed to a
    call that sits in a trailing ``if``/``unless``/``while``/``until``
    modifier or that takes a block. It is also left alone when it ends the
    line as the last argument of a call written without parentheses.
    """

    name = KEYWORD_SHORTHAND
    message = MSG
    node_kind = NodeKind.ASSOCIATIVE_LITERAL

    def _candidate(self, literal: AssociativeLiteral, pair: Entry, parsed: ParsedSource) -> bool:
        if pair.key_form is not KeyForm.LABEL or pair.key is None:
            return False
        if pair.value_local is None or pair.value_local != pair.key:
            return False
        if is_shorthand(pair):
            return False
        call = literal.call
        if call is not None and _last_pair(literal, pair):
            if call.in_modifier or call.has_block:
                logger.debug("skip shorthand %s: last argument before modifier or block", pair.key)
                return False
            if not call.parenthesized and not literal.braced and pair.span.ends_line():
                # `foo name:` followed by a newline would take the next line as its value.
                logger.debug("skip shorthand %s: last argument of a call without parentheses", pair.key)
                return False
        if pair.line in parsed.comment_lines:
            return False
        return True

    def visit(
        self, node: AssociativeLiteral, parsed: ParsedSource, *, autocorrect: bool = True
    ) -> list[Diagnostic]:
        diagnostics: list[Diagnostic] = []
        for pair in node.pairs:
            if not self._candidate(node, pair, parsed):
                continue
            name = pair.key or ""
            diagnostics.append(
                Diagnostic(
                    self.name,
                    MSG.format(name=name),
                    pair.span,
                    shorthand_edit(pair, name) if autocorrect else None,
                )
            )
        return diagnostics

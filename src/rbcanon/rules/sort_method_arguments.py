from __future__ import annotations

import logging

from rbcanon.config import SORT_METHOD_ARGUMENTS
from rbcanon.diagnostics import Diagnostic
from rbcanon.guards import flagged_range, nested_in_flagged, symbol_arguments
from rbcanon.nodes import Call, NodeKind, ParsedSource
from rbcanon.ordering import ALPHABETICAL
from rbcanon.rewrite import rewrite_slots
from rbcanon.rules.base import Rule
from rbcanon.source import SourceSpan

logger = logging.getLogger(__name__)


class SortMethodArguments(Rule):
    """Symbol arguments of calls such as ``attr_reader`` or ``delegate``.

    Only the symbols move; any other argument keeps its position.
    """

    name = SORT_METHOD_ARGUMENTS
    message = "Sort symbol arguments alphabetically."
    node_kind = NodeKind.CALL

    def _rewritten_range(self, call: Call) -> SourceSpan | None:
        return flagged_range(symbol_arguments(call, self.config), ALPHABETICAL)

    def visit(
        self, node: Call, parsed: ParsedSource, *, autocorrect: bool = True
    ) -> list[Diagnostic]:
        symbols = symbol_arguments(node, self.config)
        if symbols is None or ALPHABETICAL.is_canonical(symbols):
            return []
        if nested_in_flagged(node, node.ancestors, self._rewritten_range):
            logger.debug("skip %s at %d: enclosing call is rewritten", node.name, node.span.start)
            return []
        edit = None
        if autocorrect:
            first, last = symbols[0].span, symbols[-1].span
            slots = [
                entry
                for entry in node.arguments
                if first.start <= entry.span.start and entry.span.end <= last.end
            ]
            edit = rewrite_slots(
                slots, symbols, ALPHABETICAL.canonical_order(symbols), parsed.comments
            )
        return [Diagnostic(self.name, self.message, node.selector, edit)]

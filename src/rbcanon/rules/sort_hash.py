from __future__ import annotations

import logging

from rbcanon.config import SORT_HASH, RuleConfig
from rbcanon.diagnostics import Diagnostic
from rbcanon.guards import flagged_range, literal_entries, nested_in_flagged
from rbcanon.nodes import AssociativeLiteral, NodeKind, ParsedSource
from rbcanon.ordering import OrderingPolicy
from rbcanon.rewrite import rewrite_literal
from rbcanon.rules.base import Rule
from rbcanon.source import SourceSpan

logger = logging.getLogger(__name__)


class SortHash(Rule):
    """Hash literals list their symbol keys alphabetically.

    Covers braced literals and the bare keyword tail of a call. Literals
    passed to a method listed in ``ExcludeMethods`` are skipped, as are
    literals nested in another literal that is itself about to be rewritten.
    """

    name = SORT_HASH
    message = "Sort hash keys alphabetically."
    node_kind = NodeKind.ASSOCIATIVE_LITERAL

    def __init__(self, config: RuleConfig | None = None) -> None:
        super().__init__(config)
        self.policy = OrderingPolicy(shorthands_first=self.config.shorthands_first)

    def _rewritten_range(self, literal: AssociativeLiteral) -> SourceSpan | None:
        return flagged_range(literal_entries(literal, self.config), self.policy)

    def visit(
        self, node: AssociativeLiteral, parsed: ParsedSource, *, autocorrect: bool = True
    ) -> list[Diagnostic]:
        entries = literal_entries(node, self.config)
        if entries is None or self.policy.is_canonical(entries):
            return []
        if nested_in_flagged(node, node.ancestors, self._rewritten_range):
            logger.debug("skip hash at %d: enclosing hash is rewritten", node.span.start)
            return []
        edit = None
        if autocorrect:
            order = self.policy.canonical_order(entries)
            edit = rewrite_literal(node, entries, order, parsed.comments)
        return [Diagnostic(self.name, self.message, node.span, edit)]

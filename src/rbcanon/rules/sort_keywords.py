from __future__ import annotations

import logging

from rbcanon.config import SORT_KEYWORDS, RuleConfig
from rbcanon.diagnostics import Diagnostic
from rbcanon.guards import flagged_range, keyword_arguments, nested_in_flagged
from rbcanon.nodes import Call, NodeKind, ParsedSource
from rbcanon.ordering import OrderingPolicy
from rbcanon.rewrite import rewrite_slots
from rbcanon.rules.base import Rule
from rbcanon.source import SourceSpan

logger = logging.getLogger(__name__)


class SortKeywords(Rule):
    """Keyword arguments of DSL calls (``Methods``) are sorted alphabetically."""

    name = SORT_KEYWORDS
    message = "Sort keyword arguments alphabetically."
    node_kind = NodeKind.CALL

    def __init__(self, config: RuleConfig | None = None) -> None:
        super().__init__(config)
        self.policy = OrderingPolicy(shorthands_first=self.config.shorthands_first)

    def _rewritten_range(self, call: Call) -> SourceSpan | None:
        return flagged_range(keyword_arguments(call, self.config), self.policy)

    def visit(
        self, node: Call, parsed: ParsedSource, *, autocorrect: bool = True
    ) -> list[Diagnostic]:
        pairs = keyword_arguments(node, self.config)
        if pairs is None or self.policy.is_canonical(pairs):
            return []
        if nested_in_flagged(node, node.ancestors, self._rewritten_range):
            logger.debug("skip %s at %d: enclosing call is rewritten", node.name, node.span.start)
            return []
        edit = None
        if autocorrect:
            edit = rewrite_slots(pairs, pairs, self.policy.canonical_order(pairs), parsed.comments)
        return [Diagnostic(self.name, self.message, node.span, edit)]

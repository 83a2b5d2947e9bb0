from __future__ import annotations

import logging

from rbcanon.config import SORT_METHOD_DEFINITION
from rbcanon.diagnostics import Diagnostic
from rbcanon.guards import flagged_range, keyword_parameters, nested_in_flagged
from rbcanon.nodes import Definition, NodeKind, ParsedSource
from rbcanon.ordering import ALPHABETICAL
from rbcanon.rewrite import rewrite_slots
from rbcanon.rules.base import Rule
from rbcanon.source import SourceSpan

logger = logging.getLogger(__name__)


class SortMethodDefinition(Rule):
    """Keyword parameters of ``def`` and ``def self.`` are sorted.

    Signatures whose keyword parameters span several lines are ignored, and
    so is any signature taking ``**rest``.
    """

    name = SORT_METHOD_DEFINITION
    message = "Sort keyword arguments alphabetically."
    node_kind = NodeKind.DEFINITION

    def _rewritten_range(self, definition: Definition) -> SourceSpan | None:
        return flagged_range(keyword_parameters(definition), ALPHABETICAL)

    def visit(
        self, node: Definition, parsed: ParsedSource, *, autocorrect: bool = True
    ) -> list[Diagnostic]:
        parameters = keyword_parameters(node)
        if parameters is None or ALPHABETICAL.is_canonical(parameters):
            return []
        if nested_in_flagged(node, node.ancestors, self._rewritten_range):
            logger.debug("skip def %s: enclosing signature is rewritten", node.name)
            return []
        edit = None
        if autocorrect:
            edit = rewrite_slots(parameters, parameters, ALPHABETICAL.canonical_order(parameters))
        return [Diagnostic(self.name, self.message, node.keyword, edit)]

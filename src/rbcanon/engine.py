from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Sequence

from rbcanon.diagnostics import Diagnostic
from rbcanon.exceptions import EditConflictError
from rbcanon.ingest import parse_source
from rbcanon.nodes import NodeKind, ParsedSource
from rbcanon.rules import Rule
from rbcanon.source import TextEdit

logger = logging.getLogger(__name__)

DEFAULT_MAX_ITERATIONS = 10


@dataclass
class CorrectionResult:
    source: str
    corrected: list[Diagnostic] = field(default_factory=list)
    remaining: list[Diagnostic] = field(default_factory=list)
    iterations: int = 0

    @property
    def changed(self) -> bool:
        return bool(self.corrected)


def _walk(parsed: ParsedSource) -> Iterator[tuple[NodeKind, object]]:
    nodes: list[tuple[int, int, int, NodeKind, object]] = []
    for rank, kind in enumerate(
        (NodeKind.DEFINITION, NodeKind.CALL, NodeKind.ASSOCIATIVE_LITERAL)
    ):
        for node in parsed.nodes(kind):
            span = node.span  # type: ignore[attr-defined]
            nodes.append((span.start, -span.end, rank, kind, node))
    nodes.sort(key=lambda item: item[:3])
    for _start, _end, _rank, kind, node in nodes:
        yield kind, node


def _without_conflicts(diagnostics: Iterable[Diagnostic]) -> list[Diagnostic]:
    """Strip the edit of every diagnostic overlapping an earlier accepted edit."""
    accepted: list[TextEdit] = []
    kept: list[Diagnostic] = []
    for diagnostic in diagnostics:
        edit = diagnostic.edit
        if edit is not None and any(edit.span.overlaps(other.span) for other in accepted):
            logger.debug("%s: dropping overlapping edit at %d", diagnostic.rule, edit.start)
            diagnostic = Diagnostic(diagnostic.rule, diagnostic.message, diagnostic.span)
        elif edit is not None:
            accepted.append(edit)
        kept.append(diagnostic)
    return kept


def investigate(
    parsed: ParsedSource, rules: Sequence[Rule], *, autocorrect: bool = True
) -> list[Diagnostic]:
    """Run ``rules`` over every construct of ``parsed`` in source order.

    No two returned edits overlap. On a collision the edit of the earlier
    rule (then the earlier position) wins; the other diagnostic is kept
    without an edit.
    """
    by_kind: dict[NodeKind, list[Rule]] = {}
    for rule in rules:
        by_kind.setdefault(rule.node_kind, []).append(rule)
    found: dict[str, list[Diagnostic]] = {rule.name: [] for rule in rules}
    for kind, node in _walk(parsed):
        for rule in by_kind.get(kind, ()):
            found[rule.name].extend(rule.visit(node, parsed, autocorrect=autocorrect))

    diagnostics = _without_conflicts(
        diagnostic for rule in rules for diagnostic in found[rule.name]
    )
    diagnostics.sort(key=lambda item: (item.span.start, item.span.end))
    return diagnostics


def check_source(
    text: str,
    rules: Sequence[Rule],
    *,
    path: str | None = None,
    autocorrect: bool = True,
) -> list[Diagnostic]:
    return investigate(parse_source(text, path), rules, autocorrect=autocorrect)


def apply_edits(text: str, edits: Iterable[TextEdit]) -> str:
    """Apply non-overlapping ``edits`` to ``text`` in one step."""
    ordered = sorted(edits, key=lambda edit: (edit.start, edit.end))
    for previous, current in zip(ordered, ordered[1:]):
        if current.start < previous.end:
            raise EditConflictError(previous, current)
    pieces: list[str] = []
    cursor = 0
    for edit in ordered:
        pieces.append(text[cursor : edit.start])
        pieces.append(edit.replacement)
        cursor = edit.end
    pieces.append(text[cursor:])
    return "".join(pieces)


def autocorrect(
    text: str,
    rules: Sequence[Rule],
    *,
    path: str | None = None,
    max_iterations: int = DEFAULT_MAX_ITERATIONS,
) -> CorrectionResult:
    """Correct ``text`` until no rule proposes another edit.

    Each pass applies the conflict-free edits of one investigation and
    parses the result again, so edits held back by a collision land in a
    later pass.
    """
    result = CorrectionResult(source=text)
    current = text
    while result.iterations < max_iterations:
        diagnostics = check_source(current, rules, path=path)
        chosen = [item for item in diagnostics if item.edit is not None]
        if not chosen:
            result.remaining = diagnostics
            break
        result.iterations += 1
        current = apply_edits(current, [item.edit for item in chosen if item.edit is not None])
        result.corrected.extend(chosen)
        logger.debug(
            "%s: pass %d applied %d edits", path or "(string)", result.iterations, len(chosen)
        )
    else:
        logger.warning(
            "%s: stopped after %d correction passes", path or "(string)", max_iterations
        )
        result.remaining = check_source(current, rules, path=path, autocorrect=False)
    result.source = current
    return result

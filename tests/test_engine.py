from __future__ import annotations

import pytest

from rbcanon.config import (
    KEYWORD_SHORTHAND,
    SORT_KEYWORDS,
    SORT_METHOD_ARGUMENTS,
    CanonConfig,
    RuleConfig,
)
from rbcanon.engine import apply_edits, autocorrect, check_source
from rbcanon.exceptions import EditConflictError, ParseError
from rbcanon.rules import SortHash, build_rules
from rbcanon.source import SourceBuffer, TextEdit
from tests.rule_helpers import ruby


def _all_rules(*methods: str) -> list:
    dsl = RuleConfig(methods=frozenset(methods))
    return build_rules(
        CanonConfig(rules={SORT_KEYWORDS: dsl, SORT_METHOD_ARGUMENTS: dsl})
    )


def test_apply_edits_replaces_spans_in_one_step() -> None:
    buffer = SourceBuffer("abcdef")
    edits = [TextEdit(buffer.span(4, 6), "XY"), TextEdit(buffer.span(0, 1), "Z")]
    assert apply_edits(buffer.text, edits) == "ZbcdXY"


def test_apply_edits_rejects_overlaps() -> None:
    buffer = SourceBuffer("abcdef")
    edits = [TextEdit(buffer.span(0, 3), "x"), TextEdit(buffer.span(2, 4), "y")]
    with pytest.raises(EditConflictError):
        apply_edits(buffer.text, edits)


def test_diagnostics_are_reported_in_source_order() -> None:
    source = "attr_reader :b, :a\n{d: 1, c: 2}\ndef f(y:, x:); end\n"
    found = check_source(source, _all_rules("attr_reader"))
    assert [item.rule for item in found] == [
        "Canon/SortMethodArguments",
        "Canon/SortHash",
        "Canon/SortMethodDefinition",
    ]


def test_single_rule_never_emits_overlapping_edits() -> None:
    source = "{b: {d: {f: 1, e: 2}, c: 2}, a: 1}\n"
    found = check_source(source, [SortHash()])
    edits = [item.edit for item in found if item.edit is not None]
    apply_edits(source, edits)
    assert len(found) == 1


def test_autocorrect_resolves_nested_hashes_over_several_passes() -> None:
    source = "{b: {d: 1, c: 2}, a: 1}\n"
    result = autocorrect(source, [SortHash()])
    assert result.source == "{a: 1, b: {c: 2, d: 1}}\n"
    assert result.iterations == 2
    assert result.remaining == []


def test_autocorrect_combines_sorting_and_shorthand() -> None:
    source = ruby(
        """
        name = 'x'
        attribute :title, zebra: 1, name: name, alpha: 2
        """
    )
    result = autocorrect(source, _all_rules("attribute"))
    assert result.source == ruby(
        """
        name = 'x'
        attribute :title, alpha: 2, name:, zebra: 1
        """
    )
    assert result.remaining == []
    assert {item.rule for item in result.corrected} >= {"Canon/SortHash", KEYWORD_SHORTHAND}


def test_autocorrect_reports_nothing_for_canonical_source() -> None:
    source = "{a: 1, b: 2}\nattr_reader :a, :b\n"
    result = autocorrect(source, _all_rules("attr_reader"))
    assert result.source == source
    assert not result.changed
    assert result.iterations == 0


def test_autocorrect_is_idempotent_on_its_own_output() -> None:
    source = ruby(
        """
        class Widget
          attr_reader :zebra, :alpha

          def initialize(zebra:, alpha:)
            @options = {
              zebra: zebra,
              alpha: alpha,
            }
          end
        end
        """
    )
    rules = _all_rules("attr_reader")
    first = autocorrect(source, rules)
    second = autocorrect(first.source, rules)
    assert second.source == first.source
    assert not second.changed
    assert "attr_reader :alpha, :zebra" in first.source
    assert "def initialize(alpha:, zebra:)" in first.source
    assert "      alpha:,\n      zebra:,\n" in first.source


def test_check_without_autocorrect_returns_no_edits() -> None:
    found = check_source("{b: 1, a: 2}\n", [SortHash()], autocorrect=False)
    assert len(found) == 1
    assert found[0].edit is None


def test_unparsable_source_raises_parse_error() -> None:
    with pytest.raises(ParseError):
        check_source("def foo(\n", [SortHash()], path="broken.rb")


def test_edits_from_different_rules_never_overlap() -> None:
    source = "b = 1\nx = {b: b, a: 1}\n"
    found = check_source(source, build_rules())
    assert [(item.rule, item.edit is not None) for item in found] == [
        ("Canon/SortHash", True),
        ("Canon/KeywordShorthand", False),
    ]
    edits = [item.edit for item in found if item.edit is not None]
    assert apply_edits(source, edits) == "b = 1\nx = {a: 1, b: b}\n"


def test_deeply_nested_expressions_are_walked() -> None:
    chain = " + ".join(["'a'"] * 600)
    source = f"x = {chain}\n{{b: 1, a: 2}}\n"
    found = check_source(source, build_rules())
    assert [item.rule for item in found] == ["Canon/SortHash"]

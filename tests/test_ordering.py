from __future__ import annotations

from rbcanon import guards
from rbcanon.config import RuleConfig
from rbcanon.ingest import parse_source
from rbcanon.keys import is_shorthand, key
from rbcanon.ordering import ALPHABETICAL, OrderingPolicy


def _pairs(source: str):
    return parse_source(source).literals[0].pairs


def test_keys_and_shorthand_detection() -> None:
    name_pair, other, rocket, text = _pairs("name = 1\n{name:, b: 2, :c => 3, 'd' => 4}\n")
    assert [key(entry) for entry in (name_pair, other, rocket)] == ["name", "b", "c"]
    assert key(text) is None
    assert is_shorthand(name_pair)
    assert not is_shorthand(other)


def test_alphabetical_order_is_ordinal() -> None:
    pairs = _pairs("{b: 1, B: 2, a: 3, _z: 4}\n")
    order = ALPHABETICAL.canonical_order(pairs)
    assert [key(pairs[index]) for index in order] == ["B", "_z", "a", "b"]
    assert not ALPHABETICAL.is_canonical(pairs)


def test_shorthands_first_buckets_before_alphabetical() -> None:
    pairs = _pairs("b = a = 1\n{z: 1, b:, a: 2, a2: a}\n")
    policy = OrderingPolicy(shorthands_first=True)
    order = policy.canonical_order(pairs)
    assert [pairs[index].text for index in order] == ["b:", "a: 2", "a2: a", "z: 1"]


def test_literal_guard_rejects_ineligible_sequences() -> None:
    config = RuleConfig()
    for source in ("{a: 1}\n", "{b: 1, **c}\n", "{a: 1, a: 2}\n", "{'b' => 1, a: 2}\n"):
        literal = parse_source(source).literals[0]
        assert guards.literal_entries(literal, config) is None
    literal = parse_source("{b: 1, a: 2}\n").literals[0]
    assert guards.flagged_range(guards.literal_entries(literal, config), ALPHABETICAL).text == (
        "b: 1, a: 2"
    )


def test_keyword_parameter_guard_requires_single_line() -> None:
    (definition,) = parse_source("def f(b:,\n      a:)\nend\n").definitions
    assert guards.keyword_parameters(definition) is None
    (definition,) = parse_source("def f(b:, a:)\nend\n").definitions
    assert [entry.key for entry in guards.keyword_parameters(definition)] == ["b", "a"]

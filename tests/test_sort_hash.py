from __future__ import annotations

from rbcanon.config import RuleConfig
from rbcanon.rules import SortHash
from tests.rule_helpers import correct, highlighted, offenses, ruby


def test_unsorted_single_line_hash_is_flagged_and_sorted() -> None:
    source = "{b: 1, a: 2}\n"
    found = offenses(source, SortHash())
    assert len(found) == 1
    assert found[0].message == "Sort hash keys alphabetically."
    assert highlighted(found[0]) == "{b: 1, a: 2}"
    assert correct(source, SortHash()) == "{a: 2, b: 1}\n"


def test_sorted_and_trivial_hashes_are_accepted() -> None:
    assert offenses("{a: 1, b: 2, c: 3}\n", SortHash()) == []
    assert offenses("{a: 1}\n", SortHash()) == []
    assert offenses("{}\n", SortHash()) == []


def test_non_symbol_keys_make_the_hash_ineligible() -> None:
    assert offenses("{'b' => 1, 'a' => 2}\n", SortHash()) == []
    assert offenses("{b: 1, 'a' => 2}\n", SortHash()) == []


def test_rocket_symbol_keys_are_sorted() -> None:
    assert correct("{:b => 1, :a => 2}\n", SortHash()) == "{:a => 2, :b => 1}\n"


def test_quoted_symbol_keys_are_sorted_by_their_name() -> None:
    assert correct('{"b": 1, "a": 2}\n', SortHash()) == '{"a": 2, "b": 1}\n'
    assert correct('{:"b" => 1, :a => 2}\n', SortHash()) == '{:a => 2, :"b" => 1}\n'
    assert correct('{"b": 1, a: 2}\n', SortHash()) == '{a: 2, "b": 1}\n'


def test_interpolated_symbol_keys_make_the_hash_ineligible() -> None:
    assert offenses('{"#{b}": 1, a: 2}\n', SortHash()) == []
    assert offenses('{:"#{b}" => 1, :a => 2}\n', SortHash()) == []


def test_double_splat_and_duplicates_are_left_alone() -> None:
    assert offenses("{b: 1, **options}\n", SortHash()) == []
    assert offenses("{b: 1, **options, a: 2}\n", SortHash()) == []
    assert offenses("{a: 1, a: 2}\n", SortHash()) == []
    assert offenses("{b: 1, a: 2, b: 3}\n", SortHash()) == []


def test_multiline_hash_keeps_indentation_and_trailing_comma() -> None:
    source = ruby(
        """
        {
          c: 3,
          a: 1,
          b: 2,
        }
        """
    )
    expected = ruby(
        """
        {
          a: 1,
          b: 2,
          c: 3,
        }
        """
    )
    found = offenses(source, SortHash())
    assert len(found) == 1
    assert found[0].line == 1
    assert correct(source, SortHash()) == expected


def test_multiline_hash_without_trailing_comma_stays_without_one() -> None:
    source = ruby(
        """
        config = {
          zebra: 1,
          alpha: 2
        }
        """
    )
    expected = ruby(
        """
        config = {
          alpha: 2,
          zebra: 1
        }
        """
    )
    assert correct(source, SortHash()) == expected


def test_first_entry_on_the_brace_line_sets_the_indentation() -> None:
    source = "{c: 3,\n a: 1,\n b: 2,\n}\n"
    assert correct(source, SortHash()) == "{\n a: 1,\n b: 2,\n c: 3,\n}\n"


def test_nested_multiline_hash_uses_its_own_base_indentation() -> None:
    source = ruby(
        """
        def settings
          {
            timeout: 5,
            retries: 3,
          }
        end
        """
    )
    expected = ruby(
        """
        def settings
          {
            retries: 3,
            timeout: 5,
          }
        end
        """
    )
    assert correct(source, SortHash()) == expected


def test_padding_inside_braces_is_preserved() -> None:
    assert correct("{ b: 1, a: 2 }\n", SortHash()) == "{ a: 2, b: 1 }\n"
    assert correct("{b: 1, a: 2 }\n", SortHash()) == "{a: 2, b: 1 }\n"


def test_single_line_trailing_comma_is_preserved() -> None:
    assert correct("{b: 1, a: 2,}\n", SortHash()) == "{a: 2, b: 1,}\n"


def test_entry_texts_are_copied_verbatim() -> None:
    source = "{b: compute(1,  2), a: [3,4]}\n"
    assert correct(source, SortHash()) == "{a: [3,4], b: compute(1,  2)}\n"


def test_implicit_keyword_hash_in_call_is_sorted_in_place() -> None:
    source = "render(:show, status: 200, layout: false)\n"
    found = offenses(source, SortHash())
    assert highlighted(found[0]) == "status: 200, layout: false"
    assert correct(source, SortHash()) == "render(:show, layout: false, status: 200)\n"


def test_implicit_multiline_keywords_align_with_first_entry() -> None:
    source = ruby(
        """
        render :show,
               status: 200,
               layout: false
        """
    )
    expected = ruby(
        """
        render :show,
               layout: false,
               status: 200
        """
    )
    assert correct(source, SortHash()) == expected


def test_shorthands_first_orders_shorthand_pairs_before_the_rest() -> None:
    rule = SortHash(RuleConfig(shorthands_first=True))
    source = "name = 'test'\n{z: 1, name:, a: 2}\n"
    assert len(offenses(source, rule)) == 1
    assert correct(source, rule) == "name = 'test'\n{name:, a: 2, z: 1}\n"
    assert offenses("name = 'test'\n{name:, a: 2, z: 1}\n", rule) == []


def test_shorthands_are_plain_keys_without_the_option() -> None:
    source = "name = 'test'\n{name:, a: 2}\n"
    assert correct(source, SortHash()) == "name = 'test'\n{a: 2, name:}\n"


def test_excluded_methods_skip_literals_passed_to_them() -> None:
    rule = SortHash(RuleConfig(exclude_methods=frozenset({"enum"})))
    assert offenses("enum(status: {b: 1, a: 2})\n", rule) == []
    assert offenses("enum b: 1, a: 2\n", rule) == []
    assert len(offenses("other(status: {b: 1, a: 2})\n", rule)) == 1


def test_nested_unsorted_hash_waits_for_the_outer_one() -> None:
    source = "{b: {d: 1, c: 2}, a: 1}\n"
    found = offenses(source, SortHash())
    assert len(found) == 1
    assert highlighted(found[0]) == source.strip()
    assert correct(source, SortHash()) == "{a: 1, b: {d: 1, c: 2}}\n"


def test_nested_hash_is_flagged_when_the_outer_one_is_sorted() -> None:
    source = "{a: {d: 1, c: 2}, b: 1}\n"
    found = offenses(source, SortHash())
    assert [highlighted(item) for item in found] == ["{d: 1, c: 2}"]
    assert correct(source, SortHash()) == "{a: {c: 2, d: 1}, b: 1}\n"


def test_ineligible_outer_hash_does_not_shield_inner_hash() -> None:
    source = "{b: {d: 1, c: 2}, **rest, a: 1}\n"
    found = offenses(source, SortHash())
    assert [highlighted(item) for item in found] == ["{d: 1, c: 2}"]


def test_comments_move_with_their_entries() -> None:
    source = ruby(
        """
        {
          # last letter
          zebra: 1, # z
          alpha: 2,
        }
        """
    )
    expected = ruby(
        """
        {
          alpha: 2,
          # last letter
          zebra: 1, # z
        }
        """
    )
    assert correct(source, SortHash()) == expected


def test_rewrite_is_idempotent() -> None:
    source = ruby(
        """
        {
          c: 3,
          a: {y: 1, x: 2},
          b: 2
        }
        """
    )
    once = correct(source, SortHash())
    twice = correct(once, SortHash())
    thrice = correct(twice, SortHash())
    assert offenses(thrice, SortHash()) == []
    assert correct(thrice, SortHash()) == thrice

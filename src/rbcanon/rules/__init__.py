from __future__ import annotations

from rbcanon.config import (
    KEYWORD_SHORTHAND,
    RULE_NAMES,
    CanonConfig,
)
from rbcanon.rules.base import Rule
from rbcanon.rules.keyword_shorthand import KeywordShorthand
from rbcanon.rules.sort_hash import SortHash
from rbcanon.rules.sort_keywords import SortKeywords
from rbcanon.rules.sort_method_arguments import SortMethodArguments
from rbcanon.rules.sort_method_definition import SortMethodDefinition

RULE_CLASSES: dict[str, type[Rule]] = {
    rule.name: rule
    for rule in (
        SortHash,
        SortKeywords,
        SortMethodArguments,
        SortMethodDefinition,
        KeywordShorthand,
    )
}


def build_rules(config: CanonConfig | None = None) -> list[Rule]:
    """Instantiate every enabled rule, in registry order."""
    config = config if config is not None else CanonConfig()
    rules: list[Rule] = []
    for name in RULE_NAMES:
        rule_config = config.rule(name)
        if not rule_config.enabled:
            continue
        if name == KEYWORD_SHORTHAND and not config.shorthand_supported():
            continue
        rules.append(RULE_CLASSES[name](rule_config))
    return rules


__all__ = [
    "KeywordShorthand",
    "RULE_CLASSES",
    "Rule",
    "SortHash",
    "SortKeywords",
    "SortMethodArguments",
    "SortMethodDefinition",
    "build_rules",
]

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime, time
from pathlib import Path
from typing import TypeAlias
import tomllib

DEFAULT_CONFIG_NAME = "rbcanon.toml"

SORT_HASH = "Canon/SortHash"
SORT_KEYWORDS = "Canon/SortKeywords"
SORT_METHOD_ARGUMENTS = "Canon/SortMethodArguments"
SORT_METHOD_DEFINITION = "Canon/SortMethodDefinition"
KEYWORD_SHORTHAND = "Canon/KeywordShorthand"

RULE_NAMES: tuple[str, ...] = (
    SORT_HASH,
    SORT_KEYWORDS,
    SORT_METHOD_ARGUMENTS,
    SORT_METHOD_DEFINITION,
    KEYWORD_SHORTHAND,
)

# Ruby 3.1 introduced `key:` value omission.
SHORTHAND_MIN_RUBY = (3, 1)

TomlScalar: TypeAlias = str | int | float | bool | None | date | datetime | time
TomlValue: TypeAlias = TomlScalar | list["TomlValue"] | dict[str, "TomlValue"]
TomlTable: TypeAlias = dict[str, TomlValue]


@dataclass(frozen=True)
class RuleConfig:
    enabled: bool = True
    shorthands_first: bool = False
    exclude_methods: frozenset[str] = field(default_factory=frozenset)
    methods: frozenset[str] = field(default_factory=frozenset)


@dataclass(frozen=True)
class CanonConfig:
    rules: dict[str, RuleConfig] = field(default_factory=dict)
    target_ruby_version: tuple[int, int] | None = None

    def rule(self, name: str) -> RuleConfig:
        return self.rules.get(name, RuleConfig())

    def shorthand_supported(self) -> bool:
        if self.target_ruby_version is None:
            return True
        return self.target_ruby_version >= SHORTHAND_MIN_RUBY


def _load_toml(path: Path) -> TomlTable:
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    except OSError:
        return {}
    try:
        data = tomllib.loads(raw)
    except tomllib.TOMLDecodeError:
        return {}
    return data if isinstance(data, dict) else {}


def load_config(root: Path | None = None, config_path: Path | None = None) -> TomlTable:
    if config_path is None:
        base = root if root is not None else Path.cwd()
        config_path = base / DEFAULT_CONFIG_NAME
    return _load_toml(config_path)


def _normalize_name_list(value: TomlValue) -> list[str]:
    items: list[str] = []
    if value is None:
        return items
    if isinstance(value, str):
        items = [part.strip() for part in value.split(",") if part.strip()]
    elif isinstance(value, (list, tuple, set)):
        for item in value:
            if isinstance(item, str):
                items.extend([part.strip() for part in item.split(",") if part.strip()])
    return [item for item in items if item]


def _as_bool(value: TomlValue, default: bool = False) -> bool:
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return default


def _as_version(value: TomlValue) -> tuple[int, int] | None:
    if isinstance(value, bool) or value is None:
        return None
    text = str(value).strip()
    parts = text.split(".")
    try:
        major = int(parts[0])
        minor = int(parts[1]) if len(parts) > 1 and parts[1] else 0
    except ValueError:
        return None
    return major, minor


def rule_config(section: TomlValue) -> RuleConfig:
    if not isinstance(section, dict):
        return RuleConfig()
    return RuleConfig(
        enabled=_as_bool(section.get("Enabled"), default=True),
        shorthands_first=_as_bool(section.get("ShorthandsFirst")),
        exclude_methods=frozenset(_normalize_name_list(section.get("ExcludeMethods"))),
        methods=frozenset(_normalize_name_list(section.get("Methods"))),
    )


def canon_config(data: TomlTable | None) -> CanonConfig:
    if not isinstance(data, dict):
        return CanonConfig()
    rules_section = data.get("rules", {})
    if not isinstance(rules_section, dict):
        rules_section = {}
    rules = {name: rule_config(rules_section.get(name)) for name in RULE_NAMES}
    global_section = data.get("canon", {})
    if not isinstance(global_section, dict):
        global_section = {}
    return CanonConfig(
        rules=rules,
        target_ruby_version=_as_version(global_section.get("TargetRubyVersion")),
    )


def config_from_path(root: Path | None = None, config_path: Path | None = None) -> CanonConfig:
    return canon_config(load_config(root=root, config_path=config_path))

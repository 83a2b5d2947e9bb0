from __future__ import annotations

from typing import Any, ClassVar

from rbcanon.config import RuleConfig
from rbcanon.diagnostics import Diagnostic
from rbcanon.nodes import NodeKind, ParsedSource


class Rule:
    name: ClassVar[str]
    message: ClassVar[str]
    node_kind: ClassVar[NodeKind]

    def __init__(self, config: RuleConfig | None = None) -> None:
        self.config = config if config is not None else RuleConfig()

    def visit(
        self, node: Any, parsed: ParsedSource, *, autocorrect: bool = True
    ) -> list[Diagnostic]:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.config!r})"

from __future__ import annotations

import logging
from typing import Any

import tree_sitter
import tree_sitter_ruby

from rbcanon.exceptions import GrammarUnavailableError, ParseError
from rbcanon.nodes import (
    AssociativeLiteral,
    Call,
    CallInfo,
    Definition,
    Entry,
    EntryKind,
    KeyForm,
    ParsedSource,
)
from rbcanon.source import SourceBuffer, SourceSpan

logger = logging.getLogger(__name__)

LANGUAGE_ID = "ruby"
FILE_EXTENSIONS = (".rb", ".rake", ".gemspec", ".ru")
FILE_NAMES = ("Gemfile", "Rakefile", "Guardfile")

_HARD_SCOPES = frozenset({"method", "singleton_method", "class", "module", "singleton_class"})
_SOFT_SCOPES = frozenset({"block", "do_block", "lambda"})
_DEFINITIONS = frozenset({"method", "singleton_method"})
_MODIFIERS = frozenset({"if_modifier", "unless_modifier", "while_modifier", "until_modifier"})
_PARAMETER_LISTS = frozenset(
    {"method_parameters", "block_parameters", "lambda_parameters", "destructured_parameter"}
)
_NAMED_PARAMETERS = frozenset(
    {
        "optional_parameter",
        "keyword_parameter",
        "splat_parameter",
        "hash_splat_parameter",
        "block_parameter",
    }
)
_ASSIGNMENT_TARGETS = frozenset(
    {"left_assignment_list", "destructured_left_assignment", "rest_assignment"}
)
# Nodes a literal can sit in while still belonging to the surrounding call's arguments.
_TRANSPARENT_CONTAINERS = frozenset({"pair", "hash", "array"})
_SKIPPED = frozenset({"comment", "heredoc_body"})
_HASH_MEMBERS = frozenset({"pair", "hash_splat_argument"})

_VISIT = "visit"
_LEAVE = "leave"
_OPEN_RUN = "open_run"
_CLOSE_RUN = "close_run"

_parser_cache: dict[str, tree_sitter.Parser] = {}


def _get_parser() -> tree_sitter.Parser:
    if LANGUAGE_ID in _parser_cache:
        return _parser_cache[LANGUAGE_ID]
    try:
        capsule: object = tree_sitter_ruby.language()
        parser = tree_sitter.Parser(tree_sitter.Language(capsule))
    except (AttributeError, TypeError, ValueError) as exc:
        raise GrammarUnavailableError(f"tree-sitter Ruby grammar unavailable: {exc}") from exc
    _parser_cache[LANGUAGE_ID] = parser
    return parser


def _byte_to_char_table(text: str, raw: bytes) -> list[int] | None:
    if len(raw) == len(text):
        return None
    table: list[int] = []
    for index, char in enumerate(text):
        table.extend([index] * len(char.encode("utf-8")))
    table.append(len(text))
    return table


def _is_error(node: tree_sitter.Node) -> bool:
    return node.type == "ERROR" or node.is_missing


def _first_error(node: tree_sitter.Node) -> tree_sitter.Node | None:
    if not (_is_error(node) or node.has_error):
        return None
    current = node
    while not _is_error(current):
        child = next(
            (child for child in current.children if _is_error(child) or child.has_error),
            None,
        )
        if child is None:
            return current
        current = child
    return current


def _members(node: tree_sitter.Node) -> list[tree_sitter.Node]:
    return [child for child in node.named_children if child.type not in _SKIPPED]


def _method_name(call: tree_sitter.Node) -> str:
    method = call.child_by_field_name("method")
    if method is None:
        return ""
    return method.text.decode("utf-8")


def _has_block(call: tree_sitter.Node) -> bool:
    return any(child.type in ("block", "do_block") for child in call.children)


def _call_info(call: tree_sitter.Node) -> CallInfo:
    parent = call.parent
    arguments = call.child_by_field_name("arguments")
    return CallInfo(
        name=_method_name(call),
        has_receiver=call.child_by_field_name("receiver") is not None,
        has_block=_has_block(call),
        in_modifier=parent is not None and parent.type in _MODIFIERS,
        parenthesized=arguments is not None
        and arguments.child_count > 0
        and arguments.children[0].type == "(",
    )


def _argument_owner(node: tree_sitter.Node) -> tree_sitter.Node | None:
    """The call whose argument list directly holds ``node``."""
    parent = node.parent
    if parent is None or parent.type != "argument_list":
        return None
    owner = parent.parent
    if owner is None or owner.type != "call":
        return None
    return owner


def _enclosing_callee(start: tree_sitter.Node | None) -> str | None:
    current = start
    while current is not None:
        if current.type == "argument_list":
            owner = current.parent
            if owner is not None and owner.type == "call":
                return _method_name(owner)
            return None
        if current.type not in _TRANSPARENT_CONTAINERS:
            return None
        current = current.parent
    return None


def _hash_runs(node: tree_sitter.Node) -> list[list[tree_sitter.Node]]:
    """Consecutive bare pairs and double splats outside of braces."""
    runs: list[list[tree_sitter.Node]] = []
    current: list[tree_sitter.Node] = []
    for child in node.children:
        if child.type in _HASH_MEMBERS:
            current.append(child)
        elif child.is_named and child.type not in _SKIPPED:
            if current:
                runs.append(current)
            current = []
    if current:
        runs.append(current)
    return runs


class _Scope:
    __slots__ = ("hard", "names")

    def __init__(self, hard: bool) -> None:
        self.hard = hard
        self.names: set[str] = set()


class _RubyViewBuilder:
    def __init__(self, buffer: SourceBuffer, raw: bytes) -> None:
        self.buffer = buffer
        self._table = _byte_to_char_table(buffer.text, raw)
        self.literals: list[AssociativeLiteral] = []
        self.calls: list[Call] = []
        self.definitions: list[Definition] = []
        self.comments: list[SourceSpan] = []
        self._literal_stack: list[AssociativeLiteral] = []
        self._call_stack: list[Call] = []
        self._definition_stack: list[Definition] = []
        self._scopes: list[_Scope] = [_Scope(hard=True)]
        self._literal_cache: dict[tuple[int, int], AssociativeLiteral] = {}

    # -- offsets -----------------------------------------------------------

    def _char(self, offset: int) -> int:
        if self._table is None:
            return offset
        return self._table[offset]

    def span(self, node: tree_sitter.Node) -> SourceSpan:
        return self.buffer.span(self._char(node.start_byte), self._char(node.end_byte))

    def _span_of(self, first: tree_sitter.Node, last: tree_sitter.Node) -> SourceSpan:
        return self.buffer.span(self._char(first.start_byte), self._char(last.end_byte))

    def _text(self, node: tree_sitter.Node) -> str:
        return self.span(node).text

    # -- local variables ---------------------------------------------------

    def _declare(self, name: str) -> None:
        self._scopes[-1].names.add(name)

    def _is_local(self, name: str) -> bool:
        for scope in reversed(self._scopes):
            if name in scope.names:
                return True
            if scope.hard:
                return False
        return False

    def _declare_targets(self, node: tree_sitter.Node | None) -> None:
        if node is None:
            return
        if node.type == "identifier":
            self._declare(self._text(node))
        elif node.type in _ASSIGNMENT_TARGETS:
            for child in _members(node):
                self._declare_targets(child)

    def _declare_bindings(self, node: tree_sitter.Node) -> None:
        kind = node.type
        if kind in ("assignment", "operator_assignment"):
            self._declare_targets(node.child_by_field_name("left"))
        elif kind in _PARAMETER_LISTS:
            for child in _members(node):
                if child.type == "identifier":
                    self._declare(self._text(child))
        elif kind in _NAMED_PARAMETERS:
            self._declare_targets(node.child_by_field_name("name"))
        elif kind == "exception_variable":
            for child in _members(node):
                self._declare_targets(child)
        elif kind == "for":
            self._declare_targets(node.child_by_field_name("pattern"))

    # -- entries -----------------------------------------------------------

    def _quoted_name(self, node: tree_sitter.Node) -> str | None:
        """Contents of a quoted symbol or label; ``None`` when interpolated or escaped."""
        parts = _members(node)
        if any(part.type != "string_content" for part in parts):
            return None
        return "".join(self._text(part) for part in parts)

    def _pair_key(self, key_node: tree_sitter.Node | None) -> tuple[str | None, KeyForm]:
        if key_node is None:
            return None, KeyForm.OTHER
        kind = key_node.type
        if kind == "hash_key_symbol":
            return self._text(key_node), KeyForm.LABEL
        if kind == "simple_symbol":
            return self._text(key_node)[1:], KeyForm.ROCKET_SYMBOL
        if kind == "delimited_symbol":
            name = self._quoted_name(key_node)
            if name is not None:
                return name, KeyForm.ROCKET_SYMBOL
        elif kind == "string":
            # "key": value is a symbol key; "key" => value is a string key.
            operator = key_node.next_sibling
            name = self._quoted_name(key_node)
            if name is not None and operator is not None and operator.type == ":":
                return name, KeyForm.QUOTED_LABEL
        return None, KeyForm.OTHER

    def _pair_entry(self, node: tree_sitter.Node) -> Entry:
        key_node = node.child_by_field_name("key")
        value_node = node.child_by_field_name("value")
        key, form = self._pair_key(key_node)
        value_local: str | None = None
        if value_node is not None and value_node.type == "identifier":
            name = self._text(value_node)
            if self._is_local(name):
                value_local = name
        return Entry(
            kind=EntryKind.PAIR,
            span=self.span(node),
            key=key,
            key_form=form,
            value_span=self.span(value_node) if value_node is not None else None,
            value_local=value_local,
        )

    def _argument_entry(self, node: tree_sitter.Node) -> Entry:
        kind = node.type
        if kind == "pair":
            return self._pair_entry(node)
        if kind == "simple_symbol":
            return Entry(kind=EntryKind.SYMBOL, span=self.span(node), key=self._text(node)[1:])
        if kind == "delimited_symbol":
            name = self._quoted_name(node)
            if name is not None:
                return Entry(kind=EntryKind.SYMBOL, span=self.span(node), key=name)
        if kind == "hash_splat_argument":
            return Entry(kind=EntryKind.DOUBLE_SPLAT, span=self.span(node))
        if kind == "splat_argument":
            return Entry(kind=EntryKind.SPLAT, span=self.span(node))
        if kind == "block_argument":
            return Entry(kind=EntryKind.BLOCK_PASS, span=self.span(node))
        return Entry(kind=EntryKind.POSITIONAL, span=self.span(node))

    def _parameter_entry(self, node: tree_sitter.Node) -> Entry:
        if node.type == "keyword_parameter":
            name = node.child_by_field_name("name")
            value = node.child_by_field_name("value")
            return Entry(
                kind=EntryKind.KEYWORD_PARAMETER,
                span=self.span(node),
                key=self._text(name) if name is not None else None,
                key_form=KeyForm.LABEL,
                value_span=self.span(value) if value is not None else None,
            )
        if node.type == "hash_splat_parameter":
            return Entry(kind=EntryKind.KEYWORD_REST, span=self.span(node))
        return Entry(kind=EntryKind.OTHER_PARAMETER, span=self.span(node))

    # -- literals ----------------------------------------------------------

    def _braced_literal(self, node: tree_sitter.Node) -> AssociativeLiteral:
        key = (node.start_byte, node.end_byte)
        if key not in self._literal_cache:
            owner = _argument_owner(node)
            self._literal_cache[key] = AssociativeLiteral(
                span=self.span(node),
                braced=True,
                entries=tuple(self._argument_entry(child) for child in _members(node)),
                call=_call_info(owner) if owner is not None else None,
                enclosing_callee=_enclosing_callee(node.parent),
                ancestors=tuple(self._literal_stack),
            )
        return self._literal_cache[key]

    def _implicit_literal(
        self, container: tree_sitter.Node, run: list[tree_sitter.Node]
    ) -> AssociativeLiteral:
        key = (run[0].start_byte, run[-1].end_byte)
        if key not in self._literal_cache:
            owner = container.parent if container.type == "argument_list" else None
            if owner is not None and owner.type != "call":
                owner = None
            self._literal_cache[key] = AssociativeLiteral(
                span=self._span_of(run[0], run[-1]),
                braced=False,
                entries=tuple(self._argument_entry(child) for child in run),
                call=_call_info(owner) if owner is not None else None,
                enclosing_callee=_enclosing_callee(container),
                ancestors=tuple(self._literal_stack),
            )
        return self._literal_cache[key]

    # -- calls and definitions ---------------------------------------------

    def _call(self, node: tree_sitter.Node) -> Call | None:
        arguments = node.child_by_field_name("arguments")
        if arguments is None or arguments.type != "argument_list":
            return None
        members = _members(arguments)
        entries = tuple(self._argument_entry(child) for child in members)
        keyword_literal: AssociativeLiteral | None = None
        runs = _hash_runs(arguments)
        if members and members[-1].type == "hash":
            keyword_literal = self._braced_literal(members[-1])
        elif runs and members and runs[-1][-1].end_byte == members[-1].end_byte:
            keyword_literal = self._implicit_literal(arguments, runs[-1])
        method = node.child_by_field_name("method")
        info = _call_info(node)
        return Call(
            span=self.span(node),
            name=info.name,
            selector=self.span(method) if method is not None else self.span(node),
            has_receiver=info.has_receiver,
            arguments=entries,
            keyword_literal=keyword_literal,
            has_block=info.has_block,
            in_modifier=info.in_modifier,
            ancestors=tuple(self._call_stack),
        )

    def _definition(self, node: tree_sitter.Node) -> Definition:
        keyword = next((child for child in node.children if child.type == "def"), node)
        name = node.child_by_field_name("name")
        parameters = node.child_by_field_name("parameters")
        entries: tuple[Entry, ...] = ()
        if parameters is not None:
            entries = tuple(self._parameter_entry(child) for child in _members(parameters))
        return Definition(
            span=self.span(node),
            name=self._text(name) if name is not None else "",
            keyword=self.span(keyword),
            parameters=entries,
            singleton=node.type == "singleton_method",
            ancestors=tuple(self._definition_stack),
        )

    # -- traversal ---------------------------------------------------------

    def walk(self, root: tree_sitter.Node) -> None:
        """Visit ``root`` depth-first in source order.

        The walk keeps its own stack so that deeply nested expressions do
        not exhaust the interpreter's recursion limit.
        """
        stack: list[tuple[str, Any]] = [(_VISIT, root)]
        while stack:
            action, payload = stack.pop()
            if action == _VISIT:
                self._enter(payload, stack)
            elif action == _LEAVE:
                self._leave(payload)
            elif action == _OPEN_RUN:
                container, run = payload
                literal = self._implicit_literal(container, run)
                self.literals.append(literal)
                self._literal_stack.append(literal)
            else:
                self._literal_stack.pop()

    def _enter(self, node: tree_sitter.Node, stack: list[tuple[str, Any]]) -> None:
        kind = node.type
        if kind == "comment":
            self.comments.append(self.span(node))
            return
        scope: _Scope | None = None
        if kind in _HARD_SCOPES:
            scope = _Scope(hard=True)
        elif kind in _SOFT_SCOPES:
            scope = _Scope(hard=False)
        if scope is not None:
            self._scopes.append(scope)
        self._declare_bindings(node)

        pushed_literal = pushed_call = pushed_definition = False
        if kind == "hash":
            literal = self._braced_literal(node)
            self.literals.append(literal)
            self._literal_stack.append(literal)
            pushed_literal = True
        elif kind == "call":
            call = self._call(node)
            if call is not None:
                self.calls.append(call)
                self._call_stack.append(call)
                pushed_call = True
        elif kind in _DEFINITIONS:
            definition = self._definition(node)
            self.definitions.append(definition)
            self._definition_stack.append(definition)
            pushed_definition = True

        stack.append((_LEAVE, (scope, pushed_literal, pushed_call, pushed_definition)))
        self._schedule_children(node, stack)

    def _leave(self, frame: tuple[_Scope | None, bool, bool, bool]) -> None:
        scope, pushed_literal, pushed_call, pushed_definition = frame
        if pushed_literal:
            self._literal_stack.pop()
        if pushed_call:
            self._call_stack.pop()
        if pushed_definition:
            self._definition_stack.pop()
        if scope is not None:
            self._scopes.pop()

    def _schedule_children(
        self, node: tree_sitter.Node, stack: list[tuple[str, Any]]
    ) -> None:
        # Pushed in reverse so that children are popped in source order.
        if node.type == "hash":
            stack.extend((_VISIT, child) for child in reversed(node.children))
            return
        starts: dict[int, list[tree_sitter.Node]] = {}
        ends: set[int] = set()
        for run in _hash_runs(node):
            starts[run[0].start_byte] = run
            ends.add(run[-1].end_byte)
        for child in reversed(node.children):
            member = child.type in _HASH_MEMBERS
            if member and child.end_byte in ends:
                stack.append((_CLOSE_RUN, None))
            stack.append((_VISIT, child))
            run = starts.get(child.start_byte) if member else None
            if run is not None:
                stack.append((_OPEN_RUN, (node, run)))

    def build(self) -> ParsedSource:
        return ParsedSource(
            buffer=self.buffer,
            literals=tuple(self.literals),
            calls=tuple(self.calls),
            definitions=tuple(self.definitions),
            comments=tuple(self.comments),
        )


def parse_source(text: str, path: str | None = None) -> ParsedSource:
    raw = text.encode("utf-8")
    tree = _get_parser().parse(raw)
    buffer = SourceBuffer(text=text, name=path or "(string)")
    root = tree.root_node
    if root.has_error:
        error = _first_error(root) or root
        line, column = error.start_point
        raise ParseError(
            "syntax error" if error.type == "ERROR" else f"missing {error.type}",
            path=path or "",
            line=line + 1,
            column=column,
        )
    builder = _RubyViewBuilder(buffer, raw)
    builder.walk(root)
    parsed = builder.build()
    logger.debug(
        "parsed %s: %d literals, %d calls, %d definitions",
        buffer.name,
        len(parsed.literals),
        len(parsed.calls),
        len(parsed.definitions),
    )
    return parsed

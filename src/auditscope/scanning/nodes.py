"""Node classification: raw tree-sitter node types to a closed set of kinds.

The walker only ever dispatches on NodeKind, so adding a language means
adding a classifier table here and nothing in the analyzers.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Iterator, Optional


class NodeKind(Enum):
    """Structural categories the complexity walker understands."""

    FUNCTION = "function"
    IF = "if"
    ELSE_IF = "else_if"
    ELSE = "else"
    LOOP = "loop"
    SWITCH = "switch"
    CASE = "case"
    DEFAULT_CASE = "default_case"
    TRY = "try"
    CATCH = "catch"
    TERNARY = "ternary"
    LOGICAL = "logical"
    CLASS = "class"
    OTHER = "other"


_JS_KINDS = {
    "function_declaration": NodeKind.FUNCTION,
    "generator_function_declaration": NodeKind.FUNCTION,
    "function_expression": NodeKind.FUNCTION,
    "function": NodeKind.FUNCTION,
    "generator_function": NodeKind.FUNCTION,
    "arrow_function": NodeKind.FUNCTION,
    "method_definition": NodeKind.FUNCTION,
    "if_statement": NodeKind.IF,
    "else_clause": NodeKind.ELSE,
    "for_statement": NodeKind.LOOP,
    "for_in_statement": NodeKind.LOOP,
    "while_statement": NodeKind.LOOP,
    "do_statement": NodeKind.LOOP,
    "switch_statement": NodeKind.SWITCH,
    "switch_case": NodeKind.CASE,
    "switch_default": NodeKind.DEFAULT_CASE,
    "try_statement": NodeKind.TRY,
    "catch_clause": NodeKind.CATCH,
    "ternary_expression": NodeKind.TERNARY,
    "class_declaration": NodeKind.CLASS,
    "class": NodeKind.CLASS,
    "abstract_class_declaration": NodeKind.CLASS,
}

_PY_KINDS = {
    "function_definition": NodeKind.FUNCTION,
    "lambda": NodeKind.FUNCTION,
    "if_statement": NodeKind.IF,
    "elif_clause": NodeKind.ELSE_IF,
    "else_clause": NodeKind.ELSE,
    "for_statement": NodeKind.LOOP,
    "while_statement": NodeKind.LOOP,
    "match_statement": NodeKind.SWITCH,
    "case_clause": NodeKind.CASE,
    "try_statement": NodeKind.TRY,
    "except_clause": NodeKind.CATCH,
    "except_group_clause": NodeKind.CATCH,
    "conditional_expression": NodeKind.TERNARY,
    "boolean_operator": NodeKind.LOGICAL,
    "class_definition": NodeKind.CLASS,
}

_KIND_TABLES = {
    "javascript": _JS_KINDS,
    "typescript": _JS_KINDS,
    "tsx": _JS_KINDS,
    "python": _PY_KINDS,
}

_JS_LOGICAL_OPERATORS = frozenset({"&&", "||"})

# Parameter list children that are not parameters
_NON_PARAMETERS = frozenset({"comment", "keyword_separator", "positional_separator"})

# Binding nodes that give an anonymous function value its name: type -> field
_BINDING_NAME_FIELDS = {
    "variable_declarator": "name",
    "pair": "key",
    "assignment_expression": "left",
    "public_field_definition": "name",
    "field_definition": "property",
    "assignment": "left",
    "keyword_argument": "name",
}

_NAME_NODE_TYPES = frozenset(
    {
        "identifier",
        "property_identifier",
        "private_property_identifier",
        "shorthand_property_identifier",
        "type_identifier",
        "member_expression",
        "attribute",
        "string",
        "number",
    }
)


def classify(node: Any, language: str) -> NodeKind:
    """Map a tree-sitter node to its NodeKind."""
    if not node.is_named:
        return NodeKind.OTHER
    node_type = node.type
    kind = _KIND_TABLES.get(language, _JS_KINDS).get(node_type)

    if kind is NodeKind.IF:
        parent = node.parent
        # `else if` is an if_statement wrapped in an else_clause
        if parent is not None and parent.type == "else_clause":
            return NodeKind.ELSE_IF
        return NodeKind.IF
    if kind is NodeKind.CASE and language == "python" and _is_wildcard_case(node):
        return NodeKind.DEFAULT_CASE
    if kind is None and node_type == "binary_expression":
        operator = node.child_by_field_name("operator")
        if operator is not None and operator.type in _JS_LOGICAL_OPERATORS:
            return NodeKind.LOGICAL
    return kind or NodeKind.OTHER


def _is_wildcard_case(node: Any) -> bool:
    for child in node.named_children:
        if child.type == "case_pattern":
            return _text(child).strip() == "_"
    return False


def _text(node: Any) -> str:
    raw = node.text
    return raw.decode("utf-8", errors="replace") if raw else ""


class SyntaxNode:
    """Language-aware view over a tree-sitter node.

    Positions are 1-indexed (line, column), matching what the analyzers
    report.
    """

    __slots__ = ("raw", "language", "_kind")

    def __init__(self, raw: Any, language: str):
        self.raw = raw
        self.language = language
        self._kind: Optional[NodeKind] = None

    def __repr__(self) -> str:
        return f"SyntaxNode({self.type}, {self.kind.value}, line={self.line})"

    @property
    def kind(self) -> NodeKind:
        if self._kind is None:
            self._kind = classify(self.raw, self.language)
        return self._kind

    @property
    def type(self) -> str:
        return self.raw.type

    @property
    def text(self) -> str:
        return _text(self.raw)

    @property
    def line(self) -> int:
        return self.raw.start_point[0] + 1

    @property
    def column(self) -> int:
        return self.raw.start_point[1] + 1

    @property
    def end_line(self) -> int:
        return self.raw.end_point[0] + 1

    @property
    def parent(self) -> Optional[SyntaxNode]:
        parent = self.raw.parent
        return SyntaxNode(parent, self.language) if parent is not None else None

    @property
    def children(self) -> list[SyntaxNode]:
        return [SyntaxNode(c, self.language) for c in self.raw.named_children]

    def field(self, name: str) -> Optional[SyntaxNode]:
        child = self.raw.child_by_field_name(name)
        return SyntaxNode(child, self.language) if child is not None else None

    # ── Typed predicates ───────────────────────────────────────

    @property
    def is_function(self) -> bool:
        return self.kind is NodeKind.FUNCTION

    @property
    def is_control_flow(self) -> bool:
        return self.kind in (
            NodeKind.IF,
            NodeKind.ELSE_IF,
            NodeKind.LOOP,
            NodeKind.SWITCH,
            NodeKind.TRY,
            NodeKind.CATCH,
        )

    @property
    def is_logical(self) -> bool:
        return self.kind is NodeKind.LOGICAL

    def walk(self) -> Iterator[SyntaxNode]:
        """Pre-order traversal of named descendants, self included."""
        stack = [self.raw]
        while stack:
            node = stack.pop()
            yield SyntaxNode(node, self.language)
            stack.extend(reversed(node.named_children))

    # ── Function helpers ───────────────────────────────────────

    def body(self) -> SyntaxNode:
        """Function body, or the node itself for expression-bodied forms."""
        return self.field("body") or self

    def parameter_count(self) -> int:
        single = self.field("parameter")
        if single is not None:
            return 1
        params = self.field("parameters")
        if params is None:
            return 0
        return sum(1 for c in params.raw.named_children if c.type not in _NON_PARAMETERS)

    def function_name(self) -> str:
        """Declared name, else the enclosing binding's name.

        Returns "<anonymous>" for a function value with no binding and
        "<unknown>" when the binding target is not a plain name (e.g. a
        destructuring pattern).
        """
        declared = self.field("name")
        if declared is not None:
            return self._qualify(declared.text)

        parent = self.raw.parent
        while parent is not None and parent.type in ("parenthesized_expression", "as_expression"):
            parent = parent.parent
        if parent is None:
            return "<anonymous>"

        field_name = _BINDING_NAME_FIELDS.get(parent.type)
        if field_name is None:
            return "<anonymous>"
        target = parent.child_by_field_name(field_name)
        if target is None or target.type not in _NAME_NODE_TYPES:
            return "<unknown>"
        name = _text(target).strip("'\"")
        if parent.type in ("public_field_definition", "field_definition"):
            return self._qualify(name)
        return name

    def _qualify(self, name: str) -> str:
        """Prefix methods with their enclosing class name."""
        node = self.raw.parent
        while node is not None:
            if classify(node, self.language) is NodeKind.FUNCTION:
                return name
            if classify(node, self.language) is NodeKind.CLASS:
                class_name = node.child_by_field_name("name")
                if class_name is not None:
                    return f"{_text(class_name)}.{name}"
                return name
            node = node.parent
        return name

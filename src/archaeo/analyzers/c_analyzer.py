"""C / C++ analyzer backed by tree-sitter.

The translation unit becomes the root scope; namespaces, classes, structs,
unions (with a body) and function definitions become nested scopes. Metrics
of a scope are computed over its whole syntax subtree, so a class scope also
counts the code of its inline methods.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Optional

from ..exceptions import ParsingError, UnsupportedLanguageError
from ..models import MetricValue, ScopeMetrics
from ..scanning.treesitter_parser import first_error, parse
from .base import BaseAnalyzer
from .metrics import extend_metrics, halstead, maintainability_index

ANONYMOUS = "<anonymous>"

SCOPE_NODES: dict[str, str] = {
    "namespace_definition": "namespace",
    "class_specifier": "class",
    "struct_specifier": "struct",
    "union_specifier": "struct",
    "function_definition": "function",
}

CLOSURE_NODES = frozenset({"lambda_expression"})

DECISION_NODES = frozenset(
    {
        "if_statement",
        "for_statement",
        "for_range_loop",
        "while_statement",
        "do_statement",
        "catch_clause",
        "conditional_expression",
    }
)

# Structures that add to cognitive complexity and raise its nesting level
NESTING_NODES = DECISION_NODES | {"switch_statement"}

LOGICAL_OPERATORS = frozenset({"&&", "||", "and", "or"})

# Literal nodes counted as a single operand instead of being descended into
STRING_NODES = frozenset(
    {
        "string_literal",
        "char_literal",
        "raw_string_literal",
        "concatenated_string",
        "system_lib_string",
    }
)

OPERAND_NODES = STRING_NODES | {
    "identifier",
    "field_identifier",
    "type_identifier",
    "namespace_identifier",
    "statement_identifier",
    "number_literal",
    "true",
    "false",
    "null",
    "nullptr",
    "this",
    "preproc_arg",
}

# Closing delimiters and separators are not operators
IGNORED_TOKENS = frozenset({")", "]", "}", ";", ","})

STATEMENT_NODES = frozenset({"declaration", "field_declaration"})
NON_LOGICAL_STATEMENTS = frozenset({"compound_statement", "labeled_statement", "case_statement"})

PARAMETER_NODES = frozenset(
    {
        "parameter_declaration",
        "optional_parameter_declaration",
        "variadic_parameter_declaration",
    }
)


class CFamilyAnalyzer(BaseAnalyzer):
    """Analyzer for C and C++ sources."""

    languages = ("c", "cpp")

    def analyze(self, source: bytes, language: str, name: str = "") -> ScopeMetrics:
        if language not in self.languages:
            raise UnsupportedLanguageError(language, list(self.languages))

        tree = parse(source, language)
        root = tree.root_node

        error_at = first_error(root)
        if error_at is not None:
            line, column = error_at
            raise ParsingError(
                Path(name or "<source>"),
                language,
                f"syntax error at line {line}, column {column}",
            )

        lines = _LineIndex.build(root, source)
        unit = _ScopeBuilder(source, lines).build(root, "unit", name, 1, lines.line_count)

        if self.extended:
            unit = extend_metrics(unit)
        return unit


@dataclass(frozen=True)
class _LineIndex:
    """Which lines of a file hold code and which hold comments (1-indexed)."""

    line_count: int
    code: frozenset[int]
    comments: frozenset[int]

    @classmethod
    def build(cls, root: Any, source: bytes) -> _LineIndex:
        code: set[int] = set()
        comments: set[int] = set()
        stack = [root]
        while stack:
            node = stack.pop()
            if node.type == "comment":
                start, end = _span(node)
                comments.update(range(start, end + 1))
                continue
            if node.child_count == 0 or node.type in STRING_NODES:
                if source[node.start_byte : node.end_byte].strip():
                    start, end = _span(node)
                    code.update(range(start, end + 1))
                continue
            stack.extend(node.children)

        if source:
            line_count = source.count(b"\n") + (0 if source.endswith(b"\n") else 1)
        else:
            line_count = 1
        return cls(line_count=line_count, code=frozenset(code), comments=frozenset(comments))

    def summarize(self, start: int, end: int) -> tuple[int, int, int]:
        """Return (ploc, cloc, blank) for the inclusive line range."""
        span = range(start, end + 1)
        ploc = sum(1 for line in span if line in self.code)
        cloc = sum(1 for line in span if line in self.comments)
        comment_only = sum(1 for line in span if line in self.comments and line not in self.code)
        blank = len(span) - ploc - comment_only
        return ploc, cloc, blank


@dataclass
class _Counts:
    operators: Counter = field(default_factory=Counter)
    operands: Counter = field(default_factory=Counter)
    decisions: int = 0
    statements: int = 0
    functions: int = 0
    closures: int = 0
    closure_args: int = 0
    exits: int = 0


class _ScopeBuilder:
    """Builds the scope tree for one parsed file."""

    def __init__(self, source: bytes, lines: _LineIndex):
        self.source = source
        self.lines = lines

    def build(self, root: Any, kind: str, name: str, start: int, end: int) -> ScopeMetrics:
        """Build the scope tree rooted at ``root`` without recursing."""
        # Pre-order list of (node, kind, name, start, end, parent index)
        entries: list[tuple[Any, str, str, int, int, int]] = [(root, kind, name, start, end, -1)]
        stack = [(child, 0) for child in reversed(root.children)]
        while stack:
            node, parent = stack.pop()
            scope_kind = _scope_kind(node)
            if scope_kind is not None:
                scope_start, scope_end = _span(node)
                entries.append(
                    (node, scope_kind, self._scope_name(node), scope_start, scope_end, parent)
                )
                parent = len(entries) - 1
            stack.extend((child, parent) for child in reversed(node.children))

        # Children always follow their parent, so building in reverse
        # pre-order completes every child before its parent
        children: list[list[ScopeMetrics]] = [[] for _ in entries]
        scope = None
        for index in range(len(entries) - 1, -1, -1):
            node, scope_kind, scope_name, scope_start, scope_end, parent = entries[index]
            scope = ScopeMetrics(
                kind=scope_kind,
                name=scope_name,
                start_line=scope_start,
                end_line=scope_end,
                metrics=self._metrics(node, scope_kind, scope_start, scope_end),
                children=_disambiguate(reversed(children[index])),
            )
            if parent >= 0:
                children[parent].append(scope)
        return scope

    def _metrics(self, node: Any, kind: str, start: int, end: int) -> dict[str, MetricValue]:
        counts = self._count(node)
        cyclomatic = 1 + counts.decisions
        sloc = end - start + 1
        ploc, cloc, blank = self.lines.summarize(start, end)

        metrics: dict[str, MetricValue] = {}
        if kind == "function":
            declarator = _function_declarator(node)
            params = declarator.child_by_field_name("parameters") if declarator else None
            metrics["fn_args"] = self._count_parameters(params)
            metrics["closure_args"] = counts.closure_args
            metrics["nexits"] = counts.exits
            metrics["cognitive"] = cognitive_complexity(node)

        metrics["cyclomatic"] = cyclomatic

        halstead_metrics = halstead(counts.operators, counts.operands)
        metrics.update(halstead_metrics)

        metrics["loc_sloc"] = sloc
        metrics["loc_ploc"] = ploc
        metrics["loc_lloc"] = counts.statements
        metrics["loc_cloc"] = cloc
        metrics["loc_blank"] = blank

        metrics["nom_functions"] = counts.functions
        metrics["nom_closures"] = counts.closures
        metrics["nom_total"] = counts.functions + counts.closures

        metrics.update(
            maintainability_index(halstead_metrics["halstead_volume"], cyclomatic, sloc, cloc)
        )
        return metrics

    def _count(self, root: Any) -> _Counts:
        counts = _Counts()
        # (node, inside a nested function or closure)
        stack: list[tuple[Any, bool]] = [(root, False)]
        while stack:
            node, nested = stack.pop()
            t = node.type
            if t == "comment":
                continue

            if t in DECISION_NODES:
                counts.decisions += 1
            elif t == "case_statement" and node.child_by_field_name("value") is not None:
                counts.decisions += 1
            elif t == "binary_expression" and _operator(node) in LOGICAL_OPERATORS:
                counts.decisions += 1

            if t == "function_definition":
                counts.functions += 1
                nested = nested or node is not root
            elif t in CLOSURE_NODES:
                counts.closures += 1
                lambda_declarator = node.child_by_field_name("declarator")
                if lambda_declarator is not None:
                    counts.closure_args += self._count_parameters(
                        lambda_declarator.child_by_field_name("parameters")
                    )
                nested = True
            elif t == "return_statement" and not nested:
                counts.exits += 1

            if t in STATEMENT_NODES or (
                t.endswith("_statement") and t not in NON_LOGICAL_STATEMENTS
            ):
                counts.statements += 1

            if node.child_count == 0 or t in STRING_NODES:
                self._classify_token(node, counts)
                continue
            stack.extend((child, nested) for child in node.children)
        return counts

    def _classify_token(self, node: Any, counts: _Counts) -> None:
        text = self._text(node)
        if node.type in OPERAND_NODES:
            counts.operands[text] += 1
        elif text.strip() and node.type not in IGNORED_TOKENS:
            counts.operators[text] += 1

    def _count_parameters(self, params: Optional[Any]) -> int:
        if params is None:
            return 0
        declared = [c for c in params.named_children if c.type in PARAMETER_NODES]
        # f(void) declares no parameters
        if (
            len(declared) == 1
            and declared[0].type == "parameter_declaration"
            and declared[0].child_by_field_name("declarator") is None
            and self._text(declared[0]).strip() == "void"
        ):
            return 0
        return len(declared)

    def _scope_name(self, node: Any) -> str:
        if node.type == "function_definition":
            declarator = _function_declarator(node)
            target = declarator.child_by_field_name("declarator") if declarator else None
        else:
            target = node.child_by_field_name("name")
            # typedef struct { ... } name;
            if target is None and node.parent is not None and node.parent.type == "type_definition":
                target = node.parent.child_by_field_name("declarator")
        if target is None:
            return ANONYMOUS
        return " ".join(self._text(target).split()) or ANONYMOUS

    def _text(self, node: Any) -> str:
        return self.source[node.start_byte : node.end_byte].decode("utf-8", errors="replace")


def cognitive_complexity(function_node: Any) -> int:
    """Cognitive complexity of a function definition.

    Flow-breaking structures add one plus their nesting level; ``else`` and
    ``else if`` add a flat one; each run of identical logical operators adds
    one; ``goto`` adds one.
    """
    body = function_node.child_by_field_name("body")
    if body is None:
        return 0

    total = 0
    # (node, its parent, nesting level of the node)
    stack: list[tuple[Any, Any, int]] = [(child, body, 0) for child in body.children]
    while stack:
        node, parent, nesting = stack.pop()
        t = node.type
        inner = nesting
        if t == "if_statement" and parent.type == "else_clause":
            total += 1
        elif t in NESTING_NODES:
            total += 1 + nesting
            inner = nesting + 1
        elif t == "else_clause":
            # The enclosing if already raised the nesting of this body
            total += 0 if _is_else_if(node) else 1
        elif t in CLOSURE_NODES or t == "function_definition":
            inner = nesting + 1
        elif t == "goto_statement":
            total += 1
            continue
        elif t == "binary_expression" and _operator(node) in LOGICAL_OPERATORS:
            continues_run = (
                parent.type == "binary_expression" and _operator(parent) == _operator(node)
            )
            total += 0 if continues_run else 1
        stack.extend((child, node, inner) for child in node.children)
    return total


def _disambiguate(scopes: Iterable[ScopeMetrics]) -> tuple[ScopeMetrics, ...]:
    """Suffix sibling scopes sharing a name with their start line.

    Overloads and definitions repeated under ``#if``/``#else`` would
    otherwise flatten to the same qualified name: ``f`` becomes ``f@3``
    and ``f@9``.
    """
    scopes = tuple(scopes)
    seen = Counter(scope.name for scope in scopes)
    if all(count == 1 for count in seen.values()):
        return scopes
    return tuple(
        replace(scope, name=f"{scope.name}@{scope.start_line}") if seen[scope.name] > 1 else scope
        for scope in scopes
    )


def _is_else_if(else_clause: Any) -> bool:
    return any(c.type == "if_statement" for c in else_clause.named_children)


def _operator(node: Any) -> Optional[str]:
    op = node.child_by_field_name("operator")
    return op.type if op is not None else None


def _scope_kind(node: Any) -> Optional[str]:
    kind = SCOPE_NODES.get(node.type)
    if kind in ("class", "struct") and node.child_by_field_name("body") is None:
        # Forward declaration or elaborated type, not a definition
        return None
    return kind


def _span(node: Any) -> tuple[int, int]:
    """1-indexed inclusive line span of a node."""
    start = node.start_point[0] + 1
    end_row, end_column = node.end_point[0], node.end_point[1]
    # A node ending at column 0 stops at the end of the previous line
    end = end_row + 1 if end_column > 0 else end_row
    return start, max(start, end)


def _function_declarator(node: Any) -> Optional[Any]:
    current = node.child_by_field_name("declarator")
    while current is not None and current.type != "function_declarator":
        current = _inner_declarator(current)
    return current


def _inner_declarator(node: Any) -> Optional[Any]:
    inner = node.child_by_field_name("declarator")
    if inner is not None:
        return inner
    # reference_declarator carries its inner declarator without a field name
    for child in reversed(node.named_children):
        if child.type.endswith("declarator"):
            return child
    return None

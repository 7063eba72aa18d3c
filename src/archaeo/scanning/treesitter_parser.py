"""Tree-sitter parser wrapper.

Grammar objects are loaded once and shared; parsers are cheap and are
created per call so concurrent workers never share one.

Usage:
    tree = parse(code_bytes, "cpp")
    if tree.root_node.has_error:
        ...
"""

from __future__ import annotations

import importlib
from functools import lru_cache
from typing import Any

import tree_sitter

from .languages import get_language_config


@lru_cache(maxsize=None)
def get_language(name: str) -> tree_sitter.Language:
    """Load the tree-sitter grammar for a language tag.

    Raises:
        UnsupportedLanguageError: If the tag is unknown
    """
    config = get_language_config(name)
    module = importlib.import_module(config.grammar)
    # tree-sitter >= 0.23 grammar packages return a capsule from language()
    return tree_sitter.Language(module.language())


def parse(code: bytes, language: str) -> Any:
    """Parse code and return the syntax tree."""
    parser = tree_sitter.Parser(get_language(language))
    return parser.parse(code)


def first_error(node: Any) -> tuple[int, int] | None:
    """Return the (line, column) of the first ERROR or MISSING node, 1-indexed line."""
    if not node.has_error:
        return None
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type == "ERROR" or current.is_missing:
            return current.start_point[0] + 1, current.start_point[1]
        # Reverse so children are visited in source order
        stack.extend(reversed([c for c in current.children if c.has_error]))
    return node.start_point[0] + 1, node.start_point[1]

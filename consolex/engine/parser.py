"""
Source parsing with dialect detection and syntax error reporting.
"""

from __future__ import annotations

import logging
from typing import Optional

from .dialect import Dialect, dialect_for_ext, fallback_dialects
from .tree_sitter_support import SourceDocument, Node
from ..errors import ParseError

logger = logging.getLogger(__name__)

_JSX_NODES = frozenset({"jsx_element", "jsx_self_closing_element"})
_QUOTES = frozenset({'"', "'", "`"})


def parse_source(text: str, dialect: Optional[Dialect] = None, ext: Optional[str] = None) -> SourceDocument:
    """
    Parse source text into a SourceDocument.

    An explicit dialect is used as is. Without it, the dialect is guessed from
    the extension and alternative grammars are tried when the preferred one
    rejects the text; the first clean parse wins.

    Args:
        text: Source text
        dialect: Explicit dialect capability set
        ext: File extension used to guess the dialect (".ts", "tsx", ...)

    Returns:
        Parsed document without syntax errors

    Raises:
        ParseError: If no candidate grammar accepts the text
    """
    if dialect is not None:
        doc = SourceDocument(text, dialect)
        error = _syntax_error(doc)
        if error is None:
            _check_capabilities(doc)
            return doc
        if any(_syntax_error(SourceDocument(text, alt)) is None for alt in fallback_dialects(dialect)):
            raise ParseError(f"unsupported syntax under dialect {dialect.name}", error.line, error.column)
        raise error

    preferred = dialect_for_ext(ext)
    doc = SourceDocument(text, preferred)
    first_error = _syntax_error(doc)
    if first_error is None:
        return doc

    for candidate in fallback_dialects(preferred):
        doc = SourceDocument(text, candidate)
        if _syntax_error(doc) is None:
            logger.debug("parsed with fallback dialect %s instead of %s", candidate.name, preferred.name)
            return doc

    raise first_error


def _syntax_error(doc: SourceDocument) -> Optional[ParseError]:
    node = doc.first_error_node()
    if node is None:
        return None
    line, column = doc.get_position(node)
    return ParseError(_describe(doc, node), line, column)


def _describe(doc: SourceDocument, node: Node) -> str:
    if node.is_missing:
        if node.type in _QUOTES:
            return f"unterminated literal (missing {node.type!r})"
        return f"missing {node.type!r}"
    snippet = doc.get_node_text(node).strip().splitlines()
    token = snippet[0][:24] if snippet else ""
    if not token:
        return "unexpected end of input"
    return f"unexpected token {token!r}"


def _check_capabilities(doc: SourceDocument) -> None:
    """
    Reject constructs the grammar accepts but the explicit dialect disables.
    """
    dialect = doc.dialect
    for node in doc.walk_tree():
        feature: Optional[str] = None
        if node.type == "decorator" and not dialect.decorators:
            feature = "decorators"
        elif node.type in _JSX_NODES and not dialect.markup:
            feature = "JSX markup"
        elif node.type == "optional_chain" and not dialect.optional_chaining:
            feature = "optional chaining"
        elif node.type == "await_expression" and not dialect.top_level_await:
            if not doc.in_function_scope(node):
                feature = "top-level await"
        elif node.type == "call_expression" and not dialect.dynamic_import:
            callee = node.child_by_field_name("function")
            if callee is not None and callee.type == "import":
                feature = "dynamic import"

        if feature is not None:
            line, column = doc.get_position(node)
            raise ParseError(f"unsupported syntax under dialect {dialect.name}: {feature}", line, column)


__all__ = ["parse_source"]

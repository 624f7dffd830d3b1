"""
Shortcuts around the single-file engine.
"""

from __future__ import annotations

from typing import List, Optional

from consolex.engine import remove_calls, parse_source
from consolex.engine.dialect import Dialect
from consolex.engine.tree_sitter_support import SourceDocument, Node
from consolex.types import TransformResult


def remove(text: str, *names: str, ext: str = ".js", **kwargs) -> TransformResult:
    """remove_calls with positional target names; defaults to a .js file."""
    return remove_calls(text, names or ("log",), ext=ext, **kwargs)


def parse_doc(text: str, ext: str = ".js", dialect: Optional[Dialect] = None) -> SourceDocument:
    return parse_source(text, dialect=dialect, ext=ext)


def calls_in(doc: SourceDocument) -> List[Node]:
    """All call expressions of a document in document order."""
    return [n for n in doc.walk_tree() if n.type == "call_expression"]


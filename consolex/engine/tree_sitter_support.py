"""
Tree-sitter infrastructure for the transformation engine.
Provides grammar loading, the parsed source document and tree utilities.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Callable, Iterator, Optional, Tuple

from tree_sitter import Language, Node, Parser, Tree

from .dialect import Dialect, GrammarName

# Node types that open a new function scope (await is legal inside them)
FUNCTION_SCOPES = frozenset({
    "function_declaration",
    "function_expression",
    "function",
    "generator_function",
    "generator_function_declaration",
    "arrow_function",
    "method_definition",
})


@lru_cache(maxsize=None)
def load_language(grammar: GrammarName) -> Language:
    """
    Load Language instance for a grammar name.

    Raises:
        ValueError: If the grammar is unknown
    """
    if grammar == "javascript":
        import tree_sitter_javascript as tsjs
        return Language(tsjs.language())
    if grammar in ("typescript", "tsx"):
        # TS and TSX are two different grammars in one package
        import tree_sitter_typescript as tsts
        if grammar == "tsx":
            return Language(tsts.language_tsx())
        return Language(tsts.language_typescript())
    raise ValueError(f"Unknown grammar: {grammar}")


def node_key(node: Node) -> Tuple[int, int, str]:
    """Stable identity of a node within one tree: its span and type."""
    return node.start_byte, node.end_byte, node.type


def same_node(a: Optional[Node], b: Optional[Node]) -> bool:
    if a is None or b is None:
        return False
    return node_key(a) == node_key(b)


def unwrap_parens(node: Node) -> Node:
    """Strip redundant parentheses: ((x)) -> x."""
    while node.type == "parenthesized_expression":
        inner = [c for c in node.named_children if c.type != "comment"]
        if len(inner) != 1:
            break
        node = inner[0]
    return node


class SourceDocument:
    """
    Source unit: one file's text parsed with the grammar of its dialect.
    """

    def __init__(self, text: str, dialect: Dialect):
        self.text = text
        self.dialect = dialect
        self.tree: Optional[Tree] = None
        self._text_bytes = text.encode("utf-8")
        self._ascii = len(self._text_bytes) == len(text)
        self._parse()

    def get_parser(self) -> Parser:
        return Parser(load_language(self.dialect.grammar))

    def _parse(self):
        """Parse the document with Tree-sitter."""
        parser = self.get_parser()
        self.tree = parser.parse(self._text_bytes)

    @property
    def root_node(self) -> Node:
        """Get the root node of the parsed tree."""
        if not self.tree:
            raise RuntimeError("Document not parsed")
        return self.tree.root_node

    @property
    def source_type(self) -> str:
        """'module' when the program has top-level import/export, 'script' otherwise."""
        for child in self.root_node.named_children:
            if child.type in ("import_statement", "export_statement"):
                return "module"
        return "script"

    def walk_tree(
        self,
        start_node: Optional[Node] = None,
        descend: Optional[Callable[[Node], bool]] = None,
    ) -> Iterator[Node]:
        """
        Walk the tree in pre-order using TreeCursor.

        Args:
            start_node: Node to start from (default: root)
            descend: Called after a node was yielded; returning False prunes
                     the node's subtree from the walk

        Yields:
            Node objects in depth-first order
        """
        if start_node is None:
            start_node = self.root_node

        cursor = start_node.walk()
        visited_children = False

        while True:
            if not visited_children:
                node = cursor.node
                yield node

                if descend is not None and not descend(node):
                    visited_children = True
                elif not cursor.goto_first_child():
                    visited_children = True
            elif cursor.goto_next_sibling():
                visited_children = False
            elif not cursor.goto_parent():
                break
            else:
                visited_children = True

    def get_node_text(self, node: Node) -> str:
        """Get text content for a node."""
        return self._text_bytes[node.start_byte:node.end_byte].decode("utf-8")

    def get_node_range(self, node: Node) -> Tuple[int, int]:
        """Get char range for a node."""
        return self.byte_to_char_position(node.start_byte), self.byte_to_char_position(node.end_byte)

    def get_position(self, node: Node) -> Tuple[int, int]:
        """1-based (line, column) of the node start; column counted in characters."""
        row, col_bytes = node.start_point[0], node.start_point[1]
        line_start = node.start_byte - col_bytes
        column = len(self._text_bytes[line_start:node.start_byte].decode("utf-8", errors="replace"))
        return row + 1, column + 1

    @staticmethod
    def in_function_scope(node: Node) -> bool:
        current = node.parent
        while current:
            if current.type in FUNCTION_SCOPES:
                return True
            current = current.parent
        return False

    def has_error(self) -> bool:
        """Check if the tree has any syntax errors."""
        if not self.tree:
            return True
        return self.root_node.has_error

    def first_error_node(self) -> Optional[Node]:
        """First ERROR or MISSING node in document order."""
        if not self.has_error():
            return None
        for node in self.walk_tree(descend=lambda n: n.has_error):
            if node.type == "ERROR" or node.is_missing:
                return node
        return None

    def byte_to_char_position(self, byte_pos: int) -> int:
        """
        Correctly convert byte position to character position in Unicode text.
        Guarantees that if position points to the middle of a multi-byte character,
        returns position before that character.
        """
        if byte_pos <= 0:
            return 0
        if self._ascii:
            return min(byte_pos, len(self.text))
        if byte_pos >= len(self._text_bytes):
            return len(self.text)

        # UTF-8 guarantees maximum 4 bytes per character
        start = max(0, byte_pos - 4)
        for end in range(byte_pos, start - 1, -1):
            try:
                return len(self._text_bytes[:end].decode("utf-8"))
            except UnicodeDecodeError:
                continue
        return 0


__all__ = [
    "SourceDocument",
    "Node",
    "load_language",
    "node_key",
    "same_node",
    "unwrap_parens",
    "FUNCTION_SCOPES",
]

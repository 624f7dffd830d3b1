"""
Processing context of one source unit.
Encapsulates the parsed document, the range editor and the metrics of a single
parse -> rewrite -> generate cycle.
"""

from __future__ import annotations

from .metrics import MetricsCollector
from .range_edits import RangeEditor
from .tree_sitter_support import SourceDocument, Node


class ProcessingContext:
    """
    Owned exclusively by one cycle; never shared across files.
    """

    def __init__(self, doc: SourceDocument, editor: RangeEditor):
        self.doc = doc
        self.editor = editor
        self.metrics = MetricsCollector()

    @classmethod
    def from_document(cls, doc: SourceDocument) -> ProcessingContext:
        return cls(doc, RangeEditor(doc.text))

    def replace_node(self, node: Node, replacement: str, edit_type: str) -> None:
        """Replace exactly the node's span."""
        start, end = self.doc.get_node_range(node)
        self.editor.add_replacement(start, end, replacement, edit_type)

    def delete_between(self, start_byte: int, end_byte: int, edit_type: str) -> None:
        """Delete a byte span (converted to characters)."""
        start = self.doc.byte_to_char_position(start_byte)
        end = self.doc.byte_to_char_position(end_byte)
        if start < end:
            self.editor.add_deletion(start, end, edit_type)

"""
Call-site matching: decides whether a call expression targets
`<receiver>.<member>` with a member from the target-name set.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import FrozenSet, Iterable, Optional

from .tree_sitter_support import SourceDocument, Node, unwrap_parens

DEFAULT_RECEIVER = "console"


@dataclass(frozen=True)
class MatchResult:
    hit: bool
    member: Optional[str] = None


NO_MATCH = MatchResult(False)


class CallSiteMatcher:
    """
    Structural matcher over call expressions.

    Only the literal receiver identifier is recognized: no aliasing and no
    computed receivers. Member keys may be plain identifiers or plain string
    literals (`console["log"]`); any other computed key never matches.
    """

    def __init__(self, target_names: Iterable[str], receiver: str = DEFAULT_RECEIVER):
        self.target_names: FrozenSet[str] = frozenset(target_names)
        self.receiver = receiver

    def match(self, doc: SourceDocument, node: Node) -> MatchResult:
        """
        Match a node against `<receiver>.<member>(...)`.

        Args:
            doc: Document the node belongs to
            node: Any node; only call expressions can match

        Returns:
            MatchResult with the resolved member name on a hit
        """
        if not self.target_names or node.type != "call_expression":
            return NO_MATCH

        # Tagged templates share the call_expression node type
        arguments = node.child_by_field_name("arguments")
        if arguments is None or arguments.type == "template_string":
            return NO_MATCH

        callee = node.child_by_field_name("function")
        if callee is None:
            return NO_MATCH

        member = self.resolve_member(doc, unwrap_parens(callee))
        if member is None or member not in self.target_names:
            return NO_MATCH
        return MatchResult(True, member)

    def resolve_member(self, doc: SourceDocument, callee: Node) -> Optional[str]:
        """
        Member name accessed on the receiver, or None when the callee is not a
        member access on the receiver.
        """
        obj = callee.child_by_field_name("object")
        if obj is None or obj.type != "identifier" or doc.get_node_text(obj) != self.receiver:
            return None

        if callee.type == "member_expression":
            prop = callee.child_by_field_name("property")
            if prop is None or prop.type != "property_identifier":
                return None
            return doc.get_node_text(prop)

        if callee.type == "subscript_expression":
            index = callee.child_by_field_name("index")
            if index is None:
                return None
            return string_literal_value(doc, unwrap_parens(index))

        return None


def match_call(doc: SourceDocument, node: Node, target_names: Iterable[str], receiver: str = DEFAULT_RECEIVER) -> MatchResult:
    """One-off match of a single node; see CallSiteMatcher.match."""
    return CallSiteMatcher(target_names, receiver).match(doc, node)

def string_literal_value(doc: SourceDocument, node: Node) -> Optional[str]:
    """
    Value of a plain string literal ('log' or "log").
    Literals with escape sequences are treated as computed keys.
    """
    if node.type != "string":
        return None
    parts = []
    for child in node.named_children:
        if child.type != "string_fragment":
            return None
        parts.append(doc.get_node_text(child))
    return "".join(parts)


__all__ = ["CallSiteMatcher", "match_call", "MatchResult", "NO_MATCH", "DEFAULT_RECEIVER", "string_literal_value"]

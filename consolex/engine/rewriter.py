"""
Context-aware removal of matched call sites.

Every matched call is classified by the syntactic role of its parent and
removed with the rule of that role:

  STATEMENT  the call is the whole expression statement -> delete the statement
  SEQUENCE   the call is an operand of a comma sequence -> excise the operand
  OTHER      anything else -> replace the call by the inert placeholder

Removals are planned as range edits against the original text; the tree
itself is never modified, so spans stay valid for the whole pass.
"""

from __future__ import annotations

import enum
import logging
import re
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .context import ProcessingContext
from .matcher import CallSiteMatcher
from .tree_sitter_support import SourceDocument, Node, node_key, same_node

logger = logging.getLogger(__name__)

PLACEHOLDER = "void 0"

# Containers whose statements can be deleted outright
STATEMENT_LISTS = frozenset({"program", "statement_block", "switch_case", "switch_default"})

# Statements that end with an optional semicolon (subject to ASI)
_ASI_STATEMENTS = frozenset({
    "expression_statement",
    "variable_declaration",
    "lexical_declaration",
    "return_statement",
    "throw_statement",
    "break_statement",
    "continue_statement",
    "do_statement",
    "import_statement",
    "export_statement",
    "debugger_statement",
    "type_alias_declaration",
})

# Compound statements that end with their body statement
_BODY_STATEMENTS = frozenset({
    "for_statement",
    "for_in_statement",
    "while_statement",
    "with_statement",
    "labeled_statement",
})

# A line starting with one of these continues the previous statement when it has no `;`
_ASI_HAZARD_CHARS = ("(", "[", "`", "+", "-", "/")

# Statement starts that would be re-read as a declaration or a block
_AMBIGUOUS_STATEMENT_START = re.compile(r"^(\{|function\b|class\b|let\s*\[|async\s+function\b)")

# (parent type, field of the child) -> placeholder must be parenthesized there
_TIGHT_SLOTS = frozenset({
    ("member_expression", "object"),
    ("subscript_expression", "object"),
    ("call_expression", "function"),
    ("new_expression", "constructor"),
    ("binary_expression", "left"),
})
_TIGHT_PARENTS = frozenset({"class_heritage", "extends_clause", "decorator"})


class ParentRole(enum.Enum):
    STATEMENT = "statement"
    SEQUENCE = "sequence"
    OTHER = "other"


@dataclass(frozen=True)
class CallSite:
    """A matched call and the node its removal rule operates on."""
    call: Node
    member: str
    role: ParentRole
    # STATEMENT: the expression statement; SEQUENCE: the outermost sequence;
    # OTHER: the call itself
    holder: Node
    # SEQUENCE only: the direct operand of the sequence (call or its parentheses)
    operand: Optional[Node] = None


def classify(call: Node) -> Tuple[ParentRole, Node, Optional[Node]]:
    """
    Determine the parent role of a matched call.

    Returns:
        (role, holder, operand) as stored in CallSite
    """
    child = call
    parent = call.parent
    # (console.log(x)); is still a statement-level call
    while parent is not None and parent.type == "parenthesized_expression":
        child = parent
        parent = parent.parent

    if parent is None:
        return ParentRole.OTHER, call, None

    if parent.type == "expression_statement" and not _is_for_header(parent):
        return ParentRole.STATEMENT, parent, None

    if parent.type == "sequence_expression":
        outer = parent
        while outer.parent is not None and outer.parent.type == "sequence_expression":
            outer = outer.parent
        return ParentRole.SEQUENCE, outer, child

    return ParentRole.OTHER, call, None


def _is_for_header(statement: Node) -> bool:
    """Older grammars model `for (init; cond; ...)` clauses as expression statements."""
    parent = statement.parent
    if parent is None or parent.type != "for_statement":
        return False
    return not same_node(parent.child_by_field_name("body"), statement)


def sequence_operands(sequence: Node) -> List[Node]:
    """Operands of a comma sequence, flattened across nested sequence nodes."""
    operands: List[Node] = []
    for child in sequence.named_children:
        if child.type == "comment":
            continue
        if child.type == "sequence_expression":
            operands.extend(sequence_operands(child))
        else:
            operands.append(child)
    return operands


def _field_of(parent: Node, child: Node, field: str) -> bool:
    return same_node(parent.child_by_field_name(field), child)


class ContextAwareRewriter:
    """
    Plans the removal of every matched call site of a document.
    """

    def __init__(self, matcher: CallSiteMatcher):
        self.matcher = matcher

    # ============= Collection ===========

    def collect(self, doc: SourceDocument) -> List[CallSite]:
        """
        Pre-order walk over the whole tree. The subtree of a matched call is
        not visited: its callee and arguments go away together with it.
        """
        sites: List[CallSite] = []
        pruned = set()

        def descend(node: Node) -> bool:
            return node_key(node) not in pruned

        for node in doc.walk_tree(descend=descend):
            if node.type != "call_expression":
                continue
            result = self.matcher.match(doc, node)
            if not result.hit:
                continue
            pruned.add(node_key(node))
            role, holder, operand = classify(node)
            sites.append(CallSite(node, result.member, role, holder, operand))

        return sites

    # ============= Rewriting ===========

    def apply(self, context: ProcessingContext) -> List[CallSite]:
        """
        Plan edits for all matched calls and record them in the metrics.

        Returns:
            Matched call sites in document order
        """
        sites = self.collect(context.doc)
        if not sites:
            return sites

        statements: List[CallSite] = []
        sequences: Dict[Tuple[int, int, str], List[CallSite]] = {}
        placeholders: List[CallSite] = []
        for site in sites:
            if site.role is ParentRole.STATEMENT:
                statements.append(site)
            elif site.role is ParentRole.SEQUENCE:
                sequences.setdefault(node_key(site.holder), []).append(site)
            else:
                placeholders.append(site)

        deleted = {node_key(s.holder) for s in statements}
        for site in placeholders:
            self._replace_with_placeholder(context, site.call, deleted)

        for group in sequences.values():
            self._excise_from_sequence(context, group, deleted)

        if statements:
            self._remove_statements(context, [s.holder for s in statements])

        for site in sites:
            context.metrics.mark_call_removed(site.member, site.role.value)
            logger.debug(
                "removed %s.%s at line %d (%s)",
                self.matcher.receiver, site.member, site.call.start_point[0] + 1, site.role.value,
            )
        return sites

    # ---- OTHER ----

    def _replace_with_placeholder(self, context: ProcessingContext, node: Node, deleted: set) -> None:
        doc = context.doc
        text = PLACEHOLDER
        if self._needs_parens(doc, node):
            text = f"({PLACEHOLDER})"
            stmt = _statement_started_by(node)
            if stmt is not None and _unterminated_before(doc, stmt, deleted):
                # `(void 0)` must not continue the previous statement
                text = ";" + text
        context.replace_node(node, text, "call_placeholder")

    @staticmethod
    def _needs_parens(doc: SourceDocument, node: Node) -> bool:
        """True where a unary `void` expression would not parse as the same operand."""
        parent = node.parent
        if parent is None:
            return False
        if parent.type in _TIGHT_PARENTS:
            return True
        for parent_type, field in _TIGHT_SLOTS:
            if parent.type == parent_type and _field_of(parent, node, field):
                if parent_type == "binary_expression":
                    operator = parent.child_by_field_name("operator")
                    return operator is not None and operator.type == "**"
                return True
        return False

    # ---- SEQUENCE ----

    def _excise_from_sequence(self, context: ProcessingContext, group: List[CallSite], deleted: set) -> None:
        doc = context.doc
        sequence = group[0].holder
        operands = sequence_operands(sequence)
        removed = {node_key(site.operand) for site in group if site.operand is not None}
        kept = [i for i, op in enumerate(operands) if node_key(op) not in removed]

        if not kept:
            context.replace_node(sequence, PLACEHOLDER, "sequence_placeholder")
            return

        if len(kept) == 1:
            self._collapse_to_operand(context, sequence, operands[kept[0]], deleted)
            return

        first_kept, last_kept = kept[0], kept[-1]
        opener = closer = ""
        if first_kept > 0 and _is_statement_expression(sequence):
            opener, closer = _reopen_statement(doc, sequence.parent, doc.get_node_text(operands[first_kept]), deleted)
        if opener:
            start, _ = doc.get_node_range(sequence)
            first_start, _ = doc.get_node_range(operands[first_kept])
            context.editor.add_replacement(start, first_start, opener, "sequence_operand")
        if closer:
            _, end = doc.get_node_range(sequence)
            context.editor.add_replacement(end, end, closer, "sequence_operand")

        for i, op in enumerate(operands):
            if node_key(op) not in removed:
                continue
            if opener and i < first_kept:
                continue
            if i < last_kept:
                # Operand together with the separator that follows it
                context.delete_between(op.start_byte, operands[i + 1].start_byte, "sequence_operand")
        if last_kept < len(operands) - 1:
            # Trailing run of removed operands, with the separator before it
            context.delete_between(operands[last_kept].end_byte, operands[-1].end_byte, "sequence_operand")

    def _collapse_to_operand(self, context: ProcessingContext, sequence: Node, operand: Node, deleted: set) -> None:
        """
        Replace a sequence by its only remaining operand. Edits inside the
        operand are kept: only the text around it is deleted.
        """
        doc = context.doc
        target = sequence
        wrapper = sequence.parent
        if wrapper is not None and wrapper.type == "parenthesized_expression" and self._accepts_bare_operand(doc, wrapper, operand):
            target = wrapper

        opener = closer = ""
        if operand.start_byte > target.start_byte and _is_statement_expression(target):
            opener, closer = _reopen_statement(doc, target.parent, doc.get_node_text(operand), deleted)

        start, end = doc.get_node_range(target)
        op_start, op_end = doc.get_node_range(operand)
        if opener:
            context.editor.add_replacement(start, op_start, opener, "sequence_collapse")
        else:
            context.delete_between(target.start_byte, operand.start_byte, "sequence_collapse")
        if closer:
            context.editor.add_replacement(op_end, end, closer, "sequence_collapse")
        else:
            context.delete_between(operand.end_byte, target.end_byte, "sequence_collapse")

    @staticmethod
    def _accepts_bare_operand(doc: SourceDocument, wrapper: Node, operand: Node) -> bool:
        """
        True when the parenthesized sequence sits in a slot that takes any
        assignment-level expression, so its parentheses become redundant.
        """
        slot = wrapper.parent
        if slot is None:
            return False
        kind = slot.type
        if kind in ("assignment_expression", "augmented_assignment_expression", "assignment_pattern"):
            return _field_of(slot, wrapper, "right")
        if kind in ("variable_declarator", "pair", "public_field_definition", "field_definition"):
            return _field_of(slot, wrapper, "value")
        if kind in ("arguments", "array", "spread_element", "jsx_expression", "template_substitution", "return_statement"):
            return True
        if kind == "expression_statement":
            return not _AMBIGUOUS_STATEMENT_START.match(doc.get_node_text(operand))
        return False

    # ---- STATEMENT ----

    def _remove_statements(self, context: ProcessingContext, statements: List[Node]) -> None:
        doc = context.doc
        deleted = {node_key(s) for s in statements}
        ranges: List[Tuple[int, int]] = []

        for stmt in statements:
            parent = stmt.parent
            if parent is None or parent.type not in STATEMENT_LISTS:
                # if/else branch, loop body, label: the slot needs a statement
                context.replace_node(stmt, "{}", "statement_block")
            elif self._asi_hazard(doc, stmt, deleted):
                context.replace_node(stmt, ";", "statement_semicolon")
            else:
                ranges.append(doc.get_node_range(stmt))

        for start, end in line_aware_ranges(doc.text, ranges):
            context.editor.add_deletion(start, end, "statement")

    @staticmethod
    def _asi_hazard(doc: SourceDocument, stmt: Node, deleted: set) -> bool:
        """
        Deleting the statement would glue its neighbours into one statement
        under automatic semicolon insertion (`a = b` followed by `[1].map(...)`).
        """
        nxt = stmt.next_named_sibling
        while nxt is not None and nxt.type == "comment":
            nxt = nxt.next_named_sibling
        if nxt is None or node_key(nxt) in deleted:
            # Only the last statement of a deleted run decides
            return False
        if not doc.get_node_text(nxt).startswith(_ASI_HAZARD_CHARS):
            return False
        return _unterminated_before(doc, stmt, deleted)


def _is_statement_expression(node: Node) -> bool:
    return node.parent is not None and node.parent.type == "expression_statement"


def _reopen_statement(doc: SourceDocument, statement: Node, head: str, deleted: set) -> Tuple[str, str]:
    """
    Text around an expression that becomes the new start of a statement:
    parentheses when it would read as a block or declaration, and a leading
    `;` when it would continue an unterminated previous statement.
    """
    opener, closer = ("(", ")") if _AMBIGUOUS_STATEMENT_START.match(head) else ("", "")
    if (opener or head.startswith(_ASI_HAZARD_CHARS)) and _unterminated_before(doc, statement, deleted):
        opener = ";" + opener
    return opener, closer


def _statement_started_by(node: Node) -> Optional[Node]:
    """Expression statement whose first token is the node's first token, if any."""
    current = node
    while current.parent is not None and current.parent.start_byte == node.start_byte:
        current = current.parent
        if current.type == "expression_statement":
            return current
    return None


def _trailing_statement(stmt: Node) -> Node:
    """Innermost statement that ends `stmt`: `if (x) a = b` ends with `a = b`."""
    while True:
        if stmt.type == "if_statement":
            nxt = stmt.child_by_field_name("alternative")
            if nxt is None:
                nxt = stmt.child_by_field_name("consequence")
        elif stmt.type in _BODY_STATEMENTS:
            nxt = stmt.child_by_field_name("body")
        elif stmt.type == "else_clause":
            children = [c for c in stmt.named_children if c.type != "comment"]
            nxt = children[-1] if children else None
        else:
            return stmt
        if nxt is None:
            return stmt
        stmt = nxt


def _unterminated_before(doc: SourceDocument, stmt: Node, deleted: set) -> bool:
    """The closest surviving statement before `stmt` ends without `;`."""
    prev = stmt.prev_named_sibling
    while prev is not None and (prev.type == "comment" or node_key(prev) in deleted):
        prev = prev.prev_named_sibling
    if prev is None:
        return False
    last = _trailing_statement(prev)
    if last.type not in _ASI_STATEMENTS:
        return False
    return not doc.get_node_text(last).rstrip().endswith(";")


def line_aware_ranges(text: str, ranges: List[Tuple[int, int]]) -> List[Tuple[int, int]]:
    """
    Expand statement deletion ranges so that no stray indentation or empty
    line is left behind.

    - Ranges separated only by spaces/tabs are merged.
    - A range that is the only content of its lines removes the whole lines,
      line break included.
    - Otherwise the horizontal whitespace separating it from the neighbouring
      code on the same line is removed with it.
    - When whole-line removal would leave two blank lines adjacent, one of
      them is removed as well.
    - A trailing blank line left at the end of the text is removed too.
    """
    if not ranges:
        return []

    merged: List[List[int]] = []
    for start, end in sorted(ranges):
        if merged and text[merged[-1][1]:start].strip(" \t") == "":
            merged[-1][1] = max(merged[-1][1], end)
        else:
            merged.append([start, end])

    whole_lines: List[List[int]] = []
    partial: List[Tuple[int, int]] = []
    for start, end in merged:
        line_start = text.rfind("\n", 0, start) + 1
        line_end = text.find("\n", end)
        if line_end == -1:
            line_end = len(text)
        prefix, suffix = text[line_start:start], text[end:line_end]

        if not prefix.strip() and not suffix.strip():
            stop = line_end + 1 if line_end < len(text) else line_end
            if whole_lines and whole_lines[-1][1] == line_start:
                whole_lines[-1][1] = stop
            else:
                whole_lines.append([line_start, stop])
        elif suffix.strip():
            partial.append((start, end + len(suffix) - len(suffix.lstrip(" \t"))))
        else:
            partial.append((start - (len(prefix) - len(prefix.rstrip(" \t"))), end))

    result = list(partial)
    for start, end in whole_lines:
        if start > 0 and end < len(text) and _blank_line_before(text, start) and _blank_line_at(text, end):
            next_break = text.find("\n", end)
            end = next_break + 1 if next_break != -1 else len(text)
        elif start > 0 and end == len(text) and _blank_line_before(text, start):
            # Last line of the text: drop the blank line above it instead
            start = text.rfind("\n", 0, start - 1) + 1
        result.append((start, end))
    return sorted(result)


def _blank_line_before(text: str, line_start: int) -> bool:
    prev_start = text.rfind("\n", 0, line_start - 1) + 1
    return text[prev_start:line_start - 1].strip() == ""


def _blank_line_at(text: str, line_start: int) -> bool:
    line_end = text.find("\n", line_start)
    if line_end == -1:
        line_end = len(text)
    return text[line_start:line_end].strip() == ""


__all__ = [
    "ContextAwareRewriter",
    "CallSite",
    "ParentRole",
    "PLACEHOLDER",
    "classify",
    "sequence_operands",
    "line_aware_ranges",
]

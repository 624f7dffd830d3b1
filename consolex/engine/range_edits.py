"""
Range-based text editing system for code transformations.
Applies planned edits to the original text so that everything outside the
edited ranges is preserved byte for byte.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass
class TextRange:
    """Represents a range in text by character positions."""
    start_char: int
    end_char: int

    def __post_init__(self):
        if self.start_char > self.end_char:
            raise ValueError(f"Invalid range: start_char ({self.start_char}) > end_char ({self.end_char})")

    @property
    def length(self) -> int:
        return self.end_char - self.start_char

    def overlaps(self, other: TextRange) -> bool:
        """Check if this range overlaps with another."""
        return not (self.end_char <= other.start_char or other.end_char <= self.start_char)

    def contains(self, other: TextRange) -> bool:
        """Check if this range completely contains another."""
        return self.start_char <= other.start_char and other.end_char <= self.end_char


@dataclass
class Edit:
    """Represents a single text edit operation using character positions."""
    range: TextRange
    replacement: str
    type: Optional[str]  # Type for counter in metadata


class RangeEditor:
    """
    Unicode-safe range-based text editor that works with character positions.
    """

    def __init__(self, original_text: str):
        self.original_text = original_text
        self.edits: List[Edit] = []

    def add_edit(self, start_char: int, end_char: int, replacement: str, edit_type: Optional[str]) -> None:
        """
        Add an edit operation using character positions.
        Conflicts are resolved by width: wider edits always win, equal widths keep the first.
        """
        char_range = TextRange(start_char, end_char)
        new_width = char_range.length

        edits_to_remove = []
        for i, existing in enumerate(self.edits):
            if char_range.overlaps(existing.range):
                if new_width > existing.range.length:
                    edits_to_remove.append(i)
                else:
                    logger.debug("edit %s [%d:%d] absorbed by %s", edit_type, start_char, end_char, existing.type)
                    return

        for i in reversed(edits_to_remove):
            del self.edits[i]

        self.edits.append(Edit(char_range, replacement, edit_type))

    def add_deletion(self, start_char: int, end_char: int, edit_type: Optional[str]) -> None:
        """Add a deletion operation (empty replacement)."""
        self.add_edit(start_char, end_char, "", edit_type)

    def add_replacement(self, start_char: int, end_char: int, replacement: str, edit_type: Optional[str]) -> None:
        """Add a replacement operation."""
        self.add_edit(start_char, end_char, replacement, edit_type)

    def validate_edits(self) -> List[str]:
        """
        Validate that all edits are within bounds.
        Overlap conflicts are filtered at add_edit stage (width-based policy).
        """
        errors = []
        for i, edit in enumerate(self.edits):
            if edit.range.start_char < 0:
                errors.append(f"Edit {i}: start_char ({edit.range.start_char}) is negative")
            if edit.range.end_char > len(self.original_text):
                errors.append(f"Edit {i}: end_char ({edit.range.end_char}) exceeds text length ({len(self.original_text)})")
        return errors

    def apply_edits(self) -> Tuple[str, Dict[str, Any]]:
        """
        Apply all edits and return the modified text and statistics.

        Raises:
            ValueError: If an edit lies outside the original text
        """
        validation_errors = self.validate_edits()
        if validation_errors:
            raise ValueError(f"Edit validation failed: {'; '.join(validation_errors)}")

        stats = {
            "edits_applied": len(self.edits),
            "chars_removed": 0,
            "chars_added": 0,
            "lines_removed": 0,
        }
        if not self.edits:
            return self.original_text, stats

        # Apply from end to beginning so earlier positions stay valid
        parts: List[str] = []
        cursor = len(self.original_text)
        for edit in sorted(self.edits, key=lambda e: (e.range.start_char, e.range.end_char), reverse=True):
            original_chunk = self.original_text[edit.range.start_char:edit.range.end_char]
            parts.append(self.original_text[edit.range.end_char:cursor])
            parts.append(edit.replacement)
            cursor = edit.range.start_char

            stats["chars_removed"] += len(original_chunk)
            stats["chars_added"] += len(edit.replacement)
            stats["lines_removed"] += original_chunk.count("\n") - edit.replacement.count("\n")
        parts.append(self.original_text[:cursor])

        return "".join(reversed(parts)), stats

    def get_edit_summary(self) -> Dict[str, Any]:
        """Get summary of planned edits without applying them."""
        edit_types: Dict[str, int] = {}
        for edit in self.edits:
            if edit.type:
                edit_types[edit.type] = edit_types.get(edit.type, 0) + 1
        return {"total_edits": len(self.edits), "edit_types": edit_types}

"""
Dialect capability sets and grammar selection.

A dialect decides which tree-sitter grammar parses a source unit and which
optional syntax extensions are accepted in it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

GrammarName = str  # "javascript" | "typescript" | "tsx"


@dataclass(frozen=True)
class Dialect:
    """Capability set of a source dialect."""
    name: str
    markup: bool = False           # JSX elements inside expressions
    types: bool = False            # TypeScript type annotations
    decorators: bool = True
    top_level_await: bool = True
    optional_chaining: bool = True
    dynamic_import: bool = True

    @property
    def grammar(self) -> GrammarName:
        """Grammar that implements this capability set."""
        if self.types and self.markup:
            return "tsx"
        if self.types:
            return "typescript"
        # The JavaScript grammar always understands JSX
        return "javascript"


JAVASCRIPT = Dialect("javascript", markup=True)
TYPESCRIPT = Dialect("typescript", types=True)
TSX = Dialect("tsx", markup=True, types=True)

_BY_EXT: Dict[str, Dialect] = {
    ".js": JAVASCRIPT,
    ".jsx": JAVASCRIPT,
    ".mjs": JAVASCRIPT,
    ".cjs": JAVASCRIPT,
    ".ts": TYPESCRIPT,
    ".mts": TYPESCRIPT,
    ".cts": TYPESCRIPT,
    ".tsx": TSX,
}

# Alternatives tried when the preferred grammar rejects a file whose dialect was
# only guessed from its extension (e.g. type annotations in a .js file).
_FALLBACKS: Dict[GrammarName, Tuple[Dialect, ...]] = {
    "javascript": (TSX, TYPESCRIPT),
    "typescript": (TSX,),
    "tsx": (TYPESCRIPT, JAVASCRIPT),
}


def normalize_ext(ext: Optional[str]) -> str:
    """'ts', '.TS', 'file.ts' suffix -> '.ts'."""
    if not ext:
        return ""
    ext = ext.lower()
    return ext if ext.startswith(".") else "." + ext


def dialect_for_ext(ext: Optional[str]) -> Dialect:
    """
    Preferred dialect for a file extension.
    Unknown extensions get the most permissive dialect (TSX).
    """
    return _BY_EXT.get(normalize_ext(ext), TSX)


def fallback_dialects(dialect: Dialect) -> Tuple[Dialect, ...]:
    return _FALLBACKS.get(dialect.grammar, ())


def supported_extensions() -> Tuple[str, ...]:
    return tuple(sorted(_BY_EXT))


__all__ = [
    "Dialect",
    "JAVASCRIPT",
    "TYPESCRIPT",
    "TSX",
    "normalize_ext",
    "dialect_for_ext",
    "fallback_dialects",
    "supported_extensions",
]

from __future__ import annotations

# Public API of the engine package:
#  • remove_calls: single-file transformation
#  • parse_source: dialect-aware parsing with syntax error reporting
#  • Dialect presets for the supported grammars
from .dialect import Dialect, JAVASCRIPT, TSX, TYPESCRIPT, dialect_for_ext
from .matcher import DEFAULT_RECEIVER
from .parser import parse_source
from .rewriter import PLACEHOLDER
from .transform import remove_calls

__all__ = [
    "remove_calls",
    "parse_source",
    "Dialect",
    "JAVASCRIPT",
    "TYPESCRIPT",
    "TSX",
    "dialect_for_ext",
    "DEFAULT_RECEIVER",
    "PLACEHOLDER",
]

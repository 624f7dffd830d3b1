from __future__ import annotations

from .engine import remove_calls
from .errors import ConsolexUserError, ConfigError, GenerationError, ParseError
from .types import TransformResult

__all__ = [
    "remove_calls",
    "TransformResult",
    "ConsolexUserError",
    "ConfigError",
    "GenerationError",
    "ParseError",
]

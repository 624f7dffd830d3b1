"""
Base exceptions for user-facing errors.

All expected errors that should be displayed to the user
as clean messages (without stack traces) must inherit from ConsolexUserError.

Programming errors and bugs should NOT inherit from ConsolexUserError:
they will propagate with full tracebacks.
"""

from __future__ import annotations

from typing import Optional


class ConsolexUserError(Exception):
    """
    Base class for all user-facing errors in consolex.

    These errors indicate problems that the user can fix or that are
    attributable to a single input file: malformed sources, bad configuration.
    """
    pass


class ConfigError(ConsolexUserError):
    """Malformed configuration file or option value."""
    pass


class ParseError(ConsolexUserError):
    """
    Source text could not be parsed under the requested dialect.

    Attributes:
        line: 1-based line of the first offending token
        column: 1-based column (in characters) of the first offending token
        cause: Short human-readable cause ("unexpected token ...", "missing ')'", ...)
    """

    def __init__(self, cause: str, line: int, column: int):
        self.cause = cause
        self.line = line
        self.column = column
        super().__init__(f"{cause} at line {line}, column {column}")


class GenerationError(ConsolexUserError):
    """
    Internal invariant violated while producing output text.
    Fatal for the file being processed, never for the whole run.
    """

    def __init__(self, message: str, detail: Optional[str] = None):
        self.detail = detail
        super().__init__(message if not detail else f"{message}: {detail}")


__all__ = ["ConsolexUserError", "ConfigError", "ParseError", "GenerationError"]

"""
Shared test infrastructure for consolex.

Modules:
- file_utils: creating source trees in temporary projects
- cli_utils: running the command line tool
- engine_utils: shortcuts around the single-file engine
"""

from .file_utils import write, write_project
from .cli_utils import run_cli, jload
from .engine_utils import remove, parse_doc, calls_in

__all__ = [
    "write",
    "write_project",
    "run_cli",
    "jload",
    "remove",
    "parse_doc",
    "calls_in",
]

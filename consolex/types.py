from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Literal, Mapping, Optional, Tuple

# ---- Aliases for clarity ----
SourceType = Literal["module", "script"]
FileStatus = Literal["modified", "unchanged", "failed"]


# ---- Engine result ----

@dataclass(frozen=True)
class TransformResult:
    """
    Outcome of one parse -> match -> rewrite -> generate cycle.
    """
    output_text: str
    modified: bool
    removed_count: int
    # member name -> number of removed call sites ("log" -> 3)
    removed_by_member: Mapping[str, int] = field(default_factory=dict)
    # None when the source was never parsed (empty target set)
    source_type: Optional[SourceType] = None


# ---- Project processing ----

@dataclass(frozen=True)
class RunOptions:
    """
    Effective options of a project run (defaults < config file < CLI).
    """
    project_path: Path
    types: Tuple[str, ...]
    extensions: Tuple[str, ...]
    exclude: Tuple[str, ...] = ()
    receiver: str = "console"
    dry_run: bool = False
    respect_gitignore: bool = True
    jobs: int = 1
    verify: bool = True


@dataclass(frozen=True)
class FileOutcome:
    """
    Result of processing a single file. Independent from all other files.
    """
    abs_path: Path
    rel_path: str  # relative to the project root, POSIX separators
    status: FileStatus
    removed_count: int = 0
    removed_by_member: Mapping[str, int] = field(default_factory=dict)
    error: Optional[str] = None  # cause string when status == "failed"


@dataclass
class ProjectResult:
    """
    Aggregated result of a project run. Outcomes are sorted by rel_path,
    so the result does not depend on the processing order.
    """
    dry_run: bool
    outcomes: List[FileOutcome] = field(default_factory=list)

    @property
    def files_scanned(self) -> int:
        return len(self.outcomes)

    @property
    def modified_files(self) -> List[str]:
        return [o.rel_path for o in self.outcomes if o.status == "modified"]

    @property
    def files_modified(self) -> int:
        return len(self.modified_files)

    @property
    def calls_removed(self) -> int:
        return sum(o.removed_count for o in self.outcomes if o.status == "modified")

    @property
    def failures(self) -> List[FileOutcome]:
        return [o for o in self.outcomes if o.status == "failed"]

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly representation used by `consolex --json`."""
        return {
            "dryRun": self.dry_run,
            "filesScanned": self.files_scanned,
            "filesModified": self.files_modified,
            "callsRemoved": self.calls_removed,
            "modifiedFiles": self.modified_files,
            "failures": [{"path": o.rel_path, "error": o.error} for o in self.failures],
            "files": [
                {
                    "path": o.rel_path,
                    "status": o.status,
                    "removed": o.removed_count,
                    "byMember": dict(o.removed_by_member),
                }
                for o in self.outcomes
            ],
        }

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Set

import pathspec


def read_text(path: Path) -> str:
    # newline="" keeps CRLF line endings intact for the write-back
    with path.open(encoding="utf-8", newline="") as f:
        return f.read()


def write_text(path: Path, text: str) -> None:
    with path.open("w", encoding="utf-8", newline="") as f:
        f.write(text)


def normalize_extensions(extensions: Iterable[str]) -> Set[str]:
    """['js', '.TS'] -> {'.js', '.ts'}"""
    result = set()
    for ext in extensions:
        ext = ext.strip().lower()
        if ext:
            result.add(ext if ext.startswith(".") else "." + ext)
    return result


def build_exclude_spec(patterns: Sequence[str]) -> Optional[pathspec.PathSpec]:
    """
    Build PathSpec from exclusion patterns (gitwildmatch semantics).
    A bare name such as 'node_modules' matches that name at any depth.
    """
    lines = [p.strip() for p in patterns if p.strip()]
    if not lines:
        return None
    return pathspec.PathSpec.from_lines("gitwildmatch", lines)


def build_gitignore_spec(root: Path) -> Optional[pathspec.PathSpec]:
    """
    Build PathSpec from .gitignore. Return None if .gitignore is missing.
    """
    gitignore = root / ".gitignore"
    if not gitignore.is_file():
        return None
    lines = []
    for ln in gitignore.read_text(encoding="utf-8", errors="ignore").splitlines():
        ln = ln.strip()
        if ln and not ln.startswith("#"):
            lines.append(ln)
    if not lines:
        return None
    return pathspec.PathSpec.from_lines("gitwildmatch", lines)


def iter_source_files(
    root: Path,
    *,
    extensions: Set[str],
    specs: Sequence[Optional[pathspec.PathSpec]] = (),
) -> Iterable[Path]:
    """
    Recursive file iterator with early directory pruning.
    Paths matched by any of the specs (directories or files) are skipped.
    """
    root = root.resolve()
    active = [s for s in specs if s is not None]

    def excluded(rel_posix: str) -> bool:
        return any(s.match_file(rel_posix) for s in active)

    for dirpath, dirnames, filenames in os.walk(root):
        # Do not enter .git
        if ".git" in dirnames:
            dirnames.remove(".git")

        keep: List[str] = []
        for d in sorted(dirnames):
            rel_dir = Path(dirpath, d).relative_to(root).as_posix()
            if not excluded(rel_dir + "/"):
                keep.append(d)
        dirnames[:] = keep

        for fn in sorted(filenames):
            p = Path(dirpath, fn)
            if p.suffix.lower() not in extensions:
                continue
            if excluded(p.relative_to(root).as_posix()):
                continue
            yield p


def discover_files(
    root: Path,
    extensions: Iterable[str],
    exclude: Sequence[str],
    respect_gitignore: bool = True,
) -> List[Path]:
    """De-duplicated, sorted candidate files of a project."""
    specs = [build_exclude_spec(exclude)]
    if respect_gitignore:
        specs.append(build_gitignore_spec(root.resolve()))
    files = set(iter_source_files(root, extensions=normalize_extensions(extensions), specs=specs))
    return sorted(files)


__all__ = [
    "read_text",
    "write_text",
    "normalize_extensions",
    "build_exclude_spec",
    "build_gitignore_spec",
    "iter_source_files",
    "discover_files",
]

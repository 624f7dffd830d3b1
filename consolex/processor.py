"""
Project processor.

Runs the transformation engine over every candidate file of a project.
Each file is processed independently: a failure in one file is recorded as
its outcome and never aborts the others.
"""

from __future__ import annotations

import concurrent.futures
import logging
from pathlib import Path
from typing import Dict, List

from .engine import remove_calls
from .errors import ConsolexUserError
from .fs import discover_files, read_text, write_text
from .types import FileOutcome, ProjectResult, RunOptions

logger = logging.getLogger(__name__)


def process_file(path: Path, options: RunOptions) -> FileOutcome:
    """
    Process one file: read, transform, write back when modified.

    Args:
        path: Absolute path of the file
        options: Effective run options

    Returns:
        Outcome of the file (modified, unchanged or failed with a cause)
    """
    root = options.project_path.resolve()
    rel = _rel_path(path, root)

    try:
        raw_text = read_text(path)
        result = remove_calls(
            raw_text,
            options.types,
            ext=path.suffix,
            receiver=options.receiver,
            verify=options.verify,
        )
        if result.modified and not options.dry_run:
            write_text(path, result.output_text)
    except (ConsolexUserError, OSError, UnicodeDecodeError) as e:
        logger.debug("Skipped %s: %s", rel, e)
        return FileOutcome(abs_path=path, rel_path=rel, status="failed", error=str(e))

    if not result.modified:
        logger.debug("%s: nothing to remove", rel)
        return FileOutcome(abs_path=path, rel_path=rel, status="unchanged")

    logger.debug("%s: %d call(s) removed", rel, result.removed_count)
    return FileOutcome(
        abs_path=path,
        rel_path=rel,
        status="modified",
        removed_count=result.removed_count,
        removed_by_member=dict(result.removed_by_member),
    )


def _rel_path(path: Path, root: Path) -> str:
    try:
        return path.resolve().relative_to(root).as_posix()
    except ValueError:
        return path.as_posix()


def remove_calls_from_project(options: RunOptions) -> ProjectResult:
    """
    Discover candidate files and process them, sequentially or on a thread pool.

    Returns:
        ProjectResult with outcomes sorted by relative path
    """
    files = discover_files(
        options.project_path,
        options.extensions,
        options.exclude,
        respect_gitignore=options.respect_gitignore,
    )
    logger.debug("%d candidate file(s) under %s", len(files), options.project_path)

    if options.jobs > 1 and len(files) > 1:
        outcomes = _process_parallel(files, options)
    else:
        outcomes = [process_file(fp, options) for fp in files]

    outcomes.sort(key=lambda o: o.rel_path)
    return ProjectResult(dry_run=options.dry_run, outcomes=outcomes)


def _process_parallel(files: List[Path], options: RunOptions) -> List[FileOutcome]:
    results: Dict[Path, FileOutcome] = {}
    with concurrent.futures.ThreadPoolExecutor(max_workers=options.jobs) as ex:
        future_map = {ex.submit(process_file, fp, options): fp for fp in files}
        try:
            for fut in concurrent.futures.as_completed(future_map):
                results[future_map[fut]] = fut.result()
        except KeyboardInterrupt:
            # Stop scheduling; files already written stay written
            ex.shutdown(wait=False, cancel_futures=True)
            raise
    return list(results.values())


__all__ = ["process_file", "remove_calls_from_project"]

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .config import RemoverCfg, load_config, split_csv
from .engine.dialect import supported_extensions
from .errors import ConfigError, ConsolexUserError
from .fs import normalize_extensions
from .processor import remove_calls_from_project
from .types import ProjectResult, RunOptions
from .version import tool_version

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="consolex",
        description="Remove console statements from your project",
        add_help=True,
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {tool_version()}")
    p.add_argument(
        "-t", "--types",
        help="console methods to remove, comma-separated (default: log,error,warn,info,debug,...)",
    )
    p.add_argument(
        "-p", "--path",
        default=".",
        help="project path (default: current directory)",
    )
    p.add_argument(
        "-e", "--extensions",
        help="file extensions to process, comma-separated (default: js,ts,jsx,tsx)",
    )
    p.add_argument(
        "--exclude",
        help="exclude patterns, comma-separated (default: node_modules,dist,build,.git)",
    )
    p.add_argument(
        "--dry-run",
        action="store_true",
        help="show what would be removed without actually removing",
    )
    p.add_argument(
        "--receiver",
        help="global object whose methods are removed (default: console)",
    )
    p.add_argument(
        "--config",
        metavar="FILE",
        help="configuration file (default: <path>/.consolex.yaml when present)",
    )
    p.add_argument(
        "--no-gitignore",
        action="store_true",
        help="do not skip files ignored by .gitignore",
    )
    p.add_argument(
        "-j", "--jobs",
        type=int,
        help="number of files processed in parallel",
    )
    p.add_argument(
        "--no-verify",
        action="store_true",
        help="skip re-parsing of the produced output",
    )
    p.add_argument(
        "--json",
        action="store_true",
        help="print the result as JSON",
    )
    p.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="verbose logging to stderr",
    )
    return p


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    h = logging.StreamHandler()
    h.setFormatter(logging.Formatter("[%(levelname)s] %(message)s"))
    root = logging.getLogger("consolex")
    root.handlers[:] = [h]
    root.setLevel(level)
    root.propagate = False


def _options(ns: argparse.Namespace) -> RunOptions:
    root = Path(ns.path)
    if not root.is_dir():
        raise ConfigError(f"Project path is not a directory: {root}")

    cfg = load_config(root, Path(ns.config) if ns.config else None)
    cfg = cfg.merged(
        types=split_csv(ns.types) if ns.types is not None else None,
        extensions=split_csv(ns.extensions) if ns.extensions is not None else None,
        exclude=split_csv(ns.exclude) if ns.exclude is not None else None,
        receiver=ns.receiver,
        respect_gitignore=False if ns.no_gitignore else None,
        jobs=ns.jobs,
        verify=False if ns.no_verify else None,
    )
    _validate(cfg)

    return RunOptions(
        project_path=root,
        types=tuple(cfg.types),
        extensions=tuple(cfg.extensions),
        exclude=tuple(cfg.exclude),
        receiver=cfg.receiver,
        dry_run=bool(ns.dry_run),
        respect_gitignore=cfg.respect_gitignore,
        jobs=cfg.jobs,
        verify=cfg.verify,
    )


def _validate(cfg: RemoverCfg) -> None:
    if not cfg.types:
        raise ConfigError("No console types given")
    if not cfg.extensions:
        raise ConfigError("No file extensions given")
    if cfg.jobs < 1:
        raise ConfigError("--jobs must be a positive integer")
    if not cfg.receiver.strip():
        raise ConfigError("--receiver must not be empty")

    unknown = sorted(normalize_extensions(cfg.extensions) - set(supported_extensions()))
    if unknown:
        logger.warning("No dedicated grammar for %s; parsed as tsx", ", ".join(unknown))


def _print_header(opts: RunOptions) -> None:
    out = sys.stdout
    out.write("Starting console removal...\n")
    out.write(f"Path: {opts.project_path}\n")
    out.write(f"Types: {', '.join(opts.types)}\n")
    out.write(f"Extensions: {', '.join(opts.extensions)}\n")
    out.write(f"Dry run: {'Yes' if opts.dry_run else 'No'}\n")
    out.write("\n")


def _print_report(result: ProjectResult, receiver: str) -> None:
    out = sys.stdout
    what = f"{receiver} statements"
    for o in result.outcomes:
        if o.status == "modified":
            if result.dry_run:
                out.write(f"[DRY RUN] {o.rel_path}: {o.removed_count} {what} would be removed\n")
            else:
                out.write(f"✓ {o.rel_path}: {o.removed_count} {what} removed\n")
        elif o.status == "failed":
            out.write(f"Skipped {o.rel_path}: {o.error}\n")

    if result.files_modified == 0:
        out.write("No files found to process\n")
        return

    out.write(f"Processed {result.files_modified} files\n")
    out.write(f"Removed {result.calls_removed} {what}\n")
    if result.dry_run:
        out.write(f"\nDry run completed. Use without --dry-run to actually remove {what}.\n")


def main(argv: Optional[List[str]] = None) -> int:
    ns = _build_parser().parse_args(argv)
    _setup_logging(bool(ns.verbose))

    try:
        opts = _options(ns)
        if not ns.json:
            _print_header(opts)
        result = remove_calls_from_project(opts)
    except ConfigError as e:
        sys.stderr.write(f"Error: {e}\n")
        return 2
    except ConsolexUserError as e:
        sys.stderr.write(f"Error: {e}\n")
        return 1

    if ns.json:
        sys.stdout.write(json.dumps(result.to_dict(), ensure_ascii=False, indent=2) + "\n")
    else:
        _print_report(result, opts.receiver)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

from pathlib import Path

import pytest

from consolex import processor
from consolex.processor import process_file, remove_calls_from_project
from consolex.types import RunOptions
from tests.infrastructure.file_utils import read, write, write_project

TYPES = ("log", "error", "warn", "info", "debug")
EXTS = ("js", "ts", "jsx", "tsx")
EXCLUDE = ("node_modules", "dist", "build", ".git")


def _opts(root: Path, **kw) -> RunOptions:
    base = dict(project_path=root, types=TYPES, extensions=EXTS, exclude=EXCLUDE)
    base.update(kw)
    return RunOptions(**base)


def test_project_run_rewrites_matching_files(tmpproj: Path):
    result = remove_calls_from_project(_opts(tmpproj))

    assert result.files_scanned == 3
    assert result.modified_files == ["src/app.js", "src/util.ts"]
    assert result.calls_removed == 2
    assert result.failures == []

    assert read(tmpproj / "src/app.js") == "import x from './x';\nrun(x);\n"
    assert read(tmpproj / "src/util.ts") == "export function f(a: number) {\n  return a * 2;\n}\n"
    # excluded and ignored files are never touched
    assert read(tmpproj / "node_modules/lib/index.js") == "console.log('vendor');\n"
    assert read(tmpproj / "dist/bundle.js") == "console.log('built');\n"
    assert read(tmpproj / "generated/out.js") == "console.log('generated');\n"


def test_dry_run_writes_nothing(tmpproj: Path):
    before = read(tmpproj / "src/app.js")
    result = remove_calls_from_project(_opts(tmpproj, dry_run=True))
    assert result.dry_run is True
    assert result.modified_files == ["src/app.js", "src/util.ts"]
    assert read(tmpproj / "src/app.js") == before


def test_failures_are_isolated(tmpproj: Path):
    write(tmpproj / "src/broken.js", "console.log(;\nfunction {\n")
    result = remove_calls_from_project(_opts(tmpproj))

    assert [f.rel_path for f in result.failures] == ["src/broken.js"]
    assert "line" in result.failures[0].error
    assert result.modified_files == ["src/app.js", "src/util.ts"]
    assert read(tmpproj / "src/broken.js") == "console.log(;\nfunction {\n"


def test_undecodable_file_is_a_failure(tmpproj: Path):
    (tmpproj / "src/latin1.js").write_bytes(b"console.log('\xe9');\n")
    result = remove_calls_from_project(_opts(tmpproj))
    assert [f.rel_path for f in result.failures] == ["src/latin1.js"]


def test_parallel_run_matches_sequential(tmp_path: Path):
    files = {f"pkg{i}/m{j}.js": f"console.log({i});\nuse({j});\n" for i in range(4) for j in range(5)}
    seq_root = write_project(tmp_path / "seq", files)
    par_root = write_project(tmp_path / "par", files)

    seq = remove_calls_from_project(_opts(seq_root, jobs=1))
    par = remove_calls_from_project(_opts(par_root, jobs=8))

    assert par.to_dict() == seq.to_dict()
    assert par.files_modified == 20
    for rel in files:
        assert read(par_root / rel) == read(seq_root / rel)


def test_crlf_file_round_trip(tmp_path: Path):
    write(tmp_path / "a.js", "a();\r\nconsole.log(1);\r\nb();\r\n")
    remove_calls_from_project(_opts(tmp_path))
    assert (tmp_path / "a.js").read_bytes() == b"a();\r\nb();\r\n"


def test_unchanged_file_is_not_rewritten(tmp_path: Path):
    p = write(tmp_path / "a.js", "foo();\n")
    mtime = p.stat().st_mtime_ns
    outcome = process_file(p.resolve(), _opts(tmp_path))
    assert outcome.status == "unchanged"
    assert outcome.rel_path == "a.js"
    assert p.stat().st_mtime_ns == mtime


def test_outcome_counts_by_member(tmp_path: Path):
    p = write(tmp_path / "a.ts", "console.log(1);\nconsole.warn(2);\nconsole.log(3);\n")
    outcome = process_file(p.resolve(), _opts(tmp_path))
    assert outcome.status == "modified"
    assert outcome.removed_count == 3
    assert dict(outcome.removed_by_member) == {"log": 2, "warn": 1}


def test_custom_receiver_and_types(tmp_path: Path):
    write(tmp_path / "a.js", "logger.trace(1);\nconsole.trace(2);\n")
    result = remove_calls_from_project(_opts(tmp_path, types=("trace",), receiver="logger"))
    assert result.calls_removed == 1
    assert read(tmp_path / "a.js") == "console.trace(2);\n"


def test_json_shape(tmpproj: Path):
    data = remove_calls_from_project(_opts(tmpproj, dry_run=True)).to_dict()
    assert data["dryRun"] is True
    assert data["filesScanned"] == 3
    assert data["filesModified"] == 2
    assert data["callsRemoved"] == 2
    assert data["modifiedFiles"] == ["src/app.js", "src/util.ts"]
    assert data["failures"] == []
    by_path = {f["path"]: f for f in data["files"]}
    assert by_path["src/clean.jsx"]["status"] == "unchanged"
    assert by_path["src/util.ts"]["byMember"] == {"debug": 1}


def test_parallel_run_stops_on_interrupt(tmp_path: Path, monkeypatch):
    root = write_project(tmp_path, {f"m{i}.js": "console.log(1);\n" for i in range(6)})
    real = processor.process_file

    def interrupted(path: Path, options: RunOptions):
        if path.name == "m3.js":
            raise KeyboardInterrupt
        return real(path, options)

    monkeypatch.setattr(processor, "process_file", interrupted)
    with pytest.raises(KeyboardInterrupt):
        remove_calls_from_project(_opts(root, jobs=2))

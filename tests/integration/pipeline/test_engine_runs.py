from __future__ import annotations

"""
Integration tests for the Processing Engine.

Runs complete file and directory conversions on temporary crates and
checks the artifacts, the statistics and the error reporting.
"""

import os
from pathlib import Path
from typing import List

import pytest

from codecontext.core.pipeline.engine import (
    process_directory,
    process_file,
    process_path,
    run_pipeline,
)
from codecontext.domain.errors import CodeContextError, FileProcessingError, ParseError
from codecontext.domain.pipeline_models import ProcessOptions

ELIDE = ProcessOptions(remove_bodies=True)


def _tree(root: Path) -> List[str]:
    return sorted(str(p.relative_to(root)).replace(os.sep, "/") for p in root.rglob("*"))


# -----------------------------------------------------------------------------
# Single file input
# -----------------------------------------------------------------------------

def test_file_input_writes_sibling_artifact(tmp_path: Path, basic_source: str) -> None:
    source = tmp_path / "math.rs"
    source.write_text(basic_source, encoding="utf-8")

    stats = process_path(str(source), ELIDE)

    artifact = tmp_path / "math.rs.txt"
    assert artifact.read_text(encoding="utf-8") == (
        "fn add(a: i32, b: i32) -> i32 { /* ... */ }\n"
        "fn greet() -> String { format!(\"hi\") }\n"
    )
    assert stats.files_processed == 1
    assert stats.input_size == len(basic_source.encode("utf-8"))
    assert stats.output_size == artifact.stat().st_size
    assert 0.0 < stats.reduction_percentage() <= 100.0


def test_process_file_returns_sizes(tmp_path: Path) -> None:
    source = tmp_path / "main.rs"
    source.write_text("fn main() {}\n", encoding="utf-8")

    input_size, output_size, tokens = process_file(str(source), str(tmp_path / "out.txt"), ProcessOptions())

    assert input_size == 13
    assert output_size == 13
    assert tokens == 0


def test_crlf_input_size_matches_file_size(tmp_path: Path) -> None:
    source = tmp_path / "a.rs"
    source.write_bytes(b"fn a() -> i32 {\r\n    1\r\n}\r\n")

    stats = process_path(str(source), ProcessOptions(dry_run=True))

    assert stats.files_processed == 1
    assert stats.input_size == source.stat().st_size == 27
    assert not (tmp_path / "a.rs.txt").exists()


def test_file_input_with_other_extension_is_skipped(tmp_path: Path) -> None:
    previous = tmp_path / "a.rs.txt"
    previous.write_text("fn a() {}\n", encoding="utf-8")

    stats = process_path(str(previous), ELIDE)

    assert stats.files_processed == 0
    assert stats.input_size == 0
    assert not (tmp_path / "a.rs.txt.txt").exists()

def test_missing_input_is_reported(tmp_path: Path) -> None:
    with pytest.raises(CodeContextError, match="does not exist"):
        process_path(str(tmp_path / "does_not_exist.rs"), ELIDE)


def test_invalid_source_names_the_file(tmp_path: Path) -> None:
    source = tmp_path / "broken.rs"
    source.write_text("fn broken( {\n", encoding="utf-8")

    with pytest.raises(FileProcessingError) as excinfo:
        process_path(str(source), ELIDE)

    assert excinfo.value.path == str(source)
    assert isinstance(excinfo.value.cause, ParseError)
    assert not (tmp_path / "broken.rs.txt").exists()

# -----------------------------------------------------------------------------
# Directory input
# -----------------------------------------------------------------------------

def test_directory_input_mirrors_sources(rust_project: Path) -> None:
    stats = process_path(str(rust_project), ELIDE)

    out = rust_project.parent / "crate-code-context"
    assert _tree(out) == ["src", "src/lib.rs.txt", "src/net", "src/net/mod.rs.txt"]
    assert stats.files_processed == 2
    assert "fn add(a: i32, b: i32) -> i32 { /* ... */ }" in (out / "src" / "net" / "mod.rs.txt").read_text(encoding="utf-8")


def test_custom_output_dir_name(rust_project: Path) -> None:
    process_path(str(rust_project), ELIDE, output_dir_name="ctx")
    assert (rust_project.parent / "crate-ctx" / "src" / "lib.rs.txt").is_file()


def test_single_file_mode_combines_in_walk_order(rust_project: Path) -> None:
    options = ProcessOptions(remove_bodies=True, single_file=True)
    stats = process_path(str(rust_project), options)

    out = rust_project.parent / "crate-code-context"
    assert _tree(out) == ["code_context.rs.txt"]

    combined = (out / "code_context.rs.txt").read_text(encoding="utf-8")
    assert combined.startswith("\n// File: src/lib.rs\n\n//! Geometry helpers.\n")
    assert combined.index("// File: src/lib.rs") < combined.index("// File: src/net/mod.rs")
    assert "fn greet() -> String { format!(\"hi\") }\n\n" in combined
    assert stats.files_processed == 2


def test_dry_run_creates_nothing(rust_project: Path) -> None:
    before = _tree(rust_project.parent)

    for single_file in (False, True):
        options = ProcessOptions(remove_bodies=True, dry_run=True, single_file=single_file)
        stats = process_path(str(rust_project), options)

        assert stats.files_processed == 2
        assert stats.input_size > 0
        assert stats.output_size > 0

    assert _tree(rust_project.parent) == before


def test_excluded_directories_can_be_included(rust_project: Path) -> None:
    options = ProcessOptions(dry_run=True, exclude_patterns=())
    stats = process_directory(str(rust_project), str(rust_project.parent / "unused"), options)
    assert stats.files_processed == 4


def test_gitignore_patterns_are_applied(rust_project: Path) -> None:
    (rust_project / ".gitignore").write_text("net/\n", encoding="utf-8")
    options = ProcessOptions(dry_run=True, respect_gitignore=True)
    assert process_path(str(rust_project), options).files_processed == 1


def test_directory_failure_stops_run(rust_project: Path) -> None:
    (rust_project / "src" / "bad.rs").write_text("struct {\n", encoding="utf-8")
    with pytest.raises(FileProcessingError) as excinfo:
        process_path(str(rust_project), ELIDE)
    assert excinfo.value.path.endswith("bad.rs")

# -----------------------------------------------------------------------------
# Pipeline facade
# -----------------------------------------------------------------------------

def test_run_pipeline_success(rust_project: Path) -> None:
    result = run_pipeline({
        "input_path": str(rust_project),
        "remove_bodies": True,
        "single_file": True,
        "dry_run": True,
    })

    assert result.ok
    assert result.error == ""
    assert result.output_path.endswith(os.path.join("crate-code-context", "code_context.rs.txt"))
    assert result.stats.files_processed == 2
    assert result.summary["files_processed"] == 2
    assert result.remove_bodies and result.single_file and result.dry_run


def test_run_pipeline_missing_input(tmp_path: Path) -> None:
    result = run_pipeline({"input_path": str(tmp_path / "nope")})
    assert not result.ok
    assert "does not exist" in result.error


def test_run_pipeline_reports_parse_failure(tmp_path: Path) -> None:
    (tmp_path / "bad.rs").write_text("fn (", encoding="utf-8")
    result = run_pipeline({"input_path": str(tmp_path / "bad.rs")})
    assert not result.ok
    assert "bad.rs" in result.error


def test_run_pipeline_counts_tokens(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("codecontext.core.pipeline.engine.count_tokens", lambda text, model: 7)
    (tmp_path / "lib.rs").write_text("fn a() {}\n", encoding="utf-8")

    result = run_pipeline({"input_path": str(tmp_path / "lib.rs"), "count_tokens": True, "dry_run": True})

    assert result.ok
    assert result.stats.output_tokens == 7

from __future__ import annotations

"""
Unit tests for the Source File Filters.

Verifies:
1. Regex compilation and matching logic.
2. Suffix-based extension matching.
3. Translation of .gitignore globs.
"""

import re
from pathlib import Path

from codecontext.core.pipeline.components.filters import (
    _gitignore_to_regex,
    compile_patterns,
    default_exclude_patterns,
    has_extension,
    load_gitignore_patterns,
    matches_any,
)


def test_compile_patterns_handles_valid_and_invalid():
    """Verify that valid patterns compile and invalid ones are skipped."""
    compiled = compile_patterns([r"^valid.*", r"[invalid_regex", r"normal"])

    assert len(compiled) == 2
    assert isinstance(compiled[0], re.Pattern)


def test_matches_any_logic():
    compiled = compile_patterns([r"^ignore_me", r".*\.tmp$"])

    assert matches_any("ignore_me_folder", compiled) is True
    assert matches_any("file.tmp", compiled) is True
    assert matches_any("keep_me.rs", compiled) is False


def test_default_exclusions_block_hidden_entries_and_target():
    defaults = compile_patterns(default_exclude_patterns())

    for name in (".git", ".cargo", "target"):
        assert matches_any(name, defaults), f"'{name}' should be excluded"
    for name in ("src", "targets", "lib.rs", "my_target"):
        assert not matches_any(name, defaults), f"'{name}' should be kept"


def test_has_extension_matches_suffix_only():
    assert has_extension("lib.rs", [".rs"])
    assert not has_extension("lib.rs.txt", [".rs"])
    assert has_extension("build.toml", [".rs", ".toml"])
    assert not has_extension("rs", [".rs"])


def test_gitignore_to_regex_anchors_names():
    rx = re.compile(_gitignore_to_regex("*.bak"))
    assert rx.search("old.bak")
    assert not rx.search("old.bak.rs")

    dir_rx = re.compile(_gitignore_to_regex("generated/"))
    assert dir_rx.search("generated")
    assert not dir_rx.search("pregenerated")


def test_load_gitignore_patterns(tmp_path: Path):
    (tmp_path / ".gitignore").write_text("# comment\n\n*.bak\n!keep.rs\nvendor/\n", encoding="utf-8")

    patterns = load_gitignore_patterns(str(tmp_path))

    assert len(patterns) == 2
    assert matches_any("vendor", compile_patterns(patterns))


def test_load_gitignore_patterns_without_file(tmp_path: Path):
    assert load_gitignore_patterns(str(tmp_path)) == []

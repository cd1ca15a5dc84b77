from __future__ import annotations

"""
Global Pytest Configuration and Fixtures.

This module sets up the testing environment, including:
1. Path manipulation to ensure the 'src' directory is importable.
2. Isolation of the user data directory and of the logging setup.
3. Shared Rust sources and project trees used across test layers.
"""

import os
import sys
from pathlib import Path
from typing import Iterator

import pytest

# -----------------------------------------------------------------------------
# Path Configuration
# -----------------------------------------------------------------------------
_SRC_PATH = os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src"))
if _SRC_PATH not in sys.path:
    sys.path.insert(0, _SRC_PATH)

from codecontext.infra.logging import shutdown_logging  # noqa: E402

# -----------------------------------------------------------------------------
# Sample Sources
# -----------------------------------------------------------------------------
BASIC_SOURCE = """\
fn add(a: i32, b: i32) -> i32 { a + b }

fn greet() -> String { format!("hi") }

#[test]
fn test_add() { assert_eq!(add(1, 2), 3); }
"""

LIBRARY_SOURCE = """\
//! Geometry helpers.

use std::fmt;

/// A point in the plane.
#[derive(Debug, Clone)]
pub struct Point {
    /// Horizontal coordinate.
    pub x: i32,
    pub y: i32,
}

impl Clone for Point {
    fn clone(&self) -> Self {
        Point { x: self.x, y: self.y }
    }
}

impl fmt::Display for Point {
    fn fmt(&self, f: &mut fmt::Formatter) -> fmt::Result {
        write!(f, "({}, {})", self.x, self.y)
    }
}

impl Point {
    /// Creates a point.
    pub fn new(x: i32, y: i32) -> Self {
        Point { x, y }
    }

    pub fn label(&self) -> Option<String> {
        Some(format!("P{}", self.x))
    }
}

#[cfg(test)]
mod tests {
    use super::*;

    #[test]
    fn builds() {
        assert_eq!(Point::new(1, 2).x, 1);
    }
}
"""


# -----------------------------------------------------------------------------
# Shared Fixtures
# -----------------------------------------------------------------------------
@pytest.fixture(autouse=True)
def isolated_home(tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point '~' to a scratch directory so no test touches the real user config."""
    home = tmp_path_factory.mktemp("home")
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("USERPROFILE", str(home))
    return home


@pytest.fixture(autouse=True)
def reset_logging() -> Iterator[None]:
    """Detach the package's logging handlers after every test."""
    yield
    shutdown_logging()


@pytest.fixture
def basic_source() -> str:
    return BASIC_SOURCE


@pytest.fixture
def library_source() -> str:
    return LIBRARY_SOURCE


@pytest.fixture
def rust_project(tmp_path: Path) -> Path:
    """
    Create a small crate layout.

    Structure:
    /crate
      /src
        lib.rs
        /net
          mod.rs
      /target
        generated.rs
      /.git
        hook.rs
      Cargo.toml
    """
    root = tmp_path / "crate"
    (root / "src" / "net").mkdir(parents=True)
    (root / "target").mkdir()
    (root / ".git").mkdir()

    (root / "src" / "lib.rs").write_text(LIBRARY_SOURCE, encoding="utf-8")
    (root / "src" / "net" / "mod.rs").write_text(BASIC_SOURCE, encoding="utf-8")
    (root / "target" / "generated.rs").write_text("fn generated() {}\n", encoding="utf-8")
    (root / ".git" / "hook.rs").write_text("fn hook() {}\n", encoding="utf-8")
    (root / "Cargo.toml").write_text("[package]\nname = \"demo\"\n", encoding="utf-8")

    return root

from __future__ import annotations

"""
End-to-End (E2E) CLI Tests.

Invokes the entry point in a subprocess and validates exit codes, stream
output and the artifacts written to disk.
"""

import json
import os
import subprocess
import sys
from pathlib import Path
from typing import List, Optional

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
SRC_DIR = PROJECT_ROOT / "src"


def run_cli(args: List[str], home: Path, cwd: Optional[Path] = None) -> subprocess.CompletedProcess[str]:
    """
    Execute the CLI in a separate process.

    Injects the 'src' directory into PYTHONPATH so the package resolves
    without being installed, and points HOME at a scratch directory.
    """
    env = os.environ.copy()
    env["PYTHONPATH"] = str(SRC_DIR) + os.pathsep + env.get("PYTHONPATH", "")
    env["HOME"] = str(home)
    env["USERPROFILE"] = str(home)

    cmd = [sys.executable, "-m", "codecontext.main"] + args
    return subprocess.run(cmd, cwd=cwd, env=env, capture_output=True, text=True, timeout=120)


def test_e2e_help(isolated_home: Path) -> None:
    result = run_cli(["--help"], isolated_home)

    assert result.returncode == 0
    assert "--no-function-bodies" in result.stdout


def test_e2e_missing_input(tmp_path: Path, isolated_home: Path) -> None:
    result = run_cli([str(tmp_path / "ghost")], isolated_home)

    assert result.returncode == 2
    assert "does not exist" in result.stderr


def test_e2e_directory_run(rust_project: Path, isolated_home: Path) -> None:
    result = run_cli([str(rust_project), "--no-function-bodies", "--no-comments"], isolated_home)

    assert result.returncode == 0, result.stderr
    assert "Files processed: 2" in result.stdout
    assert "Total input size:" in result.stdout

    out_dir = rust_project.parent / "crate-code-context"
    lib = (out_dir / "src" / "lib.rs.txt").read_text(encoding="utf-8")
    assert "mod tests" not in lib
    assert "//" not in lib
    assert (out_dir / "src" / "net" / "mod.rs.txt").exists()
    assert not (out_dir / "target").exists()


def test_e2e_single_file_json(rust_project: Path, isolated_home: Path) -> None:
    result = run_cli([str(rust_project), "--single-file", "--json", "-o", "ctx"], isolated_home)

    assert result.returncode == 0, result.stderr
    payload = json.loads(result.stdout)
    combined = Path(payload["output_path"])

    assert combined == rust_project.parent / "crate-ctx" / "code_context.rs.txt"
    text = combined.read_text(encoding="utf-8")
    assert text.index("// File: src/lib.rs") < text.index("// File: src/net/mod.rs")


def test_e2e_dry_run_writes_nothing(rust_project: Path, isolated_home: Path) -> None:
    result = run_cli([str(rust_project), "--dry-run"], isolated_home)

    assert result.returncode == 0, result.stderr
    assert "Dry run" in result.stdout
    assert not (rust_project.parent / "crate-code-context").exists()

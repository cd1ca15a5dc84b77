from __future__ import annotations

"""
FileSystem Helpers.

Path normalization, output location rules and the small I/O primitives the
processing engine uses to read sources and write condensed artifacts.
"""

import os
from typing import Optional

from codecontext.domain.constants import DEFAULT_OUTPUT_DIR_NAME, OUTPUT_SUFFIX

UNIX_APP_DIR_NAME = ".codecontext"

# -----------------------------------------------------------------------------
# PATH RESOLUTION API
# -----------------------------------------------------------------------------

def get_user_data_dir() -> str:
    """
    Directory holding the user configuration file and persistent logs.

    Resolves to '~/.codecontext' and is created on first use.

    Returns:
        str: Absolute path to the data directory.
    """
    path = os.path.join(os.path.expanduser("~"), UNIX_APP_DIR_NAME)
    try:
        os.makedirs(path, exist_ok=True)
    except OSError:
        pass
    return os.path.abspath(path)


def normalize_path(path: Optional[str], fallback: str) -> str:
    """
    Expand '~' and environment variables and make a path absolute.

    Args:
        path: Raw path string, may be empty.
        fallback: Path used when 'path' is empty.

    Returns:
        str: Absolute normalized path.
    """
    p = (path or "").strip() or fallback
    p = os.path.expandvars(os.path.expanduser(p))
    return os.path.abspath(p)


def get_output_path(input_path: str, output_dir_name: Optional[str] = None) -> str:
    """
    Compute where the condensed output of an input path goes.

    A file 'foo/bar.rs' maps to 'foo/bar.rs.txt'. A directory 'foo/bar' maps
    to the sibling directory 'foo/bar-<output_dir_name>'.

    Args:
        input_path: Source file or directory.
        output_dir_name: Suffix of the output directory name.

    Returns:
        str: Output file or directory path.
    """
    if os.path.isfile(input_path):
        return input_path + OUTPUT_SUFFIX

    name = (output_dir_name or "").strip() or DEFAULT_OUTPUT_DIR_NAME
    base = input_path.rstrip("/\\") or input_path
    return f"{base}-{name}"

# -----------------------------------------------------------------------------
# I/O PRIMITIVES
# -----------------------------------------------------------------------------

def read_source(path: str) -> str:
    """
    Read a UTF-8 source file exactly as stored.

    Line endings are not translated, so the length of the encoded text is
    the size of the file on disk.

    Raises:
        OSError: If the file cannot be read.
        UnicodeDecodeError: If the file is not valid UTF-8.
    """
    with open(path, "r", encoding="utf-8", newline="") as f:
        return f.read()


def write_text(path: str, content: str) -> None:
    """Write UTF-8 text, creating parent directories."""
    parent = os.path.dirname(path)
    if parent:
        os.makedirs(parent, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="\n") as f:
        f.write(content)


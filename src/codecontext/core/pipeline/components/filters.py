from __future__ import annotations

"""
Source File Filtering.

Regex-based exclusion of directory and file names, extension matching and
translation of '.gitignore' globs into the same regex form.
"""

import fnmatch
import logging
import os
import re
from typing import List

from codecontext.domain.constants import SOURCE_EXTENSION

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# CONFIGURATION DEFAULTS
# -----------------------------------------------------------------------------

def default_extensions() -> List[str]:
    """Extensions of the files the condenser rewrites."""
    return [SOURCE_EXTENSION]


def default_exclude_patterns() -> List[str]:
    """
    Names pruned from the directory walk by default.

    Hidden entries ('.git', '.cargo', ...) and Cargo's 'target' build
    directory.
    """
    return [
        r"^\.",
        r"^target$",
    ]

# -----------------------------------------------------------------------------
# PATTERN COMPILATION AND MATCHING
# -----------------------------------------------------------------------------

def compile_patterns(patterns: List[str]) -> List[re.Pattern]:
    """
    Compile regex strings, discarding malformed ones.

    Args:
        patterns: Raw regex strings.

    Returns:
        List[re.Pattern]: Compiled patterns, in input order.
    """
    compiled: List[re.Pattern] = []
    for p in patterns:
        try:
            compiled.append(re.compile(p))
        except re.error as e:
            logger.warning(f"Ignoring invalid exclude pattern '{p}': {e}")
    return compiled


def matches_any(name: str, compiled_patterns: List[re.Pattern]) -> bool:
    """True when the name matches at least one pattern."""
    return any(rx.search(name) for rx in compiled_patterns)


def has_extension(file_name: str, extensions: List[str]) -> bool:
    """
    Check a file name against the extension whitelist.

    Matching is done on the name suffix, so 'lib.rs.txt' never matches '.rs'.
    """
    return any(file_name.endswith(ext) for ext in extensions)

# -----------------------------------------------------------------------------
# GITIGNORE INTEGRATION
# -----------------------------------------------------------------------------

def load_gitignore_patterns(root_path: str) -> List[str]:
    """
    Read '.gitignore' at the root of the walk and translate it to regexes.

    Negations ('!keep.rs') are not supported and are skipped.

    Args:
        root_path: Directory that may hold a '.gitignore' file.

    Returns:
        List[str]: Equivalent regex strings, empty when there is no file.
    """
    gitignore_path = os.path.join(root_path, ".gitignore")
    if not os.path.isfile(gitignore_path):
        return []

    regex_patterns: List[str] = []
    with open(gitignore_path, "r", encoding="utf-8", errors="replace") as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith(("#", "!")):
                continue
            regex_patterns.append(_gitignore_to_regex(line))

    return regex_patterns


def _gitignore_to_regex(glob_pattern: str) -> str:
    """Translate one glob to a regex matched against a bare entry name."""
    return "^" + fnmatch.translate(glob_pattern.strip("/"))

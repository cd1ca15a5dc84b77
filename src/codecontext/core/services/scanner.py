from __future__ import annotations

"""
Source Discovery Service.

Walks an input directory in lexical order, prunes excluded directories
before descending into them and yields the Rust sources to condense.
"""

import logging
import os
import re
from dataclasses import dataclass
from typing import Iterator, List, Optional

from codecontext.core.pipeline.components.filters import (
    compile_patterns,
    default_exclude_patterns,
    has_extension,
    load_gitignore_patterns,
    matches_any,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SourceFile:
    """
    A discovered source file.

    Attributes:
        file_path: Absolute path.
        rel_path: Path relative to the walk root, with '/' separators.
    """
    file_path: str
    rel_path: str

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def yield_source_files(
        input_path: str,
        extensions: List[str],
        exclude_rx: List[re.Pattern],
) -> Iterator[SourceFile]:
    """
    Traverse a directory tree and yield eligible files.

    Directories and files are visited in sorted order so that repeated runs
    over the same tree produce identical output.

    Args:
        input_path: Root directory.
        extensions: Accepted file name suffixes.
        exclude_rx: Compiled patterns matched against entry names.

    Yields:
        SourceFile: Each eligible file.
    """
    root_abs = os.path.abspath(input_path)

    for root, dirs, files in os.walk(root_abs):
        dirs[:] = sorted(d for d in dirs if not matches_any(d, exclude_rx))

        for file_name in sorted(files):
            if matches_any(file_name, exclude_rx):
                continue
            if not has_extension(file_name, extensions):
                continue

            file_path = os.path.join(root, file_name)
            rel_path = os.path.relpath(file_path, root_abs).replace(os.sep, "/")
            yield SourceFile(file_path=file_path, rel_path=rel_path)


def prepare_exclusions(
        input_path: str,
        exclude_patterns: Optional[List[str]],
        respect_gitignore: bool,
) -> List[re.Pattern]:
    """
    Build the compiled exclusion list for a walk.

    Args:
        input_path: Root directory of the walk.
        exclude_patterns: User patterns; None selects the defaults.
        respect_gitignore: Also apply the root '.gitignore'.

    Returns:
        List[re.Pattern]: Compiled exclusion patterns.
    """
    patterns = list(exclude_patterns) if exclude_patterns is not None else default_exclude_patterns()

    if respect_gitignore:
        git_patterns = load_gitignore_patterns(os.path.abspath(input_path))
        if git_patterns:
            logger.debug(f"Loaded {len(git_patterns)} patterns from .gitignore")
            patterns.extend(git_patterns)

    return compile_patterns(patterns)

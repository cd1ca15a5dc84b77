from __future__ import annotations

"""
Output Persistence.

Writes condensed sources either one artifact per input file or as a single
combined file in which every entry is introduced by a '// File:' header.
Nothing touches the filesystem in a dry run.
"""

import logging
import os
from typing import List

from codecontext.domain.constants import OUTPUT_SUFFIX
from codecontext.infra.fs import write_text

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# FILE OUTPUT MANAGEMENT
# -----------------------------------------------------------------------------

def mirrored_output_path(output_base: str, rel_path: str) -> str:
    """
    Location of the artifact for one file of a directory run.

    Args:
        output_base: Output directory.
        rel_path: Source path relative to the input directory ('/' separated).

    Returns:
        str: '<output_base>/<rel_path>.txt'.
    """
    return os.path.join(output_base, *rel_path.split("/")) + OUTPUT_SUFFIX


def write_artifact(output_path: str, content: str, dry_run: bool) -> None:
    """
    Persist one condensed file.

    Raises:
        OSError: If the directory or file cannot be written.
    """
    if dry_run:
        logger.debug(f"Dry run: skipped writing '{output_path}'")
        return
    write_text(output_path, content)


def format_entry(rel_path: str, content: str) -> str:
    """Render one entry of the combined output file."""
    return f"\n// File: {rel_path}\n\n{content}\n"


class CombinedOutput:
    """
    Accumulator for single-file mode.

    Entries are kept in memory in walk order and written once the whole
    directory has been processed, so a failing file leaves no partial
    artifact behind.
    """

    def __init__(self, output_path: str) -> None:
        self.output_path = output_path
        self._entries: List[str] = []

    def add(self, rel_path: str, content: str) -> None:
        self._entries.append(format_entry(rel_path, content))

    def getvalue(self) -> str:
        return "".join(self._entries)

    def flush(self, dry_run: bool) -> None:
        """Write the combined file unless this is a dry run."""
        write_artifact(self.output_path, self.getvalue(), dry_run)

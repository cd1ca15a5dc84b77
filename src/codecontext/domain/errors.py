from __future__ import annotations

"""
Domain Error Taxonomy.

Failures only originate in the collaborators around the rewriting engine:
parsing, rendering and file I/O. The engine itself is total over any parsed
tree and raises nothing.
"""

from typing import Optional


class CodeContextError(Exception):
    """Base class for all application errors."""


class ParseError(CodeContextError):
    """
    Source text is not valid Rust.

    Attributes:
        line: 1-based line of the first syntax error, when known.
    """

    def __init__(self, message: str, line: Optional[int] = None) -> None:
        super().__init__(message)
        self.line = line


class SerializeError(CodeContextError):
    """A declaration tree could not be rendered back to text."""


class FileProcessingError(CodeContextError):
    """
    Fatal failure while processing one file of a run.

    Attributes:
        path: Offending file.
        cause: Underlying ParseError or OSError.
    """

    def __init__(self, path: str, cause: BaseException) -> None:
        super().__init__(f"Failed to process file '{path}': {cause}")
        self.path = path
        self.cause = cause

from __future__ import annotations

"""
Pipeline Domain Data Models.

Defines the run options, the statistics accumulator and the result object
exchanged between the processing engine and the CLI.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from codecontext.domain.constants import DEFAULT_MODEL_KEY, SOURCE_EXTENSION

# -----------------------------------------------------------------------------
# CORE DATA MODELS
# -----------------------------------------------------------------------------

@dataclass
class ProcessingStats:
    """
    Size accumulator of a processing run.

    Mutated once per completed file by the directory processor only.

    Attributes:
        files_processed: Number of source files rewritten.
        input_size: Total bytes read.
        output_size: Total bytes produced.
        output_tokens: Estimated tokens produced (0 unless counting is enabled).
    """
    files_processed: int = 0
    input_size: int = 0
    output_size: int = 0
    output_tokens: int = 0

    def record(self, input_size: int, output_size: int, output_tokens: int = 0) -> None:
        """Account for one completed file."""
        self.files_processed += 1
        self.input_size += input_size
        self.output_size += output_size
        self.output_tokens += output_tokens

    def reduction_percentage(self) -> float:
        """
        Size reduction achieved by the run.

        Returns:
            float: (1 - output/input) * 100 clamped to [0, 100]; 0 for empty input.
        """
        if self.input_size == 0:
            return 0.0
        ratio = (1.0 - self.output_size / self.input_size) * 100.0
        return max(0.0, min(100.0, ratio))


@dataclass(frozen=True)
class ProcessOptions:
    """
    Flags of a processing run, derived from the validated configuration.

    Attributes:
        remove_comments: Strip doc and plain comments.
        remove_bodies: Elide bodies of functions that do not produce text.
        dry_run: Compute everything but write nothing.
        single_file: Combine a directory into one output file.
        extensions: File name suffixes selected in a directory walk.
        exclude_patterns: Regexes pruning entry names; None selects the defaults.
        respect_gitignore: Also prune entries listed in the root '.gitignore'.
        count_tokens: Estimate output tokens.
        target_model: Model identifier used for token estimation.
    """
    remove_comments: bool = False
    remove_bodies: bool = False
    dry_run: bool = False
    single_file: bool = False
    extensions: Tuple[str, ...] = (SOURCE_EXTENSION,)
    exclude_patterns: Optional[Tuple[str, ...]] = None
    respect_gitignore: bool = False
    count_tokens: bool = False
    target_model: str = DEFAULT_MODEL_KEY

    @classmethod
    def from_config(cls, cfg: Dict[str, Any]) -> "ProcessOptions":
        """Build options from a validated configuration dictionary."""
        exclude = cfg.get("exclude_patterns")
        return cls(
            remove_comments=bool(cfg.get("remove_comments", False)),
            remove_bodies=bool(cfg.get("remove_bodies", False)),
            dry_run=bool(cfg.get("dry_run", False)),
            single_file=bool(cfg.get("single_file", False)),
            extensions=tuple(cfg.get("extensions") or (SOURCE_EXTENSION,)),
            exclude_patterns=tuple(exclude) if exclude is not None else None,
            respect_gitignore=bool(cfg.get("respect_gitignore", False)),
            count_tokens=bool(cfg.get("count_tokens", False)),
            target_model=str(cfg.get("target_model") or DEFAULT_MODEL_KEY),
        )


@dataclass(frozen=True)
class PipelineResult:
    """
    Unified result object of a complete run.

    Attributes:
        ok: Flag indicating success or failure.
        error: Descriptive message in case of failure.
        input_path: Normalized file or directory processed.
        output_path: Output file or directory (computed even in dry runs).
        remove_comments: Whether comments were stripped.
        remove_bodies: Whether function bodies were elided.
        dry_run: Whether filesystem writes were suppressed.
        single_file: Whether directory output was combined into one file.
        stats: Size statistics of the run.
        summary: Additional execution metadata.
    """
    ok: bool
    error: str

    input_path: str
    output_path: str

    remove_comments: bool
    remove_bodies: bool
    dry_run: bool
    single_file: bool

    stats: ProcessingStats = field(default_factory=ProcessingStats)
    summary: Dict[str, Any] = field(default_factory=dict)

# -----------------------------------------------------------------------------
# FACTORY FUNCTIONS
# -----------------------------------------------------------------------------

def create_error_result(
        error: str,
        cfg: Dict[str, Any],
        input_path: str,
        output_path: str = "",
        summary_extra: Optional[Dict[str, Any]] = None
) -> PipelineResult:
    """
    Create a failed pipeline result instance.

    Args:
        error: Detailed error description.
        cfg: The configuration used during the failed run.
        input_path: The target input path.
        output_path: Calculated output path, if it was resolved.
        summary_extra: Additional metadata for the summary payload.

    Returns:
        PipelineResult: An immutable error result object.
    """
    return PipelineResult(
        ok=False,
        error=error,
        input_path=input_path,
        output_path=output_path,
        remove_comments=bool(cfg.get("remove_comments", False)),
        remove_bodies=bool(cfg.get("remove_bodies", False)),
        dry_run=bool(cfg.get("dry_run", False)),
        single_file=bool(cfg.get("single_file", False)),
        summary=summary_extra or {},
    )


def create_success_result(
        cfg: Dict[str, Any],
        input_path: str,
        output_path: str,
        stats: ProcessingStats,
        summary_extra: Optional[Dict[str, Any]] = None
) -> PipelineResult:
    """
    Create a successful pipeline result instance.

    Args:
        cfg: Final configuration used during execution.
        input_path: Normalized input path.
        output_path: Output file or directory.
        stats: Accumulated processing statistics.
        summary_extra: Final execution metrics.

    Returns:
        PipelineResult: An immutable success result object.
    """
    return PipelineResult(
        ok=True,
        error="",
        input_path=input_path,
        output_path=output_path,
        remove_comments=bool(cfg.get("remove_comments", False)),
        remove_bodies=bool(cfg.get("remove_bodies", False)),
        dry_run=bool(cfg.get("dry_run", False)),
        single_file=bool(cfg.get("single_file", False)),
        stats=stats,
        summary=summary_extra or {},
    )

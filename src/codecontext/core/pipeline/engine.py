from __future__ import annotations

"""
Processing Engine.

Coordinates a condensing run:
1. Resolves the output location of a file or directory input.
2. Walks the input in lexical order and selects the Rust sources.
3. Parses, rewrites and renders every file.
4. Writes mirrored artifacts or one combined file (nothing in a dry run).
5. Accumulates size and token statistics.

Any parse or I/O failure aborts the run with the offending path attached.
"""

import logging
import os
from typing import Any, Dict, Optional, Tuple

from codecontext.core.analysis.body_policy import RewriteOptions
from codecontext.core.analysis.rewriter import CodeTransformer
from codecontext.core.parsing.renderer import render
from codecontext.core.parsing.rust_parser import parse
from codecontext.core.pipeline.components.filters import has_extension
from codecontext.core.pipeline.components.writer import (
    CombinedOutput,
    mirrored_output_path,
    write_artifact,
)
from codecontext.core.pipeline.validator import validate_config
from codecontext.core.processing.tokenizer import count_tokens
from codecontext.core.services.scanner import prepare_exclusions, yield_source_files
from codecontext.domain.constants import COMBINED_OUTPUT_NAME
from codecontext.domain.errors import (
    CodeContextError,
    FileProcessingError,
    ParseError,
    SerializeError,
)
from codecontext.domain.pipeline_models import (
    PipelineResult,
    ProcessOptions,
    ProcessingStats,
    create_error_result,
    create_success_result,
)
from codecontext.infra.fs import get_output_path, normalize_path, read_source

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def condense_source(source: str, remove_comments: bool = False, remove_bodies: bool = False) -> str:
    """
    Condense the text of one Rust file.

    Args:
        source: File content.
        remove_comments: Strip doc and plain comments.
        remove_bodies: Elide bodies of functions that do not produce text.

    Returns:
        str: Rewritten source text.

    Raises:
        ParseError: If the source is not valid Rust.
        SerializeError: If the rewritten tree cannot be printed.
    """
    tree = parse(source)
    transformer = CodeTransformer(RewriteOptions(remove_comments=remove_comments, remove_bodies=remove_bodies))
    transformer.rewrite(tree)
    return render(tree)


def process_file(input_path: str, output_path: str, options: ProcessOptions) -> Tuple[int, int, int]:
    """
    Condense one file and write its artifact.

    Args:
        input_path: Source file.
        output_path: Artifact path.
        options: Run flags.

    Returns:
        Tuple[int, int, int]: (input bytes, output bytes, output tokens).

    Raises:
        FileProcessingError: On read, parse, render or write failure.
    """
    content, input_size = _condense_file(input_path, options)
    try:
        write_artifact(output_path, content, options.dry_run)
    except OSError as e:
        raise FileProcessingError(input_path, e) from e

    return input_size, _byte_size(content), _tokens(content, options)


def process_directory(input_dir: str, output_base: str, options: ProcessOptions) -> ProcessingStats:
    """
    Condense every eligible file below a directory.

    Each file is mirrored as '<output_base>/<rel_path>.txt', or all files are
    combined into '<output_base>/code_context.rs.txt' in single-file mode.

    Args:
        input_dir: Root of the walk.
        output_base: Output directory.
        options: Run flags.

    Returns:
        ProcessingStats: Totals over all processed files.

    Raises:
        FileProcessingError: On the first failing file.
    """
    stats = ProcessingStats()
    exclude_rx = prepare_exclusions(
        input_dir,
        list(options.exclude_patterns) if options.exclude_patterns is not None else None,
        options.respect_gitignore,
    )
    combined = CombinedOutput(os.path.join(output_base, COMBINED_OUTPUT_NAME)) if options.single_file else None

    for source in yield_source_files(input_dir, list(options.extensions), exclude_rx):
        logger.debug(f"Processing {source.rel_path}")

        if combined is not None:
            content, input_size = _condense_file(source.file_path, options)
            combined.add(source.rel_path, content)
            stats.record(input_size, _byte_size(content), _tokens(content, options))
            continue

        output_path = mirrored_output_path(output_base, source.rel_path)
        stats.record(*process_file(source.file_path, output_path, options))

    if combined is not None:
        try:
            combined.flush(options.dry_run)
        except OSError as e:
            raise FileProcessingError(combined.output_path, e) from e

    return stats


def process_path(
        input_path: str,
        options: Optional[ProcessOptions] = None,
        output_dir_name: Optional[str] = None,
) -> ProcessingStats:
    """
    Condense a file or a directory tree.

    A file input whose name does not carry one of the selected extensions
    (a previous '.rs.txt' output, for instance) is skipped and yields empty
    statistics.

    Args:
        input_path: Source file or directory.
        options: Run flags; defaults keep comments and bodies.
        output_dir_name: Suffix of the output directory for directory inputs.

    Returns:
        ProcessingStats: Totals of the run.

    Raises:
        CodeContextError: If the input does not exist.
        FileProcessingError: If any file fails.
    """
    opts = options or ProcessOptions()

    if not os.path.exists(input_path):
        raise CodeContextError(f"Input path does not exist: {input_path}")

    output_base = get_output_path(input_path, output_dir_name)

    if os.path.isfile(input_path):
        stats = ProcessingStats()
        if not has_extension(os.path.basename(input_path), list(opts.extensions)):
            logger.warning(f"Skipping '{input_path}': extension not in {list(opts.extensions)}")
            return stats
        stats.record(*process_file(input_path, output_base, opts))
        return stats

    if not opts.dry_run:
        os.makedirs(output_base, exist_ok=True)
    return process_directory(input_path, output_base, opts)


def run_pipeline(config: Optional[Dict[str, Any]]) -> PipelineResult:
    """
    Execute a complete run from a configuration dictionary.

    Failures are reported through the result object instead of raised.

    Args:
        config: Raw or partial configuration.

    Returns:
        PipelineResult: Status, paths, flags and statistics of the run.
    """
    logger.info("Pipeline execution started.")

    cfg, warnings = validate_config(config, strict=False)
    for warning in warnings:
        logger.warning(f"Configuration Warning: {warning}")

    input_path = normalize_path(cfg.get("input_path", ""), os.getcwd())
    if not os.path.exists(input_path):
        msg = f"Input path does not exist: {input_path}"
        logger.error(msg)
        return create_error_result(msg, cfg, input_path)

    output_path = get_output_path(input_path, cfg["output_dir_name"])
    if os.path.isdir(input_path) and cfg["single_file"]:
        output_path = os.path.join(output_path, COMBINED_OUTPUT_NAME)

    try:
        stats = process_path(input_path, ProcessOptions.from_config(cfg), cfg["output_dir_name"])
    except (CodeContextError, OSError) as e:
        logger.error(f"Pipeline failed: {e}")
        return create_error_result(str(e), cfg, input_path, output_path)

    logger.info(
        f"Processed {stats.files_processed} files: {stats.input_size} -> {stats.output_size} bytes "
        f"({stats.reduction_percentage():.1f}% reduction)"
    )

    summary = {
        "files_processed": stats.files_processed,
        "input_size": stats.input_size,
        "output_size": stats.output_size,
        "reduction_percentage": round(stats.reduction_percentage(), 1),
        "output_tokens": stats.output_tokens,
        "count_tokens": cfg["count_tokens"],
        "target_model": cfg["target_model"],
        "warnings": warnings,
    }
    return create_success_result(cfg, input_path, output_path, stats, summary_extra=summary)

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _condense_file(path: str, options: ProcessOptions) -> Tuple[str, int]:
    """Read and condense one file; returns (content, input bytes)."""
    try:
        source = read_source(path)
        content = condense_source(source, options.remove_comments, options.remove_bodies)
    except (OSError, UnicodeDecodeError, ParseError, SerializeError) as e:
        raise FileProcessingError(path, e) from e
    return content, _byte_size(source)


def _byte_size(text: str) -> int:
    return len(text.encode("utf-8"))


def _tokens(content: str, options: ProcessOptions) -> int:
    if not options.count_tokens:
        return 0
    return count_tokens(content, options.target_model)

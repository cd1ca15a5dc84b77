from __future__ import annotations

"""
Command Line Interface Application Controller.

Runs the CLI lifecycle: logging bootstrap, configuration resolution
(defaults, saved preferences, command line overrides), pipeline execution
and result reporting.

Exit codes: 0 success, 1 processing failure, 2 usage error or missing
input, 130 interrupted.
"""

import json
import os
import sys
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from codecontext.core.pipeline.engine import run_pipeline
from codecontext.core.pipeline.validator import validate_config
from codecontext.domain.config import get_default_config, load_config
from codecontext.domain.pipeline_models import PipelineResult
from codecontext.infra.logging import LoggingConfig, configure_logging, get_logger
from codecontext.interface.cli import args as cli_args

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the CLI workflow.

    Args:
        argv: Command line arguments without the program name; None reads sys.argv.

    Returns:
        int: Process exit code.
    """
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    log_level = "DEBUG" if args.debug else "WARNING"
    configure_logging(
        LoggingConfig(level=log_level, console=True, log_file=args.log_file),
        force=bool(args.debug or args.log_file),
    )

    logger.debug("CLI execution initiated. Resolving configuration...")

    base_conf = get_default_config() if args.use_defaults else load_config(args.config_file)
    overrides = cli_args.args_to_overrides(args)
    clean_conf, warnings = validate_config(_merge_config(base_conf, overrides), strict=False)

    for w in warnings:
        logger.warning(f"Configuration Constraint: {w}")

    if args.dump_config:
        print(json.dumps(clean_conf, ensure_ascii=False, indent=2))
        return EXIT_OK

    if not args.input_path:
        print("ERROR: An input file or directory is required.", file=sys.stderr)
        parser.print_usage(sys.stderr)
        return EXIT_USAGE

    input_path = clean_conf["input_path"]
    if not os.path.exists(input_path):
        msg = f"Input path does not exist: {input_path}"
        logger.error(msg)
        print(f"ERROR: {msg}", file=sys.stderr)
        return EXIT_USAGE

    logger.info(f"Targeting input: {input_path}")
    try:
        result = run_pipeline(clean_conf)
    except KeyboardInterrupt:
        print("Interrupted.", file=sys.stderr)
        return EXIT_INTERRUPTED

    if args.json_output:
        print(json.dumps(asdict(result), ensure_ascii=False, indent=2))
    else:
        _print_human_summary(result, show_stats=bool(clean_conf["show_stats"]))

    return EXIT_OK if result.ok else EXIT_FAILURE

# -----------------------------------------------------------------------------
# CONFIGURATION MERGING
# -----------------------------------------------------------------------------

def _merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """
    Shallow-merge command line overrides into the base configuration.

    Only keys known to the base configuration are taken over.
    """
    out = dict(base)
    for key, value in overrides.items():
        if key in out and value is not None:
            out[key] = value
    return out

# -----------------------------------------------------------------------------
# VIEW RENDERING (HUMAN READABLE)
# -----------------------------------------------------------------------------

def _print_human_summary(result: PipelineResult, show_stats: bool = True) -> None:
    """
    Print the run result for a terminal user.

    Args:
        result: Pipeline result.
        show_stats: Print the size statistics block.
    """
    if not result.ok:
        print(f"ERROR: {result.error}", file=sys.stderr)
        return

    if result.dry_run:
        print(f"Dry run: nothing written (target: {result.output_path})")
    else:
        print(f"Output: {result.output_path}")

    if not show_stats:
        return

    stats = result.stats
    print("\nProcessing Statistics:")
    print(f"Files processed: {stats.files_processed}")
    print(f"Total input size: {stats.input_size} bytes")
    print(f"Total output size: {stats.output_size} bytes")
    print(f"Size reduction: {stats.reduction_percentage():.1f}%")
    if result.summary.get("count_tokens"):
        print(f"Estimated output tokens: {stats.output_tokens:,}")

from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Declares the command line schema and translates the parsed namespace into
configuration overrides. Flags only ever switch a setting on (or off, for
the '--no-*' family), so an absent flag leaves the loaded configuration
untouched.
"""

import argparse
from typing import Any, Dict, List, Optional

from codecontext.domain.constants import DEFAULT_OUTPUT_DIR_NAME

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser of the 'codecontext' command.

    Returns:
        argparse.ArgumentParser: Configured parser.
    """
    p = argparse.ArgumentParser(
        prog="codecontext",
        description=(
            "Condense a Rust source tree for language model context: strip "
            "comments, tests and derived impls, and elide function bodies."
        ),
    )

    # --- Paths ---
    p.add_argument(
        "input_path",
        nargs="?",
        default=None,
        help="Input file or directory path.",
    )
    p.add_argument(
        "-o", "--output-dir",
        dest="output_dir_name",
        default=None,
        help=f"Output directory name suffix (default: '{DEFAULT_OUTPUT_DIR_NAME}').",
    )

    # --- Rewriting ---
    p.add_argument(
        "--no-comments",
        action="store_true",
        help="Remove all comments, including doc comments.",
    )
    p.add_argument(
        "--no-function-bodies",
        action="store_true",
        help="Remove function bodies except for string/serialization methods.",
    )

    # --- Output ---
    p.add_argument(
        "--no-stats",
        action="store_true",
        help="Don't print processing statistics.",
    )
    p.add_argument(
        "--dry-run",
        action="store_true",
        help="Run without writing output files.",
    )
    p.add_argument(
        "--single-file",
        action="store_true",
        help="Output all files into a single combined file.",
    )

    # --- Token Estimation ---
    p.add_argument(
        "--tokens",
        dest="count_tokens",
        action="store_true",
        help="Estimate the token count of the output.",
    )
    p.add_argument(
        "--model",
        dest="target_model",
        default=None,
        help="Model used for token estimation (e.g. 'gpt-4o').",
    )

    # --- Filtering ---
    p.add_argument(
        "--ext",
        dest="extensions",
        default=None,
        help="Comma-separated file extensions to process (default: .rs).",
    )
    p.add_argument(
        "--exclude",
        dest="exclude_patterns",
        default=None,
        help="Comma-separated regexes of directory/file names to skip.",
    )
    p.add_argument(
        "--gitignore",
        dest="respect_gitignore",
        action="store_true",
        help="Also skip entries listed in the input's .gitignore.",
    )

    # --- Configuration and Diagnostics ---
    p.add_argument(
        "--config",
        dest="config_file",
        default=None,
        help="Load settings from this JSON file instead of ~/.codecontext/config.json.",
    )
    p.add_argument(
        "--use-defaults",
        action="store_true",
        help="Ignore the saved configuration file.",
    )
    p.add_argument(
        "--dump-config",
        action="store_true",
        help="Print the effective configuration as JSON and exit.",
    )
    p.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Print the run result as JSON.",
    )
    p.add_argument(
        "--debug",
        action="store_true",
        help="Elevate logging verbosity to DEBUG.",
    )
    p.add_argument(
        "--log-file",
        dest="log_file",
        default=None,
        help="Also write logs to this file.",
    )

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse namespace into configuration overrides.

    Args:
        args: Parsed command line arguments.

    Returns:
        Dict[str, Any]: Only the keys the user actually set.
    """
    overrides: Dict[str, Any] = {}

    if args.input_path:
        overrides["input_path"] = args.input_path
    if args.output_dir_name:
        overrides["output_dir_name"] = args.output_dir_name

    if args.no_comments:
        overrides["remove_comments"] = True
    if args.no_function_bodies:
        overrides["remove_bodies"] = True

    if args.no_stats:
        overrides["show_stats"] = False
    if args.dry_run:
        overrides["dry_run"] = True
    if args.single_file:
        overrides["single_file"] = True

    if args.count_tokens:
        overrides["count_tokens"] = True
    if args.target_model:
        overrides["target_model"] = args.target_model

    if args.extensions:
        overrides["extensions"] = _split_csv(args.extensions)
    if args.exclude_patterns:
        overrides["exclude_patterns"] = _split_csv(args.exclude_patterns)
    if args.respect_gitignore:
        overrides["respect_gitignore"] = True

    return overrides

# -----------------------------------------------------------------------------
# HELPERS
# -----------------------------------------------------------------------------

def _split_csv(value: Optional[str]) -> Optional[List[str]]:
    """Split a comma-separated option into its non-empty parts."""
    if value is None:
        return None
    parts = [x.strip() for x in value.split(",")]
    return [x for x in parts if x]

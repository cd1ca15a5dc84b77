from __future__ import annotations

"""
Configuration Validator.

Normalizes a configuration dictionary before it reaches the pipeline:
missing keys take their defaults, loosely typed values ('yes', 1, CSV
strings) are coerced with a warning, and invalid values fall back to the
default unless strict mode turns them into exceptions.
"""

import logging
from typing import Any, Dict, List, Tuple

from codecontext.core.pipeline.components.filters import (
    default_exclude_patterns,
    default_extensions,
)
from codecontext.domain.config import get_default_config

logger = logging.getLogger(__name__)

_STRING_FIELDS = ("input_path", "output_dir_name", "target_model")

_BOOL_FIELDS = (
    "remove_comments",
    "remove_bodies",
    "dry_run",
    "single_file",
    "show_stats",
    "respect_gitignore",
    "count_tokens",
)

_TRUE_STRINGS = ("true", "1", "yes", "y", "on")
_FALSE_STRINGS = ("false", "0", "no", "n", "off")


def validate_config(
        config: Any,
        *,
        strict: bool = False,
) -> Tuple[Dict[str, Any], List[str]]:
    """
    Validate and normalize a configuration dictionary.

    Args:
        config: Raw configuration (possibly untrusted JSON).
        strict: Raise TypeError/ValueError instead of falling back.

    Returns:
        Tuple[Dict, List[str]]: (Normalized config, warnings).
    """
    warnings: List[str] = []
    defaults = get_default_config()

    if not isinstance(config, dict):
        msg = f"Invalid config type: expected dict, received {type(config).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using defaults.")
        logger.warning(msg)
        return defaults, warnings

    merged: Dict[str, Any] = dict(defaults)
    merged.update(config)

    for field in _STRING_FIELDS:
        merged[field] = _as_str(merged.get(field), defaults[field], field, warnings, strict)

    for field in _BOOL_FIELDS:
        merged[field] = _as_bool(merged.get(field), defaults[field], field, warnings, strict)

    merged["extensions"] = _normalize_extensions(
        _as_list_str(merged.get("extensions"), default_extensions(), "extensions", warnings, strict),
        warnings,
        strict,
    )
    # An explicit empty exclusion list is meaningful (walk everything)
    if merged.get("exclude_patterns") == []:
        merged["exclude_patterns"] = []
    else:
        merged["exclude_patterns"] = _as_list_str(
            merged.get("exclude_patterns"), default_exclude_patterns(), "exclude_patterns", warnings, strict
        )

    for w in warnings:
        logger.debug(f"Config: {w}")

    return merged, warnings

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _as_str(value: Any, fallback: str, field: str, warnings: List[str], strict: bool) -> str:
    if value is None:
        return fallback
    if isinstance(value, str):
        v = value.strip()
        return v if v else fallback
    msg = f"Invalid field '{field}': expected str, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_bool(value: Any, fallback: bool, field: str, warnings: List[str], strict: bool) -> bool:
    if isinstance(value, bool):
        return value
    if value is None:
        return fallback

    if not strict:
        if isinstance(value, (int, float)) and value in (0, 1):
            warnings.append(f"Field '{field}' converted from number {value} to bool.")
            return bool(value)
        if isinstance(value, str):
            s = value.strip().lower()
            if s in _TRUE_STRINGS:
                warnings.append(f"Field '{field}' converted from '{value}' to True.")
                return True
            if s in _FALSE_STRINGS:
                warnings.append(f"Field '{field}' converted from '{value}' to False.")
                return False

    msg = f"Invalid field '{field}': expected bool, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_list_str(value: Any, fallback: List[str], field: str, warnings: List[str], strict: bool) -> List[str]:
    if value is None:
        return list(fallback)

    if isinstance(value, str) and not strict:
        items = [x.strip() for x in value.split(",") if x.strip()]
        if items:
            warnings.append(f"Field '{field}' converted from CSV string to list.")
            return items
        return list(fallback)

    if isinstance(value, list):
        out: List[str] = []
        for i, item in enumerate(value):
            if isinstance(item, str) and item.strip():
                out.append(item.strip())
            elif not isinstance(item, str):
                msg = f"Invalid item in '{field}[{i}]': expected str."
                if strict:
                    raise TypeError(msg)
                warnings.append(f"{msg} Item discarded.")
        return out if out else list(fallback)

    msg = f"Invalid field '{field}': expected list[str], received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return list(fallback)


def _normalize_extensions(exts: List[str], warnings: List[str], strict: bool) -> List[str]:
    """Ensure every extension starts with a dot."""
    out: List[str] = []
    for ext in exts:
        e = ext.strip()
        if not e:
            continue
        if not e.startswith("."):
            if strict:
                raise ValueError(f"Invalid extension '{ext}': must start with '.'.")
            warnings.append(f"Extension '{ext}' corrected to '.{e}'.")
            e = "." + e
        out.append(e)
    return out if out else default_extensions()

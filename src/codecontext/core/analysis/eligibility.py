from __future__ import annotations

"""
Declaration Eligibility Filter.

Decides whether a declaration is dropped from the tree altogether: test-only
code, test modules and impl blocks generated from a derive annotation.
Serialization impls always survive because their bodies describe the
external data shape.
"""

import re
from enum import Enum
from typing import Dict, FrozenSet, Iterable, List, Optional, Set

from codecontext.domain.constants import (
    AUTOMATICALLY_DERIVED,
    SERIALIZATION_TRAITS,
    TEST_MARKER_NAMES,
    TEST_MODULE_NAMES,
)
from codecontext.domain.syntax_models import (
    Attribute,
    CommentAttribute,
    Declaration,
    DeclarationKind,
)

_WHITESPACE = re.compile(r"\s+")
_GENERICS = re.compile(r"<.*$", re.DOTALL)


class RemovalReason(str, Enum):
    TEST_MARKER = "test_marker"
    CFG_TEST = "cfg_test"
    TEST_MODULE = "test_module"
    DERIVED_IMPL = "derived_impl"


# Module-qualified type name ('model::Point', 'Point' at file level) -> derived traits
DeriveIndex = Dict[str, FrozenSet[str]]

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def removal_reason(
        decl: Declaration,
        derives: DeriveIndex,
        module_path: str = "",
) -> Optional[RemovalReason]:
    """
    Determine why a declaration must be removed, if it must.

    Args:
        decl: Declaration under inspection.
        derives: Derive annotations of the file, see collect_derives().
        module_path: '::'-joined names of the modules enclosing the declaration.

    Returns:
        Optional[RemovalReason]: The first matching reason, None to keep it.
    """
    for attr in decl.attributes:
        if is_test_marker(attr):
            return RemovalReason.TEST_MARKER
        if is_cfg_test(attr):
            return RemovalReason.CFG_TEST

    if decl.kind is DeclarationKind.MODULE:
        if decl.name in TEST_MODULE_NAMES:
            return RemovalReason.TEST_MODULE
        if any(is_cfg_test(attr) for attr in decl.inner_attributes):
            return RemovalReason.CFG_TEST

    if decl.kind is DeclarationKind.IMPL and is_derived_impl(decl, derives, module_path):
        if not is_serialization_impl(decl):
            return RemovalReason.DERIVED_IMPL

    return None


def should_remove(decl: Declaration, derives: DeriveIndex, module_path: str = "") -> bool:
    """True when the declaration must be deleted from its parent."""
    return removal_reason(decl, derives, module_path) is not None


def is_test_marker(attr: Attribute) -> bool:
    """Recognize '#[test]' style markers, including 'tokio::test'."""
    if isinstance(attr, CommentAttribute) or attr.inner:
        return False
    return attr.base_name in TEST_MARKER_NAMES


def is_cfg_test(attr: Attribute) -> bool:
    """Recognize '#[cfg(test)]'; 'cfg(not(test))' and 'cfg(any(test, ..))' do not match."""
    if isinstance(attr, CommentAttribute) or attr.name != "cfg" or not attr.args:
        return False
    return _WHITESPACE.sub("", attr.args) == "(test)"


def is_serialization_impl(decl: Declaration) -> bool:
    """True for an impl of a trait converting to or from a textual representation."""
    return decl.kind is DeclarationKind.IMPL and decl.trait_name in SERIALIZATION_TRAITS


def is_derived_impl(decl: Declaration, derives: DeriveIndex, module_path: str = "") -> bool:
    """
    Detect an impl block generated from a derive annotation.

    Expanded code marks such blocks with '#[automatically_derived]'. In
    unexpanded code the block is recognized when it carries no functional
    attribute of its own and a type of the same name in the same module
    derives the same trait.
    """
    if decl.kind is not DeclarationKind.IMPL or decl.trait_name is None:
        return False

    functional = [a for a in decl.attributes if not isinstance(a, CommentAttribute)]
    if any(a.base_name == AUTOMATICALLY_DERIVED for a in functional):
        return True
    if functional:
        return False

    if not decl.self_type:
        return False
    return decl.trait_name in derives.get(qualified_name(module_path, decl.self_type), frozenset())


def collect_derives(declarations: Iterable[Declaration]) -> DeriveIndex:
    """
    Index the '#[derive(...)]' annotations of a file by module-qualified type name.

    Read-only scan over all nested scopes; the tree is not modified.

    Args:
        declarations: Top-level declarations of the file.

    Returns:
        DeriveIndex: Derived trait names (last path segment) per qualified type name.
    """
    index: Dict[str, Set[str]] = {}
    _collect(declarations, "", index)
    return {name: frozenset(traits) for name, traits in index.items()}


def qualified_name(module_path: str, name: str) -> str:
    """Join a module path and an item name: ('net::http', 'Client') -> 'net::http::Client'."""
    return f"{module_path}::{name}" if module_path else name


def child_module_path(module_path: str, decl: Declaration) -> str:
    """Module path seen by the children of a declaration."""
    if decl.kind is DeclarationKind.MODULE and decl.name:
        return qualified_name(module_path, decl.name)
    return module_path

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _collect(declarations: Iterable[Declaration], module_path: str, index: Dict[str, Set[str]]) -> None:
    for decl in declarations:
        if decl.kind is DeclarationKind.TYPE and decl.name:
            key = qualified_name(module_path, decl.name)
            for attr in decl.attributes:
                if not isinstance(attr, CommentAttribute) and attr.name == "derive":
                    index.setdefault(key, set()).update(_derive_names(attr.args))
        if decl.children:
            _collect(decl.children, child_module_path(module_path, decl), index)


def _derive_names(args: Optional[str]) -> List[str]:
    """Split '(Debug, serde::Serialize)' into ['Debug', 'Serialize']."""
    if not args:
        return []
    inner = args.strip()
    if inner.startswith("(") and inner.endswith(")"):
        inner = inner[1:-1]
    names = []
    for part in inner.split(","):
        part = _GENERICS.sub("", part.strip())
        if part:
            names.append(part.rsplit("::", 1)[-1].strip())
    return names

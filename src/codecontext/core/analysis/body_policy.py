from __future__ import annotations

"""
Function Body Retention Policy.

Keeps the bodies of functions that produce text and of serialization impl
members; every other body is replaced by the elision marker. Signatures,
attributes and visibility are never touched.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List

from codecontext.core.analysis.attributes import doc_comments
from codecontext.core.analysis.type_classifier import is_string_like
from codecontext.domain.constants import (
    DEFAULT_METHOD_NOTE,
    ELISION_MARKER,
    REQUIRED_METHOD_NOTE,
)
from codecontext.domain.syntax_models import (
    Attribute,
    CommentAttribute,
    Declaration,
    DeclarationKind,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RewriteOptions:
    """
    The complete configuration surface of the rewriting engine.

    Attributes:
        remove_comments: Strip doc and plain comments.
        remove_bodies: Elide function bodies that do not produce text.
    """
    remove_comments: bool = False
    remove_bodies: bool = False


class Scope(str, Enum):
    """Kind of container a function is declared in."""
    FREE = "free"
    TRAIT = "trait"
    IMPL = "impl"
    SERIALIZATION_IMPL = "serialization_impl"

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def retains_body(decl: Declaration, in_serialization_impl: bool = False) -> bool:
    """
    Decide whether a function keeps its body.

    Args:
        decl: Function declaration that survived the eligibility filter.
        in_serialization_impl: Whether the function belongs to a serialization impl.

    Returns:
        bool: True when the body is kept verbatim.
    """
    if in_serialization_impl:
        return True
    signature = decl.signature
    return signature is not None and is_string_like(signature.return_type)


def apply_body_policy(decl: Declaration, scope: Scope, options: RewriteOptions) -> bool:
    """
    Apply the retention policy to one function in place.

    Trait methods additionally receive an explanatory doc line unless
    comments are being removed.

    Args:
        decl: Function declaration to rewrite.
        scope: Container the function is declared in.
        options: Engine flags.

    Returns:
        bool: True when the body was replaced by the elision marker.
    """
    if decl.kind is not DeclarationKind.FUNCTION or not options.remove_bodies:
        return False

    annotate = scope is Scope.TRAIT and not options.remove_comments

    if decl.body is None:
        if annotate:
            _add_note(decl.attributes, REQUIRED_METHOD_NOTE)
        return False

    if retains_body(decl, scope is Scope.SERIALIZATION_IMPL):
        return False

    decl.body = ELISION_MARKER
    decl.body_verbatim = frozenset()
    if annotate:
        _add_note(decl.attributes, DEFAULT_METHOD_NOTE)
    logger.debug(f"Elided body of '{decl.name}'")
    return True

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _add_note(attributes: List[Attribute], note: str) -> None:
    """Insert a doc line ahead of existing docs, once."""
    note_text = f"///{note}"
    docs = doc_comments(attributes)
    if any(a.text == note_text for a in docs):
        return

    entry = CommentAttribute(name="doc", args=None, text=note_text, is_doc=True)
    if not docs:
        attributes.append(entry)
        return

    separator = CommentAttribute(name="doc", args=None, text="///", is_doc=True)
    index = attributes.index(docs[0])
    attributes[index:index] = [entry, separator]

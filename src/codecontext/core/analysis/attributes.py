from __future__ import annotations

"""
Attribute and Comment Processor.

Strips documentation and plain comments from attribute lists while leaving
functional attributes ('cfg', 'derive', 'allow', ...) untouched.
"""

from typing import List

from codecontext.domain.syntax_models import Attribute, CommentAttribute


def strip_comments(attributes: List[Attribute], remove_comments: bool) -> None:
    """
    Remove every comment attribute in place when comment removal is enabled.

    The relative order of the remaining attributes is preserved.

    Args:
        attributes: Attribute list owned by a declaration or member.
        remove_comments: Global comment removal flag.
    """
    if not remove_comments:
        return
    attributes[:] = [a for a in attributes if not isinstance(a, CommentAttribute)]


def doc_comments(attributes: List[Attribute]) -> List[CommentAttribute]:
    """Return the documentation comments of an attribute list."""
    return [a for a in attributes if isinstance(a, CommentAttribute) and a.is_doc]

from __future__ import annotations

"""
Unit tests for the Attribute and Comment Processor.
"""

from codecontext.core.analysis.attributes import doc_comments, strip_comments
from codecontext.domain.syntax_models import Attribute, CommentAttribute


def _attrs():
    return [
        CommentAttribute(name="doc", text="/// Docs."),
        Attribute(name="cfg", args="(unix)", text="#[cfg(unix)]"),
        CommentAttribute(name="comment", text="// note", is_doc=False),
        Attribute(name="derive", args="(Debug)", text="#[derive(Debug)]"),
    ]


def test_strip_comments_keeps_functional_attributes_in_order() -> None:
    attrs = _attrs()
    strip_comments(attrs, remove_comments=True)
    assert [a.text for a in attrs] == ["#[cfg(unix)]", "#[derive(Debug)]"]


def test_strip_comments_is_noop_when_disabled() -> None:
    attrs = _attrs()
    strip_comments(attrs, remove_comments=False)
    assert len(attrs) == 4


def test_doc_comments_excludes_plain_comments() -> None:
    assert [a.text for a in doc_comments(_attrs())] == ["/// Docs."]

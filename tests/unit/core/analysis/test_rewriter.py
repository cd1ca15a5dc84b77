from __future__ import annotations

"""
Unit tests for the Declaration Tree Rewriter.

Trees are built by hand so the traversal order, scope handling and in-place
deletion can be verified independently of the parser.
"""

import copy
from typing import List

from codecontext.core.analysis.body_policy import RewriteOptions
from codecontext.core.analysis.rewriter import CodeTransformer, rewrite
from codecontext.domain.constants import ELISION_MARKER
from codecontext.domain.syntax_models import (
    Attribute,
    CommentAttribute,
    Declaration,
    DeclarationKind,
    Member,
    SyntaxTree,
    TypeRef,
    TypeSignature,
)

TEST_ATTR = Attribute(name="test", text="#[test]")


def _fn(name: str, returns: str = "i32", attrs: List[Attribute] = None) -> Declaration:
    return Declaration(
        DeclarationKind.FUNCTION,
        f"fn {name}()",
        name,
        attributes=list(attrs or []),
        signature=TypeSignature(return_type=TypeRef(name=returns, text=returns)),
        body="{ body() }",
    )


def _names(decls: List[Declaration]) -> List[str]:
    return [d.name for d in decls]


def _sample_tree() -> SyntaxTree:
    point = Declaration(
        DeclarationKind.TYPE, "struct Point", "Point",
        attributes=[
            CommentAttribute(name="doc", text="/// A point."),
            Attribute(name="derive", args="(Clone)", text="#[derive(Clone)]"),
        ],
        members=[Member("x: i32", [CommentAttribute(name="doc", text="/// X.")])],
    )
    derived = Declaration(
        DeclarationKind.IMPL, "impl Clone for Point", children=[_fn("clone", "Self")],
        trait_name="Clone", self_type="Point",
    )
    display = Declaration(
        DeclarationKind.IMPL, "impl Display for Point", children=[_fn("fmt", "Result")],
        trait_name="Display", self_type="Point",
    )
    shape = Declaration(
        DeclarationKind.TRAIT, "trait Shape", "Shape",
        children=[_fn("area", "f64"), _fn("name", "String")],
    )
    util = Declaration(
        DeclarationKind.MODULE, "mod util", "util",
        children=[_fn("first"), _fn("check", attrs=[TEST_ATTR]), _fn("last", "String")],
    )
    tests = Declaration(DeclarationKind.MODULE, "mod tests", "tests", children=[_fn("t", attrs=[TEST_ATTR])])

    return SyntaxTree(
        declarations=[point, derived, display, shape, util, _fn("gone", attrs=[TEST_ATTR]), tests],
        inner_attributes=[CommentAttribute(name="doc", text="//! Crate docs.", inner=True)],
    )


def test_rewrite_removes_tests_and_derived_impls_preserving_order() -> None:
    tree = _sample_tree()
    rewrite(tree, remove_bodies=True)

    assert _names(tree.declarations) == ["Point", None, "Shape", "util"]
    assert tree.declarations[1].trait_name == "Display"
    assert _names(tree.declarations[3].children) == ["first", "last"]


def test_rewrite_applies_body_policy_per_scope() -> None:
    tree = _sample_tree()
    rewrite(tree, remove_bodies=True)
    _, display, shape, util = tree.declarations

    assert display.children[0].body == "{ body() }"
    area, name = shape.children
    assert area.body == ELISION_MARKER
    assert [a.text for a in area.attributes] == ["/// There is a default implementation"]
    assert name.body == "{ body() }"
    assert util.children[0].body == ELISION_MARKER
    assert util.children[1].body == "{ body() }"


def test_rewrite_strips_comments_everywhere() -> None:
    tree = _sample_tree()
    rewrite(tree, remove_comments=True)
    point = tree.declarations[0]

    assert tree.inner_attributes == []
    assert [a.text for a in point.attributes] == ["#[derive(Clone)]"]
    assert point.members[0].attributes == []


def test_rewrite_without_flags_only_filters() -> None:
    tree = _sample_tree()
    rewrite(tree)

    shape = tree.declarations[2]
    assert shape.children[0].body == "{ body() }"
    assert shape.children[0].attributes == []
    assert len(tree.inner_attributes) == 1


def test_transformer_counts_removals_and_elisions() -> None:
    transformer = CodeTransformer(RewriteOptions(remove_bodies=True))
    transformer.rewrite(_sample_tree())

    assert transformer.removed == 4
    assert transformer.elided == 2


def test_rewrite_is_a_fixed_point() -> None:
    tree = _sample_tree()
    rewrite(tree, remove_comments=False, remove_bodies=True)
    once = copy.deepcopy(tree)

    transformer = CodeTransformer(RewriteOptions(remove_bodies=True))
    transformer.rewrite(tree)

    assert tree == once
    assert transformer.removed == 0

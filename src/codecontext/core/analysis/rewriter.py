from __future__ import annotations

"""
Declaration Tree Rewriter.

Single depth-first, pre-order pass over a parsed file. At every declaration
it applies, in this order: the eligibility filter, the comment processor,
recursion into nested scopes and, for functions, the body retention policy.
The original declaration order is preserved; deleted nodes are never
visited.
"""

import logging
from typing import List

from codecontext.core.analysis.attributes import strip_comments
from codecontext.core.analysis.body_policy import RewriteOptions, Scope, apply_body_policy
from codecontext.core.analysis.eligibility import (
    DeriveIndex,
    child_module_path,
    collect_derives,
    is_serialization_impl,
    removal_reason,
)
from codecontext.domain.syntax_models import Declaration, DeclarationKind, SyntaxTree

logger = logging.getLogger(__name__)


class CodeTransformer:
    """
    Applies the filtering policy to a syntax tree in place.

    Attributes:
        options: Immutable engine flags threaded through every recursive call.
        removed: Number of declarations deleted by the last rewrite.
        elided: Number of function bodies elided by the last rewrite.
    """

    def __init__(self, options: RewriteOptions) -> None:
        self.options = options
        self.removed = 0
        self.elided = 0

    def rewrite(self, tree: SyntaxTree) -> None:
        """
        Mutate a parsed file according to the configured options.

        Args:
            tree: Syntax tree owned by the caller for the duration of one file.
        """
        self.removed = 0
        self.elided = 0

        derives = collect_derives(tree.declarations)
        strip_comments(tree.inner_attributes, self.options.remove_comments)
        self._rewrite_declarations(tree.declarations, Scope.FREE, derives, "")

        logger.debug(
            f"Rewrite finished: {self.removed} declarations removed, "
            f"{self.elided} bodies elided"
        )

    def _rewrite_declarations(
            self,
            declarations: List[Declaration],
            scope: Scope,
            derives: DeriveIndex,
            module_path: str,
    ) -> None:
        """Filter a declaration list in place and descend into survivors."""
        kept: List[Declaration] = []

        for decl in declarations:
            reason = removal_reason(decl, derives, module_path)
            if reason is not None:
                logger.debug(f"Removed {decl.kind.value} '{decl.name or '?'}' ({reason.value})")
                self.removed += 1
                continue

            strip_comments(decl.attributes, self.options.remove_comments)
            strip_comments(decl.inner_attributes, self.options.remove_comments)

            if decl.is_scope and decl.children is not None:
                self._rewrite_declarations(
                    decl.children, _child_scope(decl), derives, child_module_path(module_path, decl)
                )
            elif decl.kind is DeclarationKind.FUNCTION:
                if apply_body_policy(decl, scope, self.options):
                    self.elided += 1
            elif decl.members:
                for member in decl.members:
                    strip_comments(member.attributes, self.options.remove_comments)

            kept.append(decl)

        declarations[:] = kept


def rewrite(tree: SyntaxTree, remove_comments: bool = False, remove_bodies: bool = False) -> None:
    """
    Rewrite a parsed file in place.

    Args:
        tree: Parsed source file.
        remove_comments: Strip doc and plain comments.
        remove_bodies: Elide bodies of functions that do not produce text.
    """
    options = RewriteOptions(remove_comments=remove_comments, remove_bodies=remove_bodies)
    CodeTransformer(options).rewrite(tree)


def _child_scope(decl: Declaration) -> Scope:
    if decl.kind is DeclarationKind.TRAIT:
        return Scope.TRAIT
    if decl.kind is DeclarationKind.IMPL:
        return Scope.SERIALIZATION_IMPL if is_serialization_impl(decl) else Scope.IMPL
    return Scope.FREE

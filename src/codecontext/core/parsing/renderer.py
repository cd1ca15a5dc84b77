from __future__ import annotations

"""
Declaration Tree Renderer.

Prints a rewritten syntax tree back to Rust source text. Nested scopes are
re-indented with four spaces per level; declaration text is emitted as
stored, so the output keeps the author's formatting inside each item.
"""

from typing import FrozenSet, List, Optional, Tuple

from codecontext.domain.errors import SerializeError
from codecontext.domain.syntax_models import (
    Attribute,
    Declaration,
    DeclarationKind,
    SyntaxTree,
)

INDENT = "    "

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def render(tree: SyntaxTree) -> str:
    """
    Serialize a syntax tree to source text.

    Args:
        tree: Parsed (and usually rewritten) file.

    Returns:
        str: Rust source ending with a single newline, or '' for an empty tree.

    Raises:
        SerializeError: If a declaration cannot be printed.
    """
    lines: List[str] = []
    _emit_attributes(tree.inner_attributes, 0, lines)
    for decl in tree.declarations:
        _emit_declaration(decl, 0, lines)

    if not lines:
        return ""
    return "\n".join(lines) + "\n"

# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _emit_declaration(decl: Declaration, depth: int, lines: List[str]) -> None:
    if not isinstance(decl.kind, DeclarationKind):
        raise SerializeError(f"Unknown declaration kind: {decl.kind!r}")

    _emit_attributes(decl.attributes, depth, lines)

    if decl.kind is DeclarationKind.FUNCTION:
        text, verbatim = _function_text(decl)
        _emit_text(text, depth, lines, verbatim)
    elif decl.is_scope:
        _emit_scope(decl, depth, lines)
    elif decl.members is not None:
        _emit_members(decl, depth, lines)
    else:
        _emit_text(decl.text, depth, lines, decl.text_verbatim)


def _function_text(decl: Declaration) -> Tuple[str, FrozenSet[int]]:
    """Join header and body, mapping verbatim body lines to joined line indexes."""
    if decl.body is None:
        return decl.text, decl.text_verbatim

    header_lines = decl.text.count("\n") + 1
    if "\n" in decl.text:
        separator, first_body_line = "\n", header_lines
    else:
        separator, first_body_line = " ", header_lines - 1

    verbatim = frozenset(first_body_line + index for index in decl.body_verbatim)
    return f"{decl.text}{separator}{decl.body}", verbatim


def _emit_scope(decl: Declaration, depth: int, lines: List[str]) -> None:
    if decl.children is None:
        _emit_text(decl.text, depth, lines)
        return

    if not decl.children and not decl.inner_attributes:
        _emit_text(f"{decl.text} {{}}", depth, lines)
        return

    _emit_text(f"{decl.text} {{", depth, lines)
    _emit_attributes(decl.inner_attributes, depth + 1, lines)
    for child in decl.children:
        _emit_declaration(child, depth + 1, lines)
    _emit_text("}", depth, lines)


def _emit_members(decl: Declaration, depth: int, lines: List[str]) -> None:
    if not decl.members:
        _emit_text(f"{decl.text} {{}}", depth, lines)
        return

    _emit_text(f"{decl.text} {{", depth, lines)
    for member in decl.members:
        _emit_attributes(member.attributes, depth + 1, lines)
        _emit_text(f"{member.text},", depth + 1, lines)
    _emit_text("}", depth, lines)


def _emit_attributes(attributes: List[Attribute], depth: int, lines: List[str]) -> None:
    for attr in attributes:
        _emit_text(attr.text or _attribute_text(attr), depth, lines)


def _attribute_text(attr: Attribute) -> str:
    """Rebuild attribute text for entries created without source text."""
    args: Optional[str] = attr.args
    bang = "!" if attr.inner else ""
    if args is None:
        return f"#{bang}[{attr.name}]"
    spacer = " " if args.startswith("=") else ""
    return f"#{bang}[{attr.name}{spacer}{args}]"


def _emit_text(text: str, depth: int, lines: List[str], verbatim: FrozenSet[int] = frozenset()) -> None:
    """
    Append possibly multi-line text, indenting every non-empty line.

    Lines listed in 'verbatim' continue a string literal and are emitted as is.
    """
    prefix = INDENT * depth
    for index, line in enumerate(text.split("\n")):
        if index in verbatim or not line:
            lines.append(line)
        else:
            lines.append(f"{prefix}{line}")

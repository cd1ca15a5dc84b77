from __future__ import annotations

"""
Rust Source Parser.

Builds the declaration tree from Rust source text with tree-sitter. Only the
item level is modelled: declarations, their leading attributes and comments,
nested module/trait/impl scopes and struct/enum members. Function bodies and
every other declaration are carried as source text, dedented to column zero
so the renderer can re-indent them at any depth.
"""

import logging
import re
from functools import lru_cache
from typing import FrozenSet, List, Optional, Tuple

import tree_sitter_rust
from tree_sitter import Language, Node, Parser

from codecontext.domain.errors import ParseError
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

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# NODE TYPE MAPPINGS
# -----------------------------------------------------------------------------

_KIND_BY_NODE = {
    "function_item": DeclarationKind.FUNCTION,
    "function_signature_item": DeclarationKind.FUNCTION,
    "mod_item": DeclarationKind.MODULE,
    "trait_item": DeclarationKind.TRAIT,
    "impl_item": DeclarationKind.IMPL,
    "struct_item": DeclarationKind.TYPE,
    "enum_item": DeclarationKind.TYPE,
    "union_item": DeclarationKind.TYPE,
    "const_item": DeclarationKind.CONSTANT,
    "static_item": DeclarationKind.CONSTANT,
    "macro_definition": DeclarationKind.MACRO,
    "macro_invocation": DeclarationKind.MACRO,
}

_COMMENT_NODES = ("line_comment", "block_comment")
_MEMBER_NODES = ("field_declaration", "enum_variant")
_MEMBER_LISTS = ("field_declaration_list", "enum_variant_list")
_NON_TYPE_ARGS = ("lifetime", "type_binding", "line_comment", "block_comment")
_STRING_NODES = ("string_literal", "raw_string_literal")

_ATTRIBUTE_PATTERN = re.compile(
    r"^#(?P<inner>!?)\[\s*(?P<path>(?:::)?[A-Za-z_]\w*(?:\s*::\s*[A-Za-z_]\w*)*)(?P<rest>.*)\]$",
    re.DOTALL,
)
_SPACES = re.compile(r"\s+")

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def parse(source: str) -> SyntaxTree:
    """
    Parse Rust source text into a declaration tree.

    Args:
        source: Complete content of one '.rs' file.

    Returns:
        SyntaxTree: Fresh tree owned by the caller.

    Raises:
        ParseError: If the text is not syntactically valid Rust.
    """
    src = source.encode("utf-8")
    ts_tree = _get_parser().parse(src)
    root = ts_tree.root_node

    if root.has_error:
        bad = _first_error(root)
        line = bad.start_point[0] + 1 if bad is not None else None
        raise ParseError(f"Invalid Rust syntax near line {line}", line=line)

    declarations, inner = _parse_items(root.children, src)
    return SyntaxTree(declarations=declarations, inner_attributes=inner)

# -----------------------------------------------------------------------------
# ITEM LISTS
# -----------------------------------------------------------------------------

@lru_cache(maxsize=1)
def _get_parser() -> Parser:
    """Create the tree-sitter parser once per process."""
    return Parser(Language(tree_sitter_rust.language()))


def _parse_items(nodes: List[Node], src: bytes) -> Tuple[List[Declaration], List[Attribute]]:
    """
    Convert the children of a file or declaration list into declarations.

    Outer attributes and comments are siblings of the item they annotate in
    the tree-sitter grammar, so they are buffered until the next item.
    """
    declarations: List[Declaration] = []
    inner: List[Attribute] = []
    pending: List[Attribute] = []
    last_end_row = -1

    for node in nodes:
        if not node.is_named:
            continue

        if node.type in _COMMENT_NODES:
            if node.start_point[0] == last_end_row and not pending:
                continue  # trailing comment of the previous item
            comment = _comment(node, src)
            if comment.inner:
                inner.append(comment)
            else:
                pending.append(comment)
            continue

        if node.type == "inner_attribute_item":
            inner.append(_attribute(node, src))
            continue

        if node.type == "attribute_item":
            pending.append(_attribute(node, src))
            continue

        if node.type == "empty_statement":
            _close_macro_statement(declarations)
            continue

        decl = _declaration(node, src)
        decl.attributes = pending
        pending = []
        declarations.append(decl)
        last_end_row = node.end_point[0]

    if pending:
        logger.debug(f"Dropped {len(pending)} dangling attributes or comments")

    return declarations, inner


def _declaration(node: Node, src: bytes) -> Declaration:
    """Build the declaration node for one tree-sitter item."""
    kind = _KIND_BY_NODE.get(node.type, DeclarationKind.OTHER)
    if node.type == "expression_statement" and _first_named(node, "macro_invocation"):
        kind = DeclarationKind.MACRO

    column = node.start_point[1]
    name = _name_of(node, src)
    body = node.child_by_field_name("body")

    if kind is DeclarationKind.FUNCTION:
        signature = _signature(node, src)
        if body is None:
            return Declaration(kind, _slice(src, node, node.end_byte, column), name, signature=signature)
        body_text, body_verbatim = _literal_safe_text(body, src, column)
        return Declaration(
            kind,
            _slice(src, node, body.start_byte, column),
            name,
            signature=signature,
            body=body_text,
            body_verbatim=body_verbatim,
        )

    if kind in (DeclarationKind.MODULE, DeclarationKind.TRAIT, DeclarationKind.IMPL):
        decl = Declaration(kind, _slice(src, node, body.start_byte if body else node.end_byte, column), name)
        if body is not None:
            decl.children, decl.inner_attributes = _parse_items(body.children, src)
        if kind is DeclarationKind.IMPL:
            trait = node.child_by_field_name("trait")
            decl.trait_name = _core_name(trait, src) if trait is not None else None
            self_type = node.child_by_field_name("type")
            decl.self_type = _core_name(self_type, src) if self_type is not None else None
        return decl

    if kind is DeclarationKind.TYPE and body is not None and body.type in _MEMBER_LISTS:
        return Declaration(
            kind,
            _slice(src, node, body.start_byte, column),
            name,
            members=_members(body, src),
        )

    text, text_verbatim = _literal_safe_text(node, src, column)
    return Declaration(kind, text, name, text_verbatim=text_verbatim)


def _members(body: Node, src: bytes) -> List[Member]:
    """Collect struct fields or enum variants with their leading attributes."""
    members: List[Member] = []
    pending: List[Attribute] = []
    last_end_row = -1

    for node in body.named_children:
        if node.type in _COMMENT_NODES:
            if node.start_point[0] == last_end_row and not pending:
                continue
            pending.append(_comment(node, src))
        elif node.type == "attribute_item":
            pending.append(_attribute(node, src))
        elif node.type in _MEMBER_NODES:
            members.append(Member(text=_dedent(_text(node, src), node.start_point[1]), attributes=pending))
            pending = []
            last_end_row = node.end_point[0]

    return members


def _close_macro_statement(declarations: List[Declaration]) -> None:
    """Attach a stray ';' to the item-level macro invocation it terminates."""
    if declarations and declarations[-1].kind is DeclarationKind.MACRO:
        last = declarations[-1]
        if not last.text.endswith((";", "}")):
            last.text += ";"

# -----------------------------------------------------------------------------
# ATTRIBUTES AND COMMENTS
# -----------------------------------------------------------------------------

def _attribute(node: Node, src: bytes) -> Attribute:
    """Split '#[path args]' into name and argument text."""
    text = _dedent(_text(node, src), node.start_point[1])
    match = _ATTRIBUTE_PATTERN.match(text)
    if match is None:
        return Attribute(name=text, text=text, inner=node.type == "inner_attribute_item")

    name = _SPACES.sub("", match.group("path"))
    rest = match.group("rest").strip() or None
    inner = bool(match.group("inner"))

    if name == "doc" and rest is not None and rest.startswith("="):
        return CommentAttribute(name=name, args=rest, text=text, inner=inner, is_doc=True)
    return Attribute(name=name, args=rest, text=text, inner=inner)


def _comment(node: Node, src: bytes) -> CommentAttribute:
    """Classify a line or block comment as outer doc, inner doc or plain."""
    text = _dedent(_text(node, src).rstrip(), node.start_point[1])
    is_doc, inner = _comment_flavor(text)
    return CommentAttribute(
        name="doc" if is_doc else "comment",
        args=None,
        text=text,
        inner=inner,
        is_doc=is_doc,
    )


def _comment_flavor(text: str) -> Tuple[bool, bool]:
    """Return (is_doc, inner) following rustc's doc comment rules."""
    if text.startswith("//"):
        if text.startswith("///") and not text.startswith("////"):
            return True, False
        if text.startswith("//!"):
            return True, True
        return False, False
    if text.startswith("/**") and not text.startswith("/***") and text != "/**/":
        return True, False
    if text.startswith("/*!"):
        return True, True
    return False, False

# -----------------------------------------------------------------------------
# SIGNATURES AND TYPES
# -----------------------------------------------------------------------------

def _signature(node: Node, src: bytes) -> TypeSignature:
    params: List[str] = []
    parameters = node.child_by_field_name("parameters")
    if parameters is not None:
        for param in parameters.named_children:
            if param.type == "parameter":
                param_type = param.child_by_field_name("type")
                if param_type is not None:
                    params.append(_text(param_type, src))
            elif param.type == "self_parameter":
                params.append(_text(param, src))

    return_node = node.child_by_field_name("return_type")
    return_type = _type_ref(return_node, src) if return_node is not None else None
    return TypeSignature(params=params, return_type=return_type)


def _type_ref(node: Node, src: bytes) -> TypeRef:
    """Build a shallow structural view of a type expression."""
    text = _text(node, src)

    if node.type == "reference_type":
        inner = node.child_by_field_name("type")
        if inner is None:
            return TypeRef(name=text, is_reference=True, text=text)
        ref = _type_ref(inner, src)
        return TypeRef(name=ref.name, args=ref.args, is_reference=True, text=text)

    if node.type == "generic_type":
        base = node.child_by_field_name("type")
        arguments = node.child_by_field_name("type_arguments")
        args: Tuple[TypeRef, ...] = ()
        if arguments is not None:
            args = tuple(
                _type_ref(child, src)
                for child in arguments.named_children
                if child.type not in _NON_TYPE_ARGS
            )
        name = _core_name(base, src) if base is not None else text
        return TypeRef(name=name, args=args, text=text)

    if node.type == "unit_type":
        return TypeRef(name="()", text=text)

    return TypeRef(name=_core_name(node, src), text=text)


def _core_name(node: Node, src: bytes) -> str:
    """Base name of a type: 'Foo' for '&'a path::Foo<T>'."""
    if node.type in ("reference_type", "generic_type"):
        inner = node.child_by_field_name("type")
        if inner is not None:
            return _core_name(inner, src)
    if node.type in ("scoped_type_identifier", "scoped_identifier"):
        name = node.child_by_field_name("name")
        if name is not None:
            return _text(name, src)
    return _text(node, src).rsplit("::", 1)[-1].strip()

# -----------------------------------------------------------------------------
# TEXT HELPERS
# -----------------------------------------------------------------------------

def _name_of(node: Node, src: bytes) -> Optional[str]:
    name = node.child_by_field_name("name") or node.child_by_field_name("macro")
    if name is None and node.type == "expression_statement":
        macro = _first_named(node, "macro_invocation")
        if macro is not None:
            name = macro.child_by_field_name("macro")
    return _text(name, src) if name is not None else None


def _first_named(node: Node, node_type: str) -> Optional[Node]:
    for child in node.named_children:
        if child.type == node_type:
            return child
    return None


def _first_error(root: Node) -> Optional[Node]:
    stack = [root]
    while stack:
        node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            return node
        stack.extend(reversed(node.children))
    return None


def _text(node: Node, src: bytes) -> str:
    return src[node.start_byte:node.end_byte].decode("utf-8", errors="replace")


def _slice(src: bytes, node: Node, end_byte: int, column: int) -> str:
    """Source text from the start of a node up to end_byte, dedented."""
    text = src[node.start_byte:end_byte].decode("utf-8", errors="replace")
    return _dedent(text.rstrip(), column)


def _dedent(text: str, column: int, verbatim: FrozenSet[int] = frozenset()) -> str:
    """
    Shift continuation lines left by the column of the first line.

    The first line starts at the node itself and carries no indentation.
    Lines listed in 'verbatim' are kept byte for byte.
    """
    lines = text.split("\n")
    out = [lines[0]]
    for index, line in enumerate(lines[1:], start=1):
        if index in verbatim:
            out.append(line)
            continue
        indent = len(line) - len(line.lstrip(" \t"))
        out.append(line[min(indent, column):])
    return "\n".join(out)


def _literal_safe_text(node: Node, src: bytes, column: int) -> Tuple[str, FrozenSet[int]]:
    """
    Dedent the text of a node without touching string literal contents.

    Returns:
        Tuple[str, FrozenSet[int]]: (Dedented text, indexes of the lines that
        start inside a multi-line string literal).
    """
    raw = src[node.start_byte:node.end_byte]
    literals = _multiline_literals(node, src)

    verbatim = set()
    offset = node.start_byte
    for index, line in enumerate(raw.split(b"\n")):
        if index and any(start < offset < end for start, end in literals):
            verbatim.add(index)
        offset += len(line) + 1

    frozen = frozenset(verbatim)
    return _dedent(raw.decode("utf-8", errors="replace"), column, frozen), frozen


def _multiline_literals(node: Node, src: bytes) -> List[Tuple[int, int]]:
    """Byte ranges of the string literals below a node that span lines."""
    ranges: List[Tuple[int, int]] = []
    stack = [node]
    while stack:
        current = stack.pop()
        if current.type in _STRING_NODES:
            if b"\n" in src[current.start_byte:current.end_byte]:
                ranges.append((current.start_byte, current.end_byte))
            continue
        stack.extend(current.children)
    return ranges

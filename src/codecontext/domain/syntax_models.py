from __future__ import annotations

"""
Syntax Domain Data Models.

Defines the declaration tree that the parser produces, the rewriter mutates
and the renderer prints. Every node exclusively owns its children, so a
deletion is a plain list removal and no node is ever shared between parents.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, List, Optional, Tuple

# -----------------------------------------------------------------------------
# DECLARATION KINDS
# -----------------------------------------------------------------------------

class DeclarationKind(str, Enum):
    """Tag of the declaration variant."""
    FUNCTION = "function"
    MODULE = "module"
    TRAIT = "trait"
    IMPL = "impl"
    TYPE = "type"
    CONSTANT = "constant"
    MACRO = "macro"
    OTHER = "other"


# Kinds that own a nested list of declarations
SCOPE_KINDS: Tuple[DeclarationKind, ...] = (
    DeclarationKind.MODULE,
    DeclarationKind.TRAIT,
    DeclarationKind.IMPL,
)


class ReturnShape(str, Enum):
    """Structural classification of a function return type."""
    UNIT = "unit"
    STRING_LIKE = "string_like"
    WRAPPED = "wrapped"
    OTHER = "other"


class ContainerKind(str, Enum):
    """Single-layer containers that may wrap a string-like return type."""
    RESULT = "Result"
    OPTION = "Option"

# -----------------------------------------------------------------------------
# ATTRIBUTES
# -----------------------------------------------------------------------------

@dataclass
class Attribute:
    """
    Functional annotation attached to a declaration.

    Attributes:
        name: Attribute path as written (e.g. 'cfg', 'derive', 'tokio::test').
        args: Argument text following the path (e.g. '(test)'), if any.
        text: Original source text used when rendering.
        inner: True for '#![...]' style attributes applying to the enclosing scope.
    """
    name: str
    args: Optional[str] = None
    text: str = ""
    inner: bool = False

    @property
    def base_name(self) -> str:
        """Last path segment of the attribute name."""
        return self.name.rsplit("::", 1)[-1]


@dataclass
class CommentAttribute(Attribute):
    """
    Documentation or plain comment leading a declaration.

    Kept apart from functional attributes so comment removal never touches
    conditional compilation or derive markers.

    Attributes:
        is_doc: True for doc comments ('///', '//!', '/** */', '#[doc]').
    """
    is_doc: bool = True

# -----------------------------------------------------------------------------
# TYPE SIGNATURES
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class TypeRef:
    """
    Shallow structural view of a type expression.

    Attributes:
        name: Last path segment ('String' for 'std::string::String', '()' for unit).
        args: Generic type arguments; lifetimes are not kept.
        is_reference: True when the type is borrowed ('&str', '&'a String').
        text: Original source text of the type.
    """
    name: str
    args: Tuple["TypeRef", ...] = ()
    is_reference: bool = False
    text: str = ""


@dataclass(frozen=True)
class TypeClassification:
    """Return type shape, with the wrapping container for WRAPPED shapes."""
    shape: ReturnShape
    container: Optional[ContainerKind] = None

    @property
    def is_string_like(self) -> bool:
        return self.shape in (ReturnShape.STRING_LIKE, ReturnShape.WRAPPED)


@dataclass
class TypeSignature:
    """Parameter types and return type of a function."""
    params: List[str] = field(default_factory=list)
    return_type: Optional[TypeRef] = None

# -----------------------------------------------------------------------------
# DECLARATIONS
# -----------------------------------------------------------------------------

@dataclass
class Member:
    """A struct field or enum variant with its own leading attributes."""
    text: str
    attributes: List[Attribute] = field(default_factory=list)


@dataclass
class Declaration:
    """
    Tagged declaration node.

    'text' holds the header for declarations that own a block (functions,
    modules, traits, impls, braced structs and enums) and the complete
    source text for everything else.

    Attributes:
        kind: Variant tag.
        text: Header or full text, dedented to column zero.
        name: Declared identifier, when the declaration has one.
        attributes: Outer attributes and leading comments, in source order.
        inner_attributes: '#![...]' and '//!' entries inside a scope body.
        signature: Function signature (FUNCTION only).
        body: Function block text; None for a bodiless signature.
        text_verbatim: Line indexes of 'text' that start inside a multi-line
            string literal and must be emitted without re-indentation.
        body_verbatim: Same as text_verbatim, for the lines of 'body'.
        children: Nested declarations of a scope; None for 'mod name;'.
        members: Braced fields or variants of a TYPE declaration.
        trait_name: Implemented trait (IMPL only), last path segment.
        self_type: Implementing type (IMPL only), base name.
    """
    kind: DeclarationKind
    text: str
    name: Optional[str] = None
    attributes: List[Attribute] = field(default_factory=list)
    inner_attributes: List[Attribute] = field(default_factory=list)
    signature: Optional[TypeSignature] = None
    body: Optional[str] = None
    children: Optional[List["Declaration"]] = None
    members: Optional[List[Member]] = None
    trait_name: Optional[str] = None
    self_type: Optional[str] = None
    text_verbatim: FrozenSet[int] = frozenset()
    body_verbatim: FrozenSet[int] = frozenset()

    @property
    def is_scope(self) -> bool:
        return self.kind in SCOPE_KINDS


@dataclass
class SyntaxTree:
    """One parsed source file."""
    declarations: List[Declaration] = field(default_factory=list)
    inner_attributes: List[Attribute] = field(default_factory=list)

from __future__ import annotations

"""
Return Type Classifier.

Decides from the declared return type alone whether a function produces
text. Classification is purely structural: type names are matched on their
last path segment and no type is ever resolved across files.
"""

from typing import Dict, Optional

from codecontext.domain.constants import STRING_TYPE_NAMES, TEXT_POINTER_NAMES
from codecontext.domain.syntax_models import (
    ContainerKind,
    ReturnShape,
    TypeClassification,
    TypeRef,
)

_CONTAINERS: Dict[str, ContainerKind] = {kind.value: kind for kind in ContainerKind}

_UNIT = TypeClassification(ReturnShape.UNIT)
_STRING_LIKE = TypeClassification(ReturnShape.STRING_LIKE)
_OTHER = TypeClassification(ReturnShape.OTHER)

# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def classify_return_type(type_ref: Optional[TypeRef]) -> TypeClassification:
    """
    Classify a return type as unit, string-like, wrapped string-like or other.

    Result and Option are unwrapped exactly one layer: 'Option<String>' is
    wrapped string-like, 'Result<Option<String>, E>' is not.

    Args:
        type_ref: Declared return type, None when the function returns unit.

    Returns:
        TypeClassification: Shape and, for wrapped shapes, the container.
    """
    if type_ref is None or type_ref.name == "()":
        return _UNIT

    if is_text_type(type_ref):
        return _STRING_LIKE

    container = _CONTAINERS.get(type_ref.name)
    if container is not None and not type_ref.is_reference and type_ref.args:
        if is_text_type(type_ref.args[0]):
            return TypeClassification(ReturnShape.WRAPPED, container)

    return _OTHER


def is_string_like(type_ref: Optional[TypeRef]) -> bool:
    """True when the return type is text, directly or wrapped one layer."""
    return classify_return_type(type_ref).is_string_like


def is_text_type(type_ref: TypeRef) -> bool:
    """
    Check whether a type directly denotes owned or borrowed text.

    Covers 'String', 'str' and their references, fully qualified paths such
    as 'std::string::String', and 'Cow<str>'.
    """
    if type_ref.name in STRING_TYPE_NAMES:
        return True
    if type_ref.name in TEXT_POINTER_NAMES:
        return any(arg.name == "str" for arg in type_ref.args)
    return False

"""
Attribute handling for declarations.

Raw ``[Key=value]`` lists from the syntax tree are parsed into a closed set
of ``Attribute`` values, then checked against the attributes each kind of
declaration accepts. Anything unknown or misplaced is an error; nothing is
silently ignored. A missing list parses to the empty (all-default) set.
"""

from __future__ import annotations

from collections.abc import Sequence
from enum import Enum
from typing import ClassVar

from pydantic import BaseModel, ConfigDict

from ..errors import UnsupportedAttributeError, make_error
from ..syntax import AttributeNode, SourceLocation


class AttributeKind(str, Enum):
    """Every attribute bridgegen understands."""

    BY_REF = "ByRef"
    ENUM = "Enum"
    ERROR = "Error"
    NAME = "Name"
    SELF_TYPE = "Self"
    THREADSAFE = "Threadsafe"  # deprecated
    THROWS = "Throws"
    EXTERNAL = "External"
    CUSTOM = "Custom"


class SelfType(str, Enum):
    """Receiver-passing conventions for methods."""

    BY_ARC = "ByArc"  # receiver is a shared handle rather than a reference


_FLAG_ATTRIBUTES = frozenset(
    {
        AttributeKind.BY_REF,
        AttributeKind.ENUM,
        AttributeKind.ERROR,
        AttributeKind.THREADSAFE,
        AttributeKind.CUSTOM,
    }
)


class Attribute(BaseModel):
    """A single validated attribute."""

    kind: AttributeKind
    value: str | None = None

    model_config = ConfigDict(frozen=True)


def parse_attribute(node: AttributeNode, owner: str | None = None) -> Attribute:
    """
    Convert a raw attribute node into an ``Attribute``.

    Args:
        node: Raw attribute from the syntax tree
        owner: Name of the declaration carrying the attribute, for errors

    Raises:
        UnsupportedAttributeError: If the key is unknown or the value is malformed
    """
    try:
        kind = AttributeKind(node.key)
    except ValueError:
        raise make_error(
            UnsupportedAttributeError,
            f"Unsupported attribute: {node.key}",
            name=owner,
            location=node.location,
        ) from None

    if kind in _FLAG_ATTRIBUTES:
        if node.value is not None:
            raise make_error(
                UnsupportedAttributeError,
                f"Attribute '{kind.value}' does not take a value",
                name=owner,
                location=node.location,
            )
        return Attribute(kind=kind)

    if not node.value:
        raise make_error(
            UnsupportedAttributeError,
            f"Attribute '{kind.value}' requires a value",
            name=owner,
            location=node.location,
        )
    if kind == AttributeKind.SELF_TYPE:
        try:
            SelfType(node.value)
        except ValueError:
            raise make_error(
                UnsupportedAttributeError,
                f"Unsupported Self Type: {node.value}",
                name=owner,
                location=node.location,
            ) from None
    return Attribute(kind=kind, value=node.value)


class AttributeSet(BaseModel):
    """
    Base class for the per-declaration attribute sets.

    Subclasses declare which attribute kinds they accept in ``allowed``.
    """

    allowed: ClassVar[frozenset[AttributeKind]] = frozenset()
    label: ClassVar[str] = "declaration"

    attributes: tuple[Attribute, ...] = ()

    model_config = ConfigDict(frozen=True)

    @classmethod
    def from_nodes(
        cls,
        nodes: Sequence[AttributeNode] | None,
        owner: str | None = None,
        location: SourceLocation | None = None,
    ):
        """
        Parse and validate a raw attribute list.

        Args:
            nodes: Raw attributes, or None when the declaration has none
            owner: Name of the declaration, for error messages
            location: Fallback location when an attribute node has none

        Raises:
            UnsupportedAttributeError: On an unknown or misplaced attribute
        """
        if not nodes:
            return cls()
        attributes = []
        for node in nodes:
            attribute = parse_attribute(node, owner)
            if attribute.kind not in cls.allowed:
                raise make_error(
                    UnsupportedAttributeError,
                    f"{attribute.kind.value} not supported for {cls.label}",
                    name=owner,
                    location=node.location or location,
                )
            attributes.append(attribute)
        return cls(attributes=tuple(attributes))

    def _has(self, kind: AttributeKind) -> bool:
        return any(attr.kind == kind for attr in self.attributes)

    def _value(self, kind: AttributeKind) -> str | None:
        return next((attr.value for attr in self.attributes if attr.kind == kind), None)


class _ThrowingAttributes(AttributeSet):
    def get_throws_err(self) -> str | None:
        return self._value(AttributeKind.THROWS)


class RecordAttributes(AttributeSet):
    label: ClassVar[str] = "dictionaries"


class FieldAttributes(AttributeSet):
    label: ClassVar[str] = "dictionary members"


class EnumAttributes(AttributeSet):
    """``[Error]`` marks a plain enum as a flat error family."""

    allowed: ClassVar[frozenset[AttributeKind]] = frozenset({AttributeKind.ERROR})
    label: ClassVar[str] = "enums"

    def contains_error_attr(self) -> bool:
        return self._has(AttributeKind.ERROR)


class InterfaceAttributes(AttributeSet):
    allowed: ClassVar[frozenset[AttributeKind]] = frozenset(
        {AttributeKind.ENUM, AttributeKind.ERROR, AttributeKind.THREADSAFE}
    )
    label: ClassVar[str] = "interfaces"

    def contains_enum_attr(self) -> bool:
        return self._has(AttributeKind.ENUM)

    def contains_error_attr(self) -> bool:
        return self._has(AttributeKind.ERROR)

    def threadsafe(self) -> bool:
        return self._has(AttributeKind.THREADSAFE)


class CallbackInterfaceAttributes(AttributeSet):
    label: ClassVar[str] = "callback interfaces"


class FunctionAttributes(_ThrowingAttributes):
    allowed: ClassVar[frozenset[AttributeKind]] = frozenset({AttributeKind.THROWS})
    label: ClassVar[str] = "functions"


class ArgumentAttributes(AttributeSet):
    allowed: ClassVar[frozenset[AttributeKind]] = frozenset({AttributeKind.BY_REF})
    label: ClassVar[str] = "arguments"

    def by_ref(self) -> bool:
        return self._has(AttributeKind.BY_REF)


class ConstructorAttributes(_ThrowingAttributes):
    """``[Throws=E]`` and ``[Name=alt]`` for alternate constructors."""

    allowed: ClassVar[frozenset[AttributeKind]] = frozenset(
        {AttributeKind.THROWS, AttributeKind.NAME}
    )
    label: ClassVar[str] = "constructors"

    def get_name(self) -> str | None:
        return self._value(AttributeKind.NAME)


class MethodAttributes(_ThrowingAttributes):
    allowed: ClassVar[frozenset[AttributeKind]] = frozenset(
        {AttributeKind.THROWS, AttributeKind.SELF_TYPE}
    )
    label: ClassVar[str] = "methods"

    def get_self_by_arc(self) -> bool:
        return self._value(AttributeKind.SELF_TYPE) == SelfType.BY_ARC.value


class TypedefAttributes(AttributeSet):
    """``[External=source]`` or ``[Custom]`` on a typedef."""

    allowed: ClassVar[frozenset[AttributeKind]] = frozenset(
        {AttributeKind.EXTERNAL, AttributeKind.CUSTOM}
    )
    label: ClassVar[str] = "typedefs"

    def get_source(self) -> str | None:
        return self._value(AttributeKind.EXTERNAL)

    def is_custom(self) -> bool:
        return self._has(AttributeKind.CUSTOM)

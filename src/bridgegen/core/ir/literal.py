"""
Literal values used as defaults for record fields and arguments.

Integers keep the radix they were written in so generated bindings can
reproduce ``0xFF`` rather than ``255``. Floats keep their source text to
avoid any precision loss on the way through.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict

from ..errors import InvalidLiteralError, make_error
from ..syntax import DefaultValueKind, DefaultValueNode
from .types import (
    FLOAT_KINDS,
    INTEGER_BITS,
    SIGNED_INTEGER_KINDS,
    UNSIGNED_INTEGER_KINDS,
    Type,
    TypeKind,
)


class LiteralKind(str, Enum):
    BOOLEAN = "boolean"
    STRING = "string"
    UINT = "uint"
    INT = "int"
    FLOAT = "float"
    ENUM = "enum"
    EMPTY_SEQUENCE = "empty_sequence"
    EMPTY_MAP = "empty_map"
    NULL = "null"


class Radix(int, Enum):
    DECIMAL = 10
    OCTAL = 8
    HEXADECIMAL = 16


class Literal(BaseModel):
    """
    A typed literal value.

    Attributes:
        kind: Literal category
        value: Python value (bool, int or str); None for null/empty literals
        radix: Radix the integer was written in
        type: Declared type the literal was checked against
    """

    kind: LiteralKind
    value: bool | int | str | None = None
    radix: Radix | None = None
    type: Type | None = None

    model_config = ConfigDict(frozen=True)


def _parse_integer(text: str) -> tuple[int, Radix]:
    negative = text.startswith("-")
    digits = text[1:] if negative or text.startswith("+") else text
    if digits.lower().startswith("0x"):
        value, radix = int(digits[2:], 16), Radix.HEXADECIMAL
    elif len(digits) > 1 and digits.startswith("0"):
        value, radix = int(digits[1:], 8), Radix.OCTAL
    else:
        value, radix = int(digits, 10), Radix.DECIMAL
    return (-value if negative else value), radix


def _integer_literal(node: DefaultValueNode, type_: Type) -> Literal:
    try:
        value, radix = _parse_integer(node.text.strip())
    except ValueError as e:
        raise make_error(
            InvalidLiteralError,
            f"Malformed integer literal '{node.text}'",
            location=node.location,
        ) from e

    bits = INTEGER_BITS[type_.kind]
    if type_.kind in UNSIGNED_INTEGER_KINDS:
        low, high, kind = 0, (1 << bits) - 1, LiteralKind.UINT
    else:
        low, high, kind = -(1 << (bits - 1)), (1 << (bits - 1)) - 1, LiteralKind.INT
    if not low <= value <= high:
        raise make_error(
            InvalidLiteralError,
            f"Integer literal '{node.text}' is out of range for type {type_}",
            location=node.location,
        )
    return Literal(kind=kind, value=value, radix=radix, type=type_)


def convert_default_value(node: DefaultValueNode, type_: Type) -> Literal:
    """
    Check a default value against its declared type and convert it.

    Args:
        node: Default value as written in the document
        type_: Resolved type of the field or argument

    Returns:
        The typed literal

    Raises:
        InvalidLiteralError: If the value cannot inhabit ``type_``
    """
    kind = node.kind
    if kind == DefaultValueKind.BOOLEAN and type_.kind == TypeKind.BOOLEAN:
        if node.text not in ("true", "false"):
            raise make_error(
                InvalidLiteralError,
                f"Malformed boolean literal '{node.text}'",
                location=node.location,
            )
        return Literal(kind=LiteralKind.BOOLEAN, value=node.text == "true", type=type_)
    if kind == DefaultValueKind.STRING and type_.kind == TypeKind.STRING:
        return Literal(kind=LiteralKind.STRING, value=node.text, type=type_)
    if kind == DefaultValueKind.INTEGER and type_.kind in (
        SIGNED_INTEGER_KINDS | UNSIGNED_INTEGER_KINDS
    ):
        return _integer_literal(node, type_)
    if kind in (DefaultValueKind.INTEGER, DefaultValueKind.FLOAT) and type_.kind in FLOAT_KINDS:
        try:
            float(node.text)
        except ValueError as e:
            raise make_error(
                InvalidLiteralError,
                f"Malformed float literal '{node.text}'",
                location=node.location,
            ) from e
        return Literal(kind=LiteralKind.FLOAT, value=node.text, type=type_)
    if kind == DefaultValueKind.NULL and type_.kind == TypeKind.OPTIONAL:
        return Literal(kind=LiteralKind.NULL, type=type_)
    if kind == DefaultValueKind.EMPTY_SEQUENCE and type_.kind == TypeKind.SEQUENCE:
        return Literal(kind=LiteralKind.EMPTY_SEQUENCE, type=type_)
    if kind == DefaultValueKind.EMPTY_MAP and type_.kind == TypeKind.MAP:
        return Literal(kind=LiteralKind.EMPTY_MAP, type=type_)
    if kind == DefaultValueKind.IDENTIFIER and type_.kind == TypeKind.ENUM:
        return Literal(kind=LiteralKind.ENUM, value=node.text, type=type_)

    raise make_error(
        InvalidLiteralError,
        f"Cannot use {kind.value} default value '{node.text}' for type {type_}",
        location=node.location,
    )

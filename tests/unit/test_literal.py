"""Tests for default value conversion."""

import pytest

from bridgegen.core.errors import InvalidLiteralError
from bridgegen.core.ir import LiteralKind, Radix, Type, TypeKind, convert_default_value
from bridgegen.core.syntax import DefaultValueKind, DefaultValueNode

U8 = Type.builtin(TypeKind.UINT8)
I8 = Type.builtin(TypeKind.INT8)
I32 = Type.builtin(TypeKind.INT32)
U32 = Type.builtin(TypeKind.UINT32)
F64 = Type.builtin(TypeKind.FLOAT64)
STRING = Type.builtin(TypeKind.STRING)


def node(kind: DefaultValueKind, text: str = "") -> DefaultValueNode:
    return DefaultValueNode(kind=kind, text=text)


class TestIntegerLiterals:
    def test_hexadecimal(self):
        literal = convert_default_value(node(DefaultValueKind.INTEGER, "0x1F"), U8)
        assert literal.kind == LiteralKind.UINT
        assert literal.value == 31
        assert literal.radix == Radix.HEXADECIMAL

    def test_octal(self):
        literal = convert_default_value(node(DefaultValueKind.INTEGER, "017"), I32)
        assert literal.value == 15
        assert literal.radix == Radix.OCTAL

    def test_zero_is_decimal(self):
        literal = convert_default_value(node(DefaultValueKind.INTEGER, "0"), I32)
        assert literal.value == 0
        assert literal.radix == Radix.DECIMAL

    def test_negative_signed(self):
        literal = convert_default_value(node(DefaultValueKind.INTEGER, "-5"), I8)
        assert literal.kind == LiteralKind.INT
        assert literal.value == -5

    @pytest.mark.parametrize(
        ("text", "type_"),
        [("256", U8), ("-1", U32), ("128", I8), ("-129", I8)],
    )
    def test_out_of_range(self, text, type_):
        with pytest.raises(InvalidLiteralError, match="out of range"):
            convert_default_value(node(DefaultValueKind.INTEGER, text), type_)

    def test_range_bounds(self):
        assert convert_default_value(node(DefaultValueKind.INTEGER, "127"), I8).value == 127
        assert convert_default_value(node(DefaultValueKind.INTEGER, "-128"), I8).value == -128
        assert convert_default_value(node(DefaultValueKind.INTEGER, "255"), U8).value == 255

    @pytest.mark.parametrize("text", ["0x", "08", "12a"])
    def test_malformed(self, text):
        with pytest.raises(InvalidLiteralError, match="Malformed"):
            convert_default_value(node(DefaultValueKind.INTEGER, text), I32)


class TestOtherLiterals:
    def test_boolean(self):
        boolean = Type.builtin(TypeKind.BOOLEAN)
        literal = convert_default_value(node(DefaultValueKind.BOOLEAN, "true"), boolean)
        assert literal.kind == LiteralKind.BOOLEAN
        assert literal.value is True

    def test_string(self):
        literal = convert_default_value(node(DefaultValueKind.STRING, "hi"), STRING)
        assert literal.value == "hi"

    def test_float_keeps_source_text(self):
        literal = convert_default_value(node(DefaultValueKind.FLOAT, "3.50"), F64)
        assert literal.kind == LiteralKind.FLOAT
        assert literal.value == "3.50"

    def test_integer_for_float_type(self):
        literal = convert_default_value(node(DefaultValueKind.INTEGER, "2"), F64)
        assert literal.kind == LiteralKind.FLOAT

    def test_null_for_optional(self):
        literal = convert_default_value(node(DefaultValueKind.NULL), Type.optional(STRING))
        assert literal.kind == LiteralKind.NULL

    def test_empty_sequence_and_map(self):
        seq = convert_default_value(node(DefaultValueKind.EMPTY_SEQUENCE), Type.sequence(I32))
        assert seq.kind == LiteralKind.EMPTY_SEQUENCE
        mapping = convert_default_value(
            node(DefaultValueKind.EMPTY_MAP), Type.map(STRING, I32)
        )
        assert mapping.kind == LiteralKind.EMPTY_MAP

    def test_enum_identifier(self):
        default = node(DefaultValueKind.IDENTIFIER, "Red")
        literal = convert_default_value(default, Type.enum("Color"))
        assert literal.kind == LiteralKind.ENUM
        assert literal.value == "Red"
        assert literal.type == Type.enum("Color")

    @pytest.mark.parametrize(
        ("default", "type_"),
        [
            (node(DefaultValueKind.NULL), STRING),
            (node(DefaultValueKind.STRING, "hi"), I32),
            (node(DefaultValueKind.EMPTY_SEQUENCE), Type.map(STRING, I32)),
            (node(DefaultValueKind.IDENTIFIER, "Red"), Type.record("Point")),
            (node(DefaultValueKind.FLOAT, "1.5"), I32),
        ],
    )
    def test_incompatible(self, default, type_):
        with pytest.raises(InvalidLiteralError, match="Cannot use"):
            convert_default_value(default, type_)

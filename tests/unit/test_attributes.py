"""Tests for attribute parsing and per-declaration validation."""

import pytest

from bridgegen.core.errors import UnsupportedAttributeError
from bridgegen.core.ir import (
    ArgumentAttributes,
    AttributeKind,
    ConstructorAttributes,
    EnumAttributes,
    FunctionAttributes,
    InterfaceAttributes,
    MethodAttributes,
    RecordAttributes,
    TypedefAttributes,
    parse_attribute,
)
from bridgegen.core.syntax import AttributeNode


def attr(key: str, value: str | None = None) -> AttributeNode:
    return AttributeNode(key=key, value=value)


class TestParseAttribute:
    def test_flag(self):
        assert parse_attribute(attr("ByRef")).kind == AttributeKind.BY_REF

    def test_valued(self):
        parsed = parse_attribute(attr("Throws", "ArithmeticError"))
        assert parsed.kind == AttributeKind.THROWS
        assert parsed.value == "ArithmeticError"

    def test_unknown_key(self):
        with pytest.raises(UnsupportedAttributeError, match="Unsupported attribute: Frobnicate"):
            parse_attribute(attr("Frobnicate"), owner="compute")

    def test_flag_with_value(self):
        with pytest.raises(UnsupportedAttributeError, match="does not take a value"):
            parse_attribute(attr("ByRef", "yes"))

    def test_missing_value(self):
        with pytest.raises(UnsupportedAttributeError, match="requires a value"):
            parse_attribute(attr("Throws"))

    def test_bad_self_type(self):
        with pytest.raises(UnsupportedAttributeError, match="Unsupported Self Type"):
            parse_attribute(attr("Self", "ByValue"))


class TestAttributeSets:
    def test_missing_list_is_default(self):
        attrs = FunctionAttributes.from_nodes(None)
        assert attrs.get_throws_err() is None
        assert attrs.attributes == ()

    def test_throws(self):
        attrs = FunctionAttributes.from_nodes([attr("Throws", "MathError")])
        assert attrs.get_throws_err() == "MathError"

    def test_by_ref(self):
        assert ArgumentAttributes.from_nodes([attr("ByRef")]).by_ref()
        assert not ArgumentAttributes.from_nodes([]).by_ref()

    def test_misplaced_attribute(self):
        with pytest.raises(UnsupportedAttributeError, match="ByRef not supported for dictionaries"):
            RecordAttributes.from_nodes([attr("ByRef")], owner="Point")

    def test_enum_error_flag(self):
        assert EnumAttributes.from_nodes([attr("Error")]).contains_error_attr()

    def test_interface_flags(self):
        attrs = InterfaceAttributes.from_nodes([attr("Enum")])
        assert attrs.contains_enum_attr()
        assert not attrs.contains_error_attr()
        assert InterfaceAttributes.from_nodes([attr("Threadsafe")]).threadsafe()

    def test_constructor_name(self):
        attrs = ConstructorAttributes.from_nodes([attr("Name", "from_bytes")])
        assert attrs.get_name() == "from_bytes"
        assert attrs.get_throws_err() is None

    def test_method_self_by_arc(self):
        assert MethodAttributes.from_nodes([attr("Self", "ByArc")]).get_self_by_arc()
        assert not MethodAttributes.from_nodes(None).get_self_by_arc()

    def test_method_rejects_name(self):
        with pytest.raises(UnsupportedAttributeError):
            MethodAttributes.from_nodes([attr("Name", "other")])

    def test_typedef(self):
        external = TypedefAttributes.from_nodes([attr("External", "other_crate")])
        assert external.get_source() == "other_crate"
        assert not external.is_custom()
        assert TypedefAttributes.from_nodes([attr("Custom")]).is_custom()

"""Tests for the TypeUniverse registry."""

import pytest

from bridgegen.core.errors import DuplicateDefinitionError, UnknownTypeError
from bridgegen.core.ir import Type, TypeKind
from bridgegen.core.syntax import SourceLocation
from bridgegen.core.type_expressions import parse_type_expression
from bridgegen.core.type_universe import TypeUniverse


@pytest.fixture
def universe() -> TypeUniverse:
    types = TypeUniverse()
    types.add_type_definition("Foo", Type.record("Foo"))
    return types


class TestAddTypeDefinition:
    def test_same_binding_is_noop(self, universe: TypeUniverse):
        universe.add_type_definition("Foo", Type.record("Foo"))
        assert universe.get_type_definition("Foo") == Type.record("Foo")

    def test_conflicting_binding(self, universe: TypeUniverse):
        with pytest.raises(DuplicateDefinitionError) as exc_info:
            universe.add_type_definition("Foo", Type.enum("Foo"))
        assert exc_info.value.name == "Foo"

    def test_builtin_name_cannot_be_shadowed(self, universe: TypeUniverse):
        with pytest.raises(DuplicateDefinitionError, match="shadow"):
            universe.add_type_definition("string", Type.record("string"))

    def test_definition_is_known(self, universe: TypeUniverse):
        assert Type.record("Foo") in list(universe.iter_known_types())

    def test_missing_lookup(self, universe: TypeUniverse):
        assert universe.get_type_definition("Bar") is None


class TestResolveTypeExpression:
    def test_builtin(self, universe: TypeUniverse):
        assert universe.resolve_type_expression(parse_type_expression("u16")) == Type.builtin(
            TypeKind.UINT16
        )

    def test_registers_every_level(self, universe: TypeUniverse):
        resolved = universe.resolve_type_expression(parse_type_expression("sequence<Foo>?"))
        sequence = Type.sequence(Type.record("Foo"))
        assert resolved == Type.optional(sequence)
        known = list(universe.iter_known_types())
        assert sequence in known
        assert Type.optional(sequence) in known

    def test_map(self, universe: TypeUniverse):
        resolved = universe.resolve_type_expression(parse_type_expression("record<string, Foo>"))
        assert resolved == Type.map(Type.builtin(TypeKind.STRING), Type.record("Foo"))

    def test_unknown_name(self, universe: TypeUniverse):
        with pytest.raises(UnknownTypeError, match="Failed to resolve type `Missing`") as exc_info:
            universe.resolve_type_expression(parse_type_expression("sequence<Missing>"))
        assert exc_info.value.name == "Missing"

    def test_unknown_name_reports_location(self, universe: TypeUniverse):
        location = SourceLocation(file="a.udl", line=3, column=5)
        with pytest.raises(UnknownTypeError) as exc_info:
            universe.resolve_type_expression(parse_type_expression("Missing", location))
        assert exc_info.value.context is not None
        assert exc_info.value.context.format() == "a.udl:3:5 in declaration Missing"

"""Tests for ComponentInterface checksums, FFI derivation and type queries."""

import re

import pytest

from bridgegen.core.builder import build_component_interface
from bridgegen.core.config import BuildConfig
from bridgegen.core.errors import DuplicateDefinitionError, InternalMappingError
from bridgegen.core.interface import ComponentInterface
from bridgegen.core.ir import (
    ArgumentSpec,
    FFIType,
    FieldSpec,
    FunctionSpec,
    RecordSpec,
    Type,
    TypeKind,
    ffi_type_for,
)
from bridgegen.core.syntax import (
    ArgumentNode,
    AttributeNode,
    CallbackInterfaceDecl,
    ConstructorNode,
    DictionaryDecl,
    InterfaceDecl,
    InterfaceDocument,
    MemberNode,
    NamespaceDecl,
    OperationNode,
    TypedefDecl,
)
from bridgegen.core.type_expressions import parse_type_expression as t

I32 = Type.builtin(TypeKind.INT32)
STRING = Type.builtin(TypeKind.STRING)


def point(x_name: str = "x", y_type: str = "i32") -> DictionaryDecl:
    return DictionaryDecl(
        name="Point",
        members=[
            MemberNode(name=x_name, type=t("i32")),
            MemberNode(name="y", type=t(y_type)),
        ],
    )


def describe(ci: ComponentInterface) -> list[tuple]:
    return [
        (f.name, [(a.name, a.type) for a in f.arguments], f.return_type)
        for f in ci.iter_ffi_function_definitions()
    ]


# ---------------------------------------------------------------------------
# Checksum and namespace
# ---------------------------------------------------------------------------


class TestChecksum:
    def test_hello_scenario(self, hello_document: InterfaceDocument):
        ci = build_component_interface(hello_document)
        functions = list(ci.iter_ffi_function_definitions())
        assert len(functions) == 5

        hello = functions[0]
        assert re.fullmatch(r"example_[0-9a-f]{4}_hello", hello.name)
        assert hello.name == f"example_{ci.checksum() & 0xFFFF:04x}_hello"
        assert hello.arguments == []
        assert hello.return_type == FFIType.BYTE_BUFFER

    def test_ffi_namespace(self, build):
        ci = build(point())
        assert ci.ffi_namespace() == f"example_{ci.checksum() & 0xFFFF:04x}"

    def test_checksum_is_64_bit(self, build):
        assert 0 <= build(point()).checksum() < 2**64

    def test_independent_builds_agree(self, build):
        assert build(point()).checksum() == build(point()).checksum()

    def test_field_name_changes_checksum(self, build):
        assert build(point()).checksum() != build(point(x_name="x0")).checksum()

    def test_field_type_changes_checksum(self, build):
        assert build(point()).checksum() != build(point(y_type="i64")).checksum()

    def test_attribute_changes_checksum(self, build):
        def with_arg(attributes):
            return NamespaceDecl(
                name="example",
                functions=[
                    OperationNode(
                        name="take",
                        arguments=[ArgumentNode(name="p", type=t("string"), attributes=attributes)],
                    )
                ],
            )

        plain = build(with_arg(None))
        by_ref = build(with_arg([AttributeNode(key="ByRef")]))
        assert plain.checksum() != by_ref.checksum()

    def test_namespace_changes_checksum(self, build):
        assert build(point()).checksum() != build(point(), namespace="other").checksum()

    def test_generator_version_changes_checksum(self, build):
        a = build(point(), config=BuildConfig(generator_version="1.0"))
        b = build(point(), config=BuildConfig(generator_version="1.1"))
        assert a.checksum() != b.checksum()

    def test_derived_ffi_is_not_checksummed(self):
        ci = ComponentInterface(generator_version="1.0")
        ci.add_namespace_definition("example")
        ci.add_function_definition(FunctionSpec(name="hello", return_type=STRING))
        before = ci.checksum()
        ci.derive_ffi_funcs()
        assert ci.get_function_definition("hello").ffi_func is not None
        assert ci.checksum() == before


# ---------------------------------------------------------------------------
# FFI functions
# ---------------------------------------------------------------------------


class TestFFIFunctions:
    def test_byte_buffer_builtins(self, hello_document: InterfaceDocument):
        ci = build_component_interface(hello_document)
        ns = ci.ffi_namespace()
        builtins = [
            (f.name, [(a.name, a.type) for a in f.arguments], f.return_type)
            for f in ci.iter_byte_buffer_ffi_function_definitions()
        ]
        assert builtins == [
            (f"ffi_{ns}_bytebuffer_alloc", [("size", FFIType.INT32)], FFIType.BYTE_BUFFER),
            (
                f"ffi_{ns}_bytebuffer_from_bytes",
                [("bytes", FFIType.FOREIGN_BYTES)],
                FFIType.BYTE_BUFFER,
            ),
            (f"ffi_{ns}_bytebuffer_free", [("buf", FFIType.BYTE_BUFFER)], None),
            (
                f"ffi_{ns}_bytebuffer_reserve",
                [("buf", FFIType.BYTE_BUFFER), ("additional", FFIType.INT32)],
                FFIType.BYTE_BUFFER,
            ),
        ]

    def test_symbol_order(self, build):
        ci = build(
            NamespaceDecl(
                name="example",
                functions=[OperationNode(name="make", return_type=t("Counter"))],
            ),
            InterfaceDecl(
                name="Counter",
                constructors=[ConstructorNode()],
                operations=[OperationNode(name="get", return_type=t("u32"))],
            ),
            CallbackInterfaceDecl(
                name="Listener",
                operations=[
                    OperationNode(
                        name="on_change", arguments=[ArgumentNode(name="value", type=t("u32"))]
                    )
                ],
            ),
        )
        ns = ci.ffi_namespace()
        assert [f.name for f in ci.iter_user_ffi_function_definitions()] == [
            f"ffi_{ns}_Counter_object_free",
            f"{ns}_Counter_new",
            f"{ns}_Counter_get",
            f"ffi_{ns}_Listener_init_callback",
            f"{ns}_make",
        ]
        assert len(list(ci.iter_ffi_function_definitions())) == 9
        assert ci.get_function_definition("make").ffi_func.return_type == FFIType.OBJECT_HANDLE

    def test_method_lowering(self, build):
        ci = build(
            InterfaceDecl(
                name="Counter",
                operations=[
                    OperationNode(
                        name="add",
                        arguments=[
                            ArgumentNode(name="amount", type=t("u64")),
                            ArgumentNode(name="enabled", type=t("boolean")),
                            ArgumentNode(name="label", type=t("string?")),
                        ],
                        return_type=t("sequence<u64>"),
                    )
                ],
            )
        )
        func = ci.get_object_definition("Counter").get_method("add").ffi_func
        assert [(a.name, a.type) for a in func.arguments] == [
            ("ptr", FFIType.OBJECT_HANDLE),
            ("amount", FFIType.UINT64),
            ("enabled", FFIType.INT8),
            ("label", FFIType.BYTE_BUFFER),
        ]
        assert func.return_type == FFIType.BYTE_BUFFER

    def test_signature(self, hello_document: InterfaceDocument):
        ci = build_component_interface(hello_document)
        hello = ci.get_function_definition("hello").ffi_func
        assert hello.signature() == f"{ci.ffi_namespace()}_hello() -> ByteBuffer"

    def test_derivation_is_idempotent(self, build):
        ci = build(
            point(),
            InterfaceDecl(
                name="Counter",
                constructors=[ConstructorNode()],
                operations=[OperationNode(name="get", return_type=t("Point"))],
            ),
        )
        before = describe(ci)
        ci.derive_ffi_funcs()
        assert describe(ci) == before


class TestFFITypes:
    @pytest.mark.parametrize(
        ("type_", "expected"),
        [
            (Type.builtin(TypeKind.BOOLEAN), FFIType.INT8),
            (Type.builtin(TypeKind.UINT16), FFIType.UINT16),
            (Type.builtin(TypeKind.FLOAT32), FFIType.FLOAT32),
            (Type.builtin(TypeKind.BYTES), FFIType.BYTE_BUFFER),
            (Type.optional(I32), FFIType.BYTE_BUFFER),
            (Type.map(STRING, I32), FFIType.BYTE_BUFFER),
            (Type.record("Point"), FFIType.BYTE_BUFFER),
            (Type.error("MathError"), FFIType.BYTE_BUFFER),
            (Type.external("Guid", "ids"), FFIType.BYTE_BUFFER),
            (Type.object("Counter"), FFIType.OBJECT_HANDLE),
            (Type.callback_interface("Listener"), FFIType.FOREIGN_CALLBACK),
            (Type.custom("Handle", Type.builtin(TypeKind.INT64)), FFIType.INT64),
        ],
    )
    def test_mapping(self, type_, expected):
        assert ffi_type_for(type_) == expected

    def test_unmapped_kind(self, monkeypatch):
        from bridgegen.core.ir import ffi

        monkeypatch.delitem(ffi._FFI_TYPE_FOR_KIND, TypeKind.RECORD)
        with pytest.raises(InternalMappingError):
            ffi_type_for(Type.record("Point"))


# ---------------------------------------------------------------------------
# Type queries
# ---------------------------------------------------------------------------


class TestTypeQueries:
    def test_mutually_recursive_records_terminate(self, build):
        ci = build(
            DictionaryDecl(name="A", members=[MemberNode(name="b", type=t("B?"))]),
            DictionaryDecl(name="B", members=[MemberNode(name="a", type=t("sequence<A>"))]),
        )
        found = list(ci.iter_types_in_item(Type.record("A")))
        records = [x.name for x in found if x.kind == TypeKind.RECORD]
        assert sorted(records) == ["A", "B"]
        assert len(found) == len(set(found))
        assert Type.sequence(Type.record("A")) in found

    def test_self_recursive_record(self, build):
        ci = build(DictionaryDecl(name="Node", members=[MemberNode(name="next", type=t("Node?"))]))
        found = list(ci.iter_types_in_item(Type.record("Node")))
        assert found == [Type.record("Node"), Type.optional(Type.record("Node"))]

    def test_item_contains_object_references(self, build):
        ci = build(
            point(),
            DictionaryDecl(
                name="Holder", members=[MemberNode(name="items", type=t("sequence<Counter>"))]
            ),
            InterfaceDecl(name="Counter"),
        )
        assert ci.item_contains_object_references(Type.record("Holder"))
        assert not ci.item_contains_object_references(Type.record("Point"))

    def test_item_contains_unsigned_types(self, build):
        ci = build(
            point(),
            DictionaryDecl(
                name="Sized",
                members=[MemberNode(name="inner", type=t("record<string, u32>"))],
            ),
        )
        assert ci.item_contains_unsigned_types(Type.record("Sized"))
        assert not ci.item_contains_unsigned_types(Type.record("Point"))

    def test_contains_structural_types(self, build):
        plain = build(point())
        assert not plain.contains_optional_types()
        assert not plain.contains_sequence_types()
        assert not plain.contains_map_types()

        rich = build(
            DictionaryDecl(
                name="Bag",
                members=[MemberNode(name="tags", type=t("record<string, sequence<string>>?"))],
            )
        )
        assert rich.contains_optional_types()
        assert rich.contains_sequence_types()
        assert rich.contains_map_types()

    def test_iter_types_includes_declared_and_structural(self, build):
        ci = build(
            point(),
            TypedefDecl(name="Guid", attributes=[AttributeNode(key="External", value="ids")]),
        )
        types = list(ci.iter_types())
        assert Type.record("Point") in types
        assert I32 in types
        assert Type.external("Guid", "ids") in types

    def test_get_type(self, build):
        ci = build(point())
        assert ci.get_type("Point") == Type.record("Point")
        assert ci.get_type("Nope") is None


class TestManualConstruction:
    def test_duplicate_record_definition(self):
        ci = ComponentInterface(generator_version="1.0")
        ci.add_record_definition(RecordSpec(name="Point"))
        with pytest.raises(DuplicateDefinitionError):
            ci.add_record_definition(RecordSpec(name="Point"))

    def test_function_clashing_with_type(self):
        ci = ComponentInterface(generator_version="1.0")
        ci.types.add_type_definition("Point", Type.record("Point"))
        with pytest.raises(DuplicateDefinitionError) as exc_info:
            ci.add_function_definition(FunctionSpec(name="Point"))
        assert exc_info.value.name == "Point"

    def test_lookups(self):
        ci = ComponentInterface(generator_version="1.0")
        ci.add_namespace_definition("example")
        ci.add_record_definition(
            RecordSpec(name="Point", fields=[FieldSpec(name="x", type=I32)])
        )
        ci.add_function_definition(
            FunctionSpec(name="norm", arguments=[ArgumentSpec(name="p", type=Type.record("Point"))])
        )
        assert ci.namespace() == "example"
        assert [r.name for r in ci.record_definitions()] == ["Point"]
        assert ci.get_function_definition("norm").arguments[0].name == "p"
        assert ci.get_object_definition("Point") is None
        assert "records=1" in repr(ci)

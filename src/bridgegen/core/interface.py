"""
The component interface.

A ``ComponentInterface`` holds the complete definition of the interface
between a native component and its foreign-language consumers, in two parts:

- the high-level API: records, enums, errors, functions, objects and
  callback interfaces;
- the low-level FFI contract derived from it: the exact symbol names,
  argument lists and return types of every exported function.

Scaffolding and bindings generated from the same interface with the same
bridgegen version cannot disagree about how to call each other. Symbol
names embed a checksum of the high-level API so that artifacts generated
from different versions fail to link rather than misbehave.

Instances are populated by the builder (see ``builder.py``) and then
finalized; a finalized interface is a read-only snapshot.
"""

import logging
from collections.abc import Iterator
from itertools import chain

from .._version import get_version
from . import ir
from .checksum import compute_checksum, dump_declarations
from .errors import BridgegenError, ConsistencyError, DuplicateDefinitionError, make_error
from .ir import Type, TypeKind
from .syntax import SourceLocation
from .type_universe import TypeUniverse

logger = logging.getLogger(__name__)


class ComponentInterface:
    """
    Complete model of a component's interface plus its derived FFI mapping.

    Attributes:
        generator_version: Version tag mixed into the checksum
        types: Registry of every type used by the interface
    """

    def __init__(self, generator_version: str | None = None):
        self.generator_version = generator_version or get_version()
        self.types = TypeUniverse()
        self._namespace: str | None = None
        self._enums: list[ir.EnumSpec] = []
        self._records: list[ir.RecordSpec] = []
        self._functions: list[ir.FunctionSpec] = []
        self._objects: list[ir.ObjectSpec] = []
        self._callback_interfaces: list[ir.CallbackInterfaceSpec] = []
        self._errors: list[ir.ErrorSpec] = []
        self._finalized = False

    def __repr__(self) -> str:
        return (
            f"ComponentInterface(namespace={self.namespace()!r}, "
            f"records={len(self._records)}, enums={len(self._enums)}, "
            f"errors={len(self._errors)}, functions={len(self._functions)}, "
            f"objects={len(self._objects)}, "
            f"callback_interfaces={len(self._callback_interfaces)})"
        )

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    def namespace(self) -> str:
        """The namespace within which this API is presented to callers."""
        return self._namespace or ""

    @property
    def has_namespace_definition(self) -> bool:
        """True once a namespace was declared, even an empty one."""
        return self._namespace is not None

    @property
    def is_finalized(self) -> bool:
        return self._finalized

    def enum_definitions(self) -> tuple[ir.EnumSpec, ...]:
        return tuple(self._enums)

    def get_enum_definition(self, name: str) -> ir.EnumSpec | None:
        return next((e for e in self._enums if e.name == name), None)

    def record_definitions(self) -> tuple[ir.RecordSpec, ...]:
        return tuple(self._records)

    def get_record_definition(self, name: str) -> ir.RecordSpec | None:
        return next((r for r in self._records if r.name == name), None)

    def function_definitions(self) -> tuple[ir.FunctionSpec, ...]:
        return tuple(self._functions)

    def get_function_definition(self, name: str) -> ir.FunctionSpec | None:
        return next((f for f in self._functions if f.name == name), None)

    def object_definitions(self) -> tuple[ir.ObjectSpec, ...]:
        return tuple(self._objects)

    def get_object_definition(self, name: str) -> ir.ObjectSpec | None:
        return next((o for o in self._objects if o.name == name), None)

    def callback_interface_definitions(self) -> tuple[ir.CallbackInterfaceSpec, ...]:
        return tuple(self._callback_interfaces)

    def get_callback_interface_definition(self, name: str) -> ir.CallbackInterfaceSpec | None:
        return next((c for c in self._callback_interfaces if c.name == name), None)

    def error_definitions(self) -> tuple[ir.ErrorSpec, ...]:
        return tuple(self._errors)

    def get_error_definition(self, name: str) -> ir.ErrorSpec | None:
        return next((e for e in self._errors if e.name == name), None)

    # ------------------------------------------------------------------
    # Type queries
    # ------------------------------------------------------------------

    def iter_types(self) -> Iterator[Type]:
        """Iterate over every type used anywhere in the interface."""
        return self.types.iter_known_types()

    def get_type(self, name: str) -> Type | None:
        return self.types.get_type_definition(name)

    def iter_external_types(self) -> Iterator[tuple[str, str]]:
        """Yield ``(name, source)`` for every external type."""
        for type_ in self.iter_types():
            if type_.kind == TypeKind.EXTERNAL:
                yield type_.name or "", type_.source or ""

    def iter_custom_types(self) -> Iterator[tuple[str, Type]]:
        """Yield ``(name, builtin)`` for every custom type."""
        for type_ in self.iter_types():
            if type_.kind == TypeKind.CUSTOM:
                yield type_.name or "", type_.builtin_type

    def iter_types_in_item(self, item: Type) -> Iterator[Type]:
        """
        Iterate over every type reachable from ``item``.

        Structural components are followed directly. User-defined types are
        additionally expanded into the field, variant and argument types of
        their declarations. Each distinct type is yielded once, and each
        declaration is expanded at most once, so mutually recursive
        declarations terminate.
        """
        return _iter_types_recursively(self, item)

    def item_contains_object_references(self, item: Type) -> bool:
        """True if ``item`` contains any, possibly nested, object reference."""
        return any(t.kind == TypeKind.OBJECT for t in self.iter_types_in_item(item))

    def item_contains_unsigned_types(self, item: Type) -> bool:
        return any(t.is_unsigned for t in self.iter_types_in_item(item))

    def contains_optional_types(self) -> bool:
        return any(t.kind == TypeKind.OPTIONAL for t in self.iter_types())

    def contains_sequence_types(self) -> bool:
        return any(t.kind == TypeKind.SEQUENCE for t in self.iter_types())

    def contains_map_types(self) -> bool:
        return any(t.kind == TypeKind.MAP for t in self.iter_types())

    def _lookup_declaration(self, type_: Type):
        if type_.kind == TypeKind.RECORD:
            return self.get_record_definition(type_.name or "")
        if type_.kind == TypeKind.ENUM:
            return self.get_enum_definition(type_.name or "")
        if type_.kind == TypeKind.ERROR:
            return self.get_error_definition(type_.name or "")
        if type_.kind == TypeKind.OBJECT:
            return self.get_object_definition(type_.name or "")
        if type_.kind == TypeKind.CALLBACK_INTERFACE:
            return self.get_callback_interface_definition(type_.name or "")
        return None

    # ------------------------------------------------------------------
    # Checksum and FFI
    # ------------------------------------------------------------------

    def checksum(self) -> int:
        """
        Calculate a 64-bit checksum of the high-level interface.

        Two interfaces built from the same declarations with the same
        generator version always share a checksum. Changing any name, type
        or attribute changes it with overwhelming probability. Derived FFI
        descriptors are not part of the input.
        """
        payload = {
            "generator_version": self.generator_version,
            "namespace": self.namespace(),
            "enums": dump_declarations(self._enums),
            "records": dump_declarations(self._records),
            "functions": dump_declarations(self._functions),
            "objects": dump_declarations(self._objects),
            "callback_interfaces": dump_declarations(self._callback_interfaces),
            "errors": dump_declarations(self._errors),
        }
        return compute_checksum(payload)

    def ffi_namespace(self) -> str:
        """
        The prefix used for every FFI symbol of this interface.

        This is the namespace followed by the low 16 bits of the checksum as
        four hex digits, e.g. ``example_1a2b``.
        """
        return f"{self.namespace()}_{self.checksum() & 0xFFFF:04x}"

    def ffi_bytebuffer_alloc(self) -> ir.FFIFunction:
        """Allocate a new byte buffer of the given size."""
        return ir.FFIFunction(
            name=f"ffi_{self.ffi_namespace()}_bytebuffer_alloc",
            arguments=[ir.FFIArgument(name="size", type=ir.FFIType.INT32)],
            return_type=ir.FFIType.BYTE_BUFFER,
        )

    def ffi_bytebuffer_from_bytes(self) -> ir.FFIFunction:
        """Copy foreign-owned bytes into a new byte buffer."""
        return ir.FFIFunction(
            name=f"ffi_{self.ffi_namespace()}_bytebuffer_from_bytes",
            arguments=[ir.FFIArgument(name="bytes", type=ir.FFIType.FOREIGN_BYTES)],
            return_type=ir.FFIType.BYTE_BUFFER,
        )

    def ffi_bytebuffer_free(self) -> ir.FFIFunction:
        """Free a byte buffer received from the native side."""
        return ir.FFIFunction(
            name=f"ffi_{self.ffi_namespace()}_bytebuffer_free",
            arguments=[ir.FFIArgument(name="buf", type=ir.FFIType.BYTE_BUFFER)],
            return_type=None,
        )

    def ffi_bytebuffer_reserve(self) -> ir.FFIFunction:
        """Grow a byte buffer by at least ``additional`` bytes."""
        return ir.FFIFunction(
            name=f"ffi_{self.ffi_namespace()}_bytebuffer_reserve",
            arguments=[
                ir.FFIArgument(name="buf", type=ir.FFIType.BYTE_BUFFER),
                ir.FFIArgument(name="additional", type=ir.FFIType.INT32),
            ],
            return_type=ir.FFIType.BYTE_BUFFER,
        )

    def iter_ffi_function_definitions(self) -> Iterator[ir.FFIFunction]:
        """
        List every FFI function the scaffolding must export.

        This is the user-defined functions followed by the four builtin
        byte-buffer functions.
        """
        return chain(
            self.iter_user_ffi_function_definitions(),
            self.iter_byte_buffer_ffi_function_definitions(),
        )

    def iter_user_ffi_function_definitions(self) -> Iterator[ir.FFIFunction]:
        """FFI functions for objects, callback interfaces and top-level functions."""
        for obj in self._objects:
            yield from obj.iter_ffi_function_definitions()
        for callback in self._callback_interfaces:
            if callback.ffi_init_callback is not None:
                yield callback.ffi_init_callback
        for func in self._functions:
            if func.ffi_func is not None:
                yield func.ffi_func

    def iter_byte_buffer_ffi_function_definitions(self) -> Iterator[ir.FFIFunction]:
        yield self.ffi_bytebuffer_alloc()
        yield self.ffi_bytebuffer_from_bytes()
        yield self.ffi_bytebuffer_free()
        yield self.ffi_bytebuffer_reserve()

    # ------------------------------------------------------------------
    # Building (called by the builder and metadata loader)
    # ------------------------------------------------------------------

    def _check_mutable(self) -> None:
        if self._finalized:
            raise BridgegenError("ComponentInterface is finalized and can no longer be modified")

    def add_namespace_definition(
        self, name: str, location: SourceLocation | None = None
    ) -> None:
        self._check_mutable()
        if self._namespace is not None:
            raise make_error(
                DuplicateDefinitionError,
                f"duplicate namespace definition '{name}' (already '{self._namespace}')",
                name=name,
                location=location,
            )
        self._namespace = name

    def _add_declaration(self, declarations: list, defn, what: str) -> None:
        self._check_mutable()
        if any(d.name == defn.name for d in declarations):
            raise DuplicateDefinitionError(
                f"duplicate {what} definition: '{defn.name}'", name=defn.name
            )
        declarations.append(defn)
        logger.debug("Added %s %s", what, defn.name)

    def add_enum_definition(self, defn: ir.EnumSpec) -> None:
        self._add_declaration(self._enums, defn, "enum")

    def add_record_definition(self, defn: ir.RecordSpec) -> None:
        self._add_declaration(self._records, defn, "record")

    def add_object_definition(self, defn: ir.ObjectSpec) -> None:
        self._add_declaration(self._objects, defn, "object")

    def add_callback_interface_definition(self, defn: ir.CallbackInterfaceSpec) -> None:
        self._add_declaration(self._callback_interfaces, defn, "callback interface")

    def add_error_definition(self, defn: ir.ErrorSpec) -> None:
        self._add_declaration(self._errors, defn, "error")

    def add_function_definition(
        self, defn: ir.FunctionSpec, location: SourceLocation | None = None
    ) -> None:
        """
        Add a top-level function.

        Functions are not types, so the discovery pass cannot catch their
        duplicates; they are checked here instead.

        Raises:
            DuplicateDefinitionError: If another function or a type has the same name
        """
        self._check_mutable()
        if any(f.name == defn.name for f in self._functions):
            raise make_error(
                DuplicateDefinitionError,
                f"duplicate function definition: '{defn.name}'",
                name=defn.name,
                location=location,
            )
        if self.types.get_type_definition(defn.name) is not None:
            raise make_error(
                DuplicateDefinitionError,
                f"Conflicting type definition for '{defn.name}'",
                name=defn.name,
                location=location,
            )
        self._functions.append(defn)

    def replace_object_definition(self, defn: ir.ObjectSpec) -> None:
        """Swap in an updated copy of an existing object (e.g. with added methods)."""
        self._check_mutable()
        for index, obj in enumerate(self._objects):
            if obj.name == defn.name:
                self._objects[index] = defn
                return
        raise make_error(
            ConsistencyError, f"no object named '{defn.name}' to replace", name=defn.name
        )

    def check_consistency(self) -> None:
        """
        Perform global consistency checks on the declared interface.

        These can only be detected once every declaration has been added.

        Raises:
            ConsistencyError: On the first violated invariant
        """
        if not self._namespace:
            raise ConsistencyError("missing namespace definition")

        # Enum variant names must not shadow type names.
        for enum in self._enums:
            for variant in enum.variants:
                if self.types.get_type_definition(variant.name) is not None:
                    raise ConsistencyError(
                        f"Enum variant names must not shadow type names: '{variant.name}'",
                        name=variant.name,
                    )

        for owner, throws in self._iter_throws():
            if self.get_error_definition(throws) is None:
                raise ConsistencyError(
                    f"'{owner}' throws '{throws}', which is not a declared error",
                    name=owner,
                )

        for owner, literal in self._iter_enum_defaults():
            enum = self.get_enum_definition(literal.type.name or "") if literal.type else None
            if enum is None or enum.get_variant(str(literal.value)) is None:
                raise ConsistencyError(
                    f"Default value '{literal.value}' of '{owner}' is not a variant of "
                    f"{literal.type}",
                    name=owner,
                )

    def _iter_throws(self) -> Iterator[tuple[str, str]]:
        for func in self._functions:
            if func.throws():
                yield func.name, func.throws() or ""
        for obj in self._objects:
            for constructor in obj.constructors:
                if constructor.throws():
                    yield f"{obj.name}.{constructor.name}", constructor.throws() or ""
            for method in obj.methods:
                if method.throws():
                    yield f"{obj.name}.{method.name}", method.throws() or ""
        for callback in self._callback_interfaces:
            for method in callback.methods:
                if method.throws():
                    yield f"{callback.name}.{method.name}", method.throws() or ""

    def _iter_enum_defaults(self) -> Iterator[tuple[str, ir.Literal]]:
        for record in self._records:
            for field in record.fields:
                if field.default is not None and field.default.kind == ir.LiteralKind.ENUM:
                    yield f"{record.name}.{field.name}", field.default
        members = chain(
            ((f.name, f.arguments) for f in self._functions),
            (
                (f"{o.name}.{m.name}", m.arguments)
                for o in self._objects
                for m in (*o.constructors, *o.methods)
            ),
        )
        for owner, arguments in members:
            for argument in arguments:
                if argument.default is not None and argument.default.kind == ir.LiteralKind.ENUM:
                    yield f"{owner}.{argument.name}", argument.default

    def derive_ffi_funcs(self) -> None:
        """
        Derive the low-level FFI functions from the high-level declarations.

        Must only run once the high-level declarations are complete, since
        every symbol embeds the checksum of those declarations. Running it
        again produces identical descriptors.
        """
        ci_prefix = self.ffi_namespace()
        self._functions = [f.derive_ffi_func(ci_prefix) for f in self._functions]
        self._objects = [o.derive_ffi_funcs(ci_prefix) for o in self._objects]
        self._callback_interfaces = [
            c.derive_ffi_funcs(ci_prefix) for c in self._callback_interfaces
        ]
        logger.debug("Derived FFI functions with prefix %s", ci_prefix)

    def finalize(self) -> None:
        """Mark the interface read-only; further ``add_*`` calls fail."""
        self._finalized = True


def _iter_types_recursively(ci: ComponentInterface, item: Type) -> Iterator[Type]:
    # Explicit frontier of declarations still to expand, and the names of
    # declarations already queued, so recursive declarations terminate.
    yielded: set[Type] = set()
    seen_names: set[str] = set()
    pending: list[Type] = []
    current: Iterator[Type] = item.iter_types()

    while True:
        for type_ in current:
            if type_.is_user_defined and type_.name not in seen_names:
                seen_names.add(type_.name or "")
                pending.append(type_)
            if type_ not in yielded:
                yielded.add(type_)
                yield type_
        if not pending:
            return
        declaration = ci._lookup_declaration(pending.pop())
        current = declaration.iter_types() if declaration is not None else iter(())

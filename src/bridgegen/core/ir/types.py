"""
Type system for the component interface.

A ``Type`` is a value: two ``Sequence(i32)`` instances compare and hash equal.
Named user types (records, enums, objects, callback interfaces, errors) carry
only their name; the full declaration is always looked up through the
owning interface, never embedded here.
"""

from __future__ import annotations

from collections.abc import Iterator
from enum import Enum

from pydantic import BaseModel, ConfigDict


class TypeKind(str, Enum):
    """Enumeration of every kind of type the interface can express."""

    BOOLEAN = "boolean"
    INT8 = "i8"
    UINT8 = "u8"
    INT16 = "i16"
    UINT16 = "u16"
    INT32 = "i32"
    UINT32 = "u32"
    INT64 = "i64"
    UINT64 = "u64"
    FLOAT32 = "f32"
    FLOAT64 = "f64"
    STRING = "string"
    BYTES = "bytes"
    # Structural
    OPTIONAL = "optional"
    SEQUENCE = "sequence"
    MAP = "map"
    # User-defined, identified by name
    RECORD = "record"
    ENUM = "enum"
    OBJECT = "object"
    CALLBACK_INTERFACE = "callback_interface"
    ERROR = "error"
    # Defined outside this interface
    EXTERNAL = "external"
    CUSTOM = "custom"


SCALAR_KINDS = frozenset(
    {
        TypeKind.BOOLEAN,
        TypeKind.INT8,
        TypeKind.UINT8,
        TypeKind.INT16,
        TypeKind.UINT16,
        TypeKind.INT32,
        TypeKind.UINT32,
        TypeKind.INT64,
        TypeKind.UINT64,
        TypeKind.FLOAT32,
        TypeKind.FLOAT64,
    }
)

BUILTIN_KINDS = SCALAR_KINDS | {TypeKind.STRING, TypeKind.BYTES}

SIGNED_INTEGER_KINDS = frozenset({TypeKind.INT8, TypeKind.INT16, TypeKind.INT32, TypeKind.INT64})
UNSIGNED_INTEGER_KINDS = frozenset(
    {TypeKind.UINT8, TypeKind.UINT16, TypeKind.UINT32, TypeKind.UINT64}
)
FLOAT_KINDS = frozenset({TypeKind.FLOAT32, TypeKind.FLOAT64})

USER_DEFINED_KINDS = frozenset(
    {
        TypeKind.RECORD,
        TypeKind.ENUM,
        TypeKind.OBJECT,
        TypeKind.CALLBACK_INTERFACE,
        TypeKind.ERROR,
    }
)

INTEGER_BITS: dict[TypeKind, int] = {
    TypeKind.INT8: 8,
    TypeKind.UINT8: 8,
    TypeKind.INT16: 16,
    TypeKind.UINT16: 16,
    TypeKind.INT32: 32,
    TypeKind.UINT32: 32,
    TypeKind.INT64: 64,
    TypeKind.UINT64: 64,
}


class Type(BaseModel):
    """
    A resolved type.

    Attributes:
        kind: Which variant of the type set this is
        name: Declared name, for user-defined, external and custom types
        args: Component types: ``(T,)`` for optional/sequence, ``(K, V)``
            for map, ``(builtin,)`` for custom
        source: Where an external type comes from
    """

    kind: TypeKind
    name: str | None = None
    args: tuple[Type, ...] = ()
    source: str | None = None

    model_config = ConfigDict(frozen=True)

    # Constructors

    @classmethod
    def builtin(cls, kind: TypeKind) -> Type:
        if kind not in BUILTIN_KINDS:
            raise ValueError(f"'{kind.value}' is not a builtin type kind")
        return cls(kind=kind)

    @classmethod
    def optional(cls, inner: Type) -> Type:
        return cls(kind=TypeKind.OPTIONAL, args=(inner,))

    @classmethod
    def sequence(cls, inner: Type) -> Type:
        return cls(kind=TypeKind.SEQUENCE, args=(inner,))

    @classmethod
    def map(cls, key: Type, value: Type) -> Type:
        return cls(kind=TypeKind.MAP, args=(key, value))

    @classmethod
    def named(cls, kind: TypeKind, name: str) -> Type:
        if kind not in USER_DEFINED_KINDS:
            raise ValueError(f"'{kind.value}' is not a user-defined type kind")
        return cls(kind=kind, name=name)

    @classmethod
    def record(cls, name: str) -> Type:
        return cls.named(TypeKind.RECORD, name)

    @classmethod
    def enum(cls, name: str) -> Type:
        return cls.named(TypeKind.ENUM, name)

    @classmethod
    def object(cls, name: str) -> Type:
        return cls.named(TypeKind.OBJECT, name)

    @classmethod
    def callback_interface(cls, name: str) -> Type:
        return cls.named(TypeKind.CALLBACK_INTERFACE, name)

    @classmethod
    def error(cls, name: str) -> Type:
        return cls.named(TypeKind.ERROR, name)

    @classmethod
    def external(cls, name: str, source: str) -> Type:
        return cls(kind=TypeKind.EXTERNAL, name=name, source=source)

    @classmethod
    def custom(cls, name: str, builtin: Type) -> Type:
        return cls(kind=TypeKind.CUSTOM, name=name, args=(builtin,))

    # Accessors

    @property
    def inner(self) -> Type:
        """Element type of an optional or sequence."""
        if self.kind not in (TypeKind.OPTIONAL, TypeKind.SEQUENCE):
            raise AttributeError(f"{self} has no inner type")
        return self.args[0]

    @property
    def key_type(self) -> Type:
        if self.kind != TypeKind.MAP:
            raise AttributeError(f"{self} has no key type")
        return self.args[0]

    @property
    def value_type(self) -> Type:
        if self.kind != TypeKind.MAP:
            raise AttributeError(f"{self} has no value type")
        return self.args[1]

    @property
    def builtin_type(self) -> Type:
        """Underlying representation of a custom type."""
        if self.kind != TypeKind.CUSTOM:
            raise AttributeError(f"{self} is not a custom type")
        return self.args[0]

    @property
    def is_builtin(self) -> bool:
        return self.kind in BUILTIN_KINDS

    @property
    def is_user_defined(self) -> bool:
        return self.kind in USER_DEFINED_KINDS

    @property
    def is_unsigned(self) -> bool:
        return self.kind in UNSIGNED_INTEGER_KINDS

    def iter_types(self) -> Iterator[Type]:
        """
        Yield this type followed by every type structurally nested in it.

        User-defined types are leaves here; recursing into their declarations
        needs the owning interface.
        """
        yield self
        for arg in self.args:
            yield from arg.iter_types()

    def __str__(self) -> str:
        if self.kind == TypeKind.OPTIONAL:
            return f"{self.args[0]}?"
        if self.kind == TypeKind.SEQUENCE:
            return f"sequence<{self.args[0]}>"
        if self.kind == TypeKind.MAP:
            return f"record<{self.args[0]}, {self.args[1]}>"
        if self.name is not None:
            return self.name
        return self.kind.value


# Spellings accepted for builtin types in interface documents.
IDL_BUILTIN_NAMES: dict[str, TypeKind] = {
    "boolean": TypeKind.BOOLEAN,
    "i8": TypeKind.INT8,
    "u8": TypeKind.UINT8,
    "i16": TypeKind.INT16,
    "u16": TypeKind.UINT16,
    "i32": TypeKind.INT32,
    "u32": TypeKind.UINT32,
    "i64": TypeKind.INT64,
    "u64": TypeKind.UINT64,
    "f32": TypeKind.FLOAT32,
    "f64": TypeKind.FLOAT64,
    "float": TypeKind.FLOAT32,
    "double": TypeKind.FLOAT64,
    "string": TypeKind.STRING,
    "bytes": TypeKind.BYTES,
}


def resolve_builtin_type(name: str) -> Type | None:
    """Return the builtin type spelled ``name``, or None."""
    kind = IDL_BUILTIN_NAMES.get(name)
    if kind is None:
        return None
    return Type.builtin(kind)

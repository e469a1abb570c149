"""
Low-level FFI descriptors.

These describe the C-ABI functions that the generated scaffolding exports and
that every foreign binding declares. They are derived from the high-level
declarations once the interface is complete, and never feed back into the
interface checksum.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from ..errors import InternalMappingError
from .types import Type, TypeKind


class FFIType(str, Enum):
    """Types that can cross the FFI boundary."""

    INT8 = "Int8"
    UINT8 = "UInt8"
    INT16 = "Int16"
    UINT16 = "UInt16"
    INT32 = "Int32"
    UINT32 = "UInt32"
    INT64 = "Int64"
    UINT64 = "UInt64"
    FLOAT32 = "Float32"
    FLOAT64 = "Float64"
    # Opaque pointer to a native object instance
    OBJECT_HANDLE = "ObjectHandle"
    # Growable byte buffer owned by the native side, carrying serialized values
    BYTE_BUFFER = "ByteBuffer"
    # Borrowed bytes owned by the foreign side
    FOREIGN_BYTES = "ForeignBytes"
    # Function pointer through which native code invokes callback interfaces
    FOREIGN_CALLBACK = "ForeignCallback"


_FFI_TYPE_FOR_KIND: dict[TypeKind, FFIType] = {
    # Booleans cross as a single signed byte.
    TypeKind.BOOLEAN: FFIType.INT8,
    TypeKind.INT8: FFIType.INT8,
    TypeKind.UINT8: FFIType.UINT8,
    TypeKind.INT16: FFIType.INT16,
    TypeKind.UINT16: FFIType.UINT16,
    TypeKind.INT32: FFIType.INT32,
    TypeKind.UINT32: FFIType.UINT32,
    TypeKind.INT64: FFIType.INT64,
    TypeKind.UINT64: FFIType.UINT64,
    TypeKind.FLOAT32: FFIType.FLOAT32,
    TypeKind.FLOAT64: FFIType.FLOAT64,
    TypeKind.STRING: FFIType.BYTE_BUFFER,
    TypeKind.BYTES: FFIType.BYTE_BUFFER,
    TypeKind.OPTIONAL: FFIType.BYTE_BUFFER,
    TypeKind.SEQUENCE: FFIType.BYTE_BUFFER,
    TypeKind.MAP: FFIType.BYTE_BUFFER,
    TypeKind.RECORD: FFIType.BYTE_BUFFER,
    TypeKind.ENUM: FFIType.BYTE_BUFFER,
    TypeKind.ERROR: FFIType.BYTE_BUFFER,
    TypeKind.EXTERNAL: FFIType.BYTE_BUFFER,
    TypeKind.OBJECT: FFIType.OBJECT_HANDLE,
    TypeKind.CALLBACK_INTERFACE: FFIType.FOREIGN_CALLBACK,
}


def ffi_type_for(type_: Type) -> FFIType:
    """
    Map a high-level type to its FFI representation.

    Custom types cross the boundary as their underlying builtin.

    Raises:
        InternalMappingError: If the type kind has no mapping
    """
    if type_.kind == TypeKind.CUSTOM:
        return ffi_type_for(type_.builtin_type)
    try:
        return _FFI_TYPE_FOR_KIND[type_.kind]
    except KeyError:
        raise InternalMappingError(
            f"No FFI type mapping for {type_}", name=type_.name
        ) from None


class FFIArgument(BaseModel):
    """A named argument of an FFI function."""

    name: str
    type: FFIType

    model_config = ConfigDict(frozen=True)

    @classmethod
    def lower(cls, name: str, type_: Type) -> FFIArgument:
        return cls(name=name, type=ffi_type_for(type_))


class FFIFunction(BaseModel):
    """
    An exported FFI function.

    Attributes:
        name: Symbol name, prefixed with the checksummed FFI namespace
        arguments: Ordered low-level arguments
        return_type: Low-level return type, None for void
    """

    name: str
    arguments: list[FFIArgument] = Field(default_factory=list)
    return_type: FFIType | None = None

    model_config = ConfigDict(frozen=True)

    def signature(self) -> str:
        """Render as ``name(arg: Type, ...) -> Type`` for logs and listings."""
        args = ", ".join(f"{a.name}: {a.type.value}" for a in self.arguments)
        ret = self.return_type.value if self.return_type else "void"
        return f"{self.name}({args}) -> {ret}"

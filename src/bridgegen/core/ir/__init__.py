"""
bridgegen intermediate representation (IR) types.

This package contains the declaration, type and FFI models that make up a
component interface. All types are re-exported from this package.
"""

# Attributes
from .attributes import (
    ArgumentAttributes,
    Attribute,
    AttributeKind,
    AttributeSet,
    CallbackInterfaceAttributes,
    ConstructorAttributes,
    EnumAttributes,
    FieldAttributes,
    FunctionAttributes,
    InterfaceAttributes,
    MethodAttributes,
    RecordAttributes,
    SelfType,
    TypedefAttributes,
    parse_attribute,
)

# Callback interfaces
from .callbacks import CallbackInterfaceSpec

# Enums and errors
from .enums import EnumSpec, ErrorSpec

# FFI
from .ffi import FFIArgument, FFIFunction, FFIType, ffi_type_for

# Members
from .fields import ArgumentSpec, FieldSpec, VariantSpec

# Functions
from .functions import FunctionSpec

# Literals
from .literal import Literal, LiteralKind, Radix, convert_default_value

# Objects
from .objects import PRIMARY_CONSTRUCTOR_NAME, ConstructorSpec, MethodSpec, ObjectSpec

# Records
from .records import RecordSpec

# Types
from .types import (
    BUILTIN_KINDS,
    IDL_BUILTIN_NAMES,
    SCALAR_KINDS,
    USER_DEFINED_KINDS,
    Type,
    TypeKind,
    resolve_builtin_type,
)

__all__ = [
    # Attributes
    "Attribute",
    "AttributeKind",
    "AttributeSet",
    "ArgumentAttributes",
    "CallbackInterfaceAttributes",
    "ConstructorAttributes",
    "EnumAttributes",
    "FieldAttributes",
    "FunctionAttributes",
    "InterfaceAttributes",
    "MethodAttributes",
    "RecordAttributes",
    "SelfType",
    "TypedefAttributes",
    "parse_attribute",
    # Declarations
    "ArgumentSpec",
    "CallbackInterfaceSpec",
    "ConstructorSpec",
    "EnumSpec",
    "ErrorSpec",
    "FieldSpec",
    "FunctionSpec",
    "MethodSpec",
    "ObjectSpec",
    "PRIMARY_CONSTRUCTOR_NAME",
    "RecordSpec",
    "VariantSpec",
    # FFI
    "FFIArgument",
    "FFIFunction",
    "FFIType",
    "ffi_type_for",
    # Literals
    "Literal",
    "LiteralKind",
    "Radix",
    "convert_default_value",
    # Types
    "BUILTIN_KINDS",
    "IDL_BUILTIN_NAMES",
    "SCALAR_KINDS",
    "USER_DEFINED_KINDS",
    "Type",
    "TypeKind",
    "resolve_builtin_type",
]

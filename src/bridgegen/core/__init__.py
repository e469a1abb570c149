"""Core bridgegen functionality: syntax tree, IR, type registry, interface builder."""

from . import ir
from .builder import build_component_interface
from .config import BuildConfig, load_config
from .errors import (
    BridgegenError,
    ConsistencyError,
    DuplicateDefinitionError,
    ErrorContext,
    InternalMappingError,
    InvalidLiteralError,
    ParseError,
    UnknownTypeError,
    UnsupportedAttributeError,
)
from .interface import ComponentInterface
from .metadata import add_metadata_to_interface, group_metadata, parse_metadata_records
from .syntax import InterfaceDocument, load_document
from .type_expressions import parse_metadata_type, parse_type_expression
from .type_universe import TypeUniverse

__all__ = [
    "ir",
    "BridgegenError",
    "ParseError",
    "DuplicateDefinitionError",
    "UnknownTypeError",
    "UnsupportedAttributeError",
    "ConsistencyError",
    "InternalMappingError",
    "InvalidLiteralError",
    "ErrorContext",
    "BuildConfig",
    "load_config",
    "ComponentInterface",
    "TypeUniverse",
    "InterfaceDocument",
    "load_document",
    "parse_type_expression",
    "parse_metadata_type",
    "parse_metadata_records",
    "group_metadata",
    "add_metadata_to_interface",
    "build_component_interface",
]

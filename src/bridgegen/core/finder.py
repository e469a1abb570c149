"""
Discovery pass.

Walks the declarations of a document and binds every name they introduce
in the type universe, without looking at any member types. Once this pass
has run over all inputs, the detail pass can resolve forward references and
mutually recursive declarations regardless of their order in the document.
"""

import logging
from collections.abc import Iterable

from . import ir
from .errors import ParseError, UnknownTypeError, UnsupportedAttributeError, make_error
from .ir import Type
from .syntax import (
    CallbackInterfaceDecl,
    Declaration,
    DictionaryDecl,
    EnumDecl,
    InterfaceDecl,
    NamespaceDecl,
    TypedefDecl,
)
from .type_universe import TypeUniverse

logger = logging.getLogger(__name__)


def discover_type_definitions(declarations: Iterable[Declaration], types: TypeUniverse) -> None:
    """
    Register the type introduced by each declaration.

    Args:
        declarations: Top-level declarations, in any order
        types: Registry to bind names in

    Raises:
        DuplicateDefinitionError: If two declarations bind one name differently
        UnsupportedAttributeError: If a declaration carries a misplaced attribute
        ParseError: If an External typedef is not declared ``typedef extern``
    """
    count = 0
    for decl in declarations:
        type_ = discovered_type(decl)
        if type_ is None:
            continue
        types.add_type_definition(decl.name, type_, decl.location)
        count += 1
    logger.debug("Discovered %d type definitions", count)


def discovered_type(decl: Declaration) -> Type | None:
    """The type a declaration introduces, or None if it introduces no type."""
    if isinstance(decl, NamespaceDecl):
        return None
    if isinstance(decl, DictionaryDecl):
        return Type.record(decl.name)
    if isinstance(decl, EnumDecl):
        attrs = ir.EnumAttributes.from_nodes(decl.attributes, decl.name, decl.location)
        return Type.error(decl.name) if attrs.contains_error_attr() else Type.enum(decl.name)
    if isinstance(decl, InterfaceDecl):
        attrs = ir.InterfaceAttributes.from_nodes(decl.attributes, decl.name, decl.location)
        if attrs.contains_enum_attr():
            return Type.enum(decl.name)
        if attrs.contains_error_attr():
            return Type.error(decl.name)
        return Type.object(decl.name)
    if isinstance(decl, CallbackInterfaceDecl):
        return Type.callback_interface(decl.name)
    if isinstance(decl, TypedefDecl):
        return _typedef_type(decl)
    raise TypeError(f"Unexpected declaration {type(decl).__name__}")


def _typedef_type(decl: TypedefDecl) -> Type:
    attrs = ir.TypedefAttributes.from_nodes(decl.attributes, decl.name, decl.location)
    source = attrs.get_source()
    if source is not None and attrs.is_custom():
        raise make_error(
            UnsupportedAttributeError,
            f"typedef '{decl.name}' cannot be both External and Custom",
            name=decl.name,
            location=decl.location,
        )
    if source is not None:
        if decl.type_name != "extern":
            raise make_error(
                ParseError,
                f"External typedef '{decl.name}' must be declared `typedef extern`, "
                f"not `typedef {decl.type_name}`",
                name=decl.name,
                location=decl.location,
            )
        return Type.external(decl.name, source)
    if attrs.is_custom():
        builtin = ir.resolve_builtin_type(decl.type_name)
        if builtin is None:
            raise make_error(
                UnknownTypeError,
                f"Custom type '{decl.name}' must wrap a builtin type, not `{decl.type_name}`",
                name=decl.name,
                location=decl.location,
            )
        return Type.custom(decl.name, builtin)
    raise make_error(
        UnsupportedAttributeError,
        f"typedef '{decl.name}' requires an External or Custom attribute",
        name=decl.name,
        location=decl.location,
    )

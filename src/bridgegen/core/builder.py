"""
Build a ComponentInterface from an interface document and metadata records.

The build runs in strict sequence:

1. Discovery: bind every declared name (see ``finder.py``)
2. Detail: convert each declaration into its IR spec, resolving types
3. Consistency check over the whole interface
4. FFI derivation, which embeds the now-fixed checksum in every symbol
5. Finalization into a read-only snapshot

Any error aborts the build; there is no partial result.
"""

import logging
from collections.abc import Iterable

from . import ir
from .config import BuildConfig
from .errors import DuplicateDefinitionError, ParseError, make_error
from .finder import discover_type_definitions
from .interface import ComponentInterface
from .metadata import Metadata, discover_metadata, group_metadata, populate_metadata
from .syntax import (
    ArgumentNode,
    CallbackInterfaceDecl,
    ConstructorNode,
    Declaration,
    DictionaryDecl,
    EnumDecl,
    InterfaceDecl,
    InterfaceDocument,
    MemberNode,
    NamespaceDecl,
    OperationNode,
    TypeExpr,
    TypedefDecl,
)

logger = logging.getLogger(__name__)


def build_component_interface(
    document: InterfaceDocument | None,
    metadata: Iterable[Metadata] | None = None,
    config: BuildConfig | None = None,
) -> ComponentInterface:
    """
    Build a complete, finalized ComponentInterface.

    Declarations from the document and from metadata records are discovered
    together before any of them is resolved, so either source may refer to
    types declared in the other.

    Args:
        document: Parsed interface document, or None for metadata-only builds
        metadata: Metadata records in any order
        config: Build settings

    Returns:
        The finalized interface with FFI functions derived

    Raises:
        BridgegenError: If any pass fails
    """
    config = config or BuildConfig()
    ci = ComponentInterface(generator_version=config.generator_version)
    declarations = list(document.definitions) if document is not None else []
    group = group_metadata(metadata or [])

    # 1. Discovery
    discover_type_definitions(declarations, ci.types)
    discover_metadata(group, ci.types)

    # 2. Detail
    add_declarations(ci, declarations)
    populate_metadata(group, ci)
    if not ci.has_namespace_definition:
        namespace = config.namespace or group.namespace
        if namespace:
            ci.add_namespace_definition(namespace)
    logger.debug("Resolved declarations: %r", ci)

    # 3. Consistency
    ci.check_consistency()

    # 4. FFI derivation
    ci.derive_ffi_funcs()
    logger.debug(
        "FFI namespace %s with %d functions",
        ci.ffi_namespace(),
        sum(1 for _ in ci.iter_ffi_function_definitions()),
    )

    # 5. Finalize
    ci.finalize()
    return ci


def add_declarations(ci: ComponentInterface, declarations: Iterable[Declaration]) -> None:
    """Detail pass: convert each declaration and add it to the interface."""
    for decl in declarations:
        if isinstance(decl, NamespaceDecl):
            add_namespace(ci, decl)
        elif isinstance(decl, DictionaryDecl):
            ci.add_record_definition(convert_record(ci, decl))
        elif isinstance(decl, EnumDecl):
            _add_enum_decl(ci, decl)
        elif isinstance(decl, InterfaceDecl):
            _add_interface_decl(ci, decl)
        elif isinstance(decl, CallbackInterfaceDecl):
            ci.add_callback_interface_definition(convert_callback_interface(ci, decl))
        elif isinstance(decl, TypedefDecl):
            # Fully handled during discovery.
            continue
        else:
            raise TypeError(f"Unexpected declaration {type(decl).__name__}")


def add_namespace(ci: ComponentInterface, decl: NamespaceDecl) -> None:
    ir.AttributeSet.from_nodes(decl.attributes, decl.name, decl.location)
    ci.add_namespace_definition(decl.name, decl.location)
    for operation in decl.functions:
        ci.add_function_definition(convert_function(ci, operation), operation.location)


def _add_enum_decl(ci: ComponentInterface, decl: EnumDecl) -> None:
    attrs = ir.EnumAttributes.from_nodes(decl.attributes, decl.name, decl.location)
    _check_unique(decl.name, decl.values, "enum variant", decl)
    variants = [ir.VariantSpec(name=value) for value in decl.values]
    if attrs.contains_error_attr():
        ci.add_error_definition(ir.ErrorSpec(name=decl.name, variants=variants))
    else:
        ci.add_enum_definition(ir.EnumSpec(name=decl.name, variants=variants))


def _add_interface_decl(ci: ComponentInterface, decl: InterfaceDecl) -> None:
    attrs = ir.InterfaceAttributes.from_nodes(decl.attributes, decl.name, decl.location)
    if attrs.contains_enum_attr():
        ci.add_enum_definition(
            ir.EnumSpec(name=decl.name, variants=convert_variants(ci, decl))
        )
    elif attrs.contains_error_attr():
        ci.add_error_definition(
            ir.ErrorSpec(name=decl.name, variants=convert_variants(ci, decl))
        )
    else:
        ci.add_object_definition(convert_object(ci, decl, attrs))


# =============================================================================
# Declaration converters
# =============================================================================


def resolve_type(ci: ComponentInterface, expr: TypeExpr) -> ir.Type:
    return ci.types.resolve_type_expression(expr)


def convert_argument(ci: ComponentInterface, node: ArgumentNode) -> ir.ArgumentSpec:
    attrs = ir.ArgumentAttributes.from_nodes(node.attributes, node.name, node.location)
    type_ = resolve_type(ci, node.type)
    default = ir.convert_default_value(node.default, type_) if node.default else None
    return ir.ArgumentSpec(
        name=node.name,
        type=type_,
        by_ref=attrs.by_ref(),
        optional=node.optional,
        default=default,
    )


def convert_field(ci: ComponentInterface, node: MemberNode) -> ir.FieldSpec:
    ir.FieldAttributes.from_nodes(node.attributes, node.name, node.location)
    type_ = resolve_type(ci, node.type)
    default = ir.convert_default_value(node.default, type_) if node.default else None
    return ir.FieldSpec(name=node.name, type=type_, required=node.required, default=default)


def convert_record(ci: ComponentInterface, decl: DictionaryDecl) -> ir.RecordSpec:
    ir.RecordAttributes.from_nodes(decl.attributes, decl.name, decl.location)
    _check_unique(decl.name, [m.name for m in decl.members], "field", decl)
    return ir.RecordSpec(
        name=decl.name,
        fields=[convert_field(ci, member) for member in decl.members],
    )


def convert_function(ci: ComponentInterface, node: OperationNode) -> ir.FunctionSpec:
    attrs = ir.FunctionAttributes.from_nodes(node.attributes, node.name, node.location)
    return ir.FunctionSpec(
        name=node.name,
        arguments=[convert_argument(ci, arg) for arg in node.arguments],
        return_type=resolve_type(ci, node.return_type) if node.return_type else None,
        attributes=attrs,
    )


def convert_variants(ci: ComponentInterface, decl: InterfaceDecl) -> list[ir.VariantSpec]:
    """
    Read the operations of an ``[Enum]`` or ``[Error]`` interface as variants.

    ``Circle(f64 radius);`` becomes a ``Circle`` variant with one field.
    """
    if decl.constructors:
        raise make_error(
            ParseError,
            f"'{decl.name}' is a tagged union and cannot have constructors",
            name=decl.name,
            location=decl.constructors[0].location or decl.location,
        )
    _check_unique(decl.name, [op.name for op in decl.operations], "variant", decl)
    variants = []
    for operation in decl.operations:
        if operation.return_type is not None:
            raise make_error(
                ParseError,
                f"Variant '{decl.name}.{operation.name}' cannot have a return type",
                name=decl.name,
                location=operation.location,
            )
        ir.AttributeSet.from_nodes(operation.attributes, operation.name, operation.location)
        fields = [
            ir.FieldSpec(
                name=arg.name,
                type=resolve_type(ci, arg.type),
                required=not arg.optional,
            )
            for arg in operation.arguments
        ]
        variants.append(ir.VariantSpec(name=operation.name, fields=fields))
    return variants


def convert_constructor(ci: ComponentInterface, node: ConstructorNode) -> ir.ConstructorSpec:
    attrs = ir.ConstructorAttributes.from_nodes(node.attributes, None, node.location)
    return ir.ConstructorSpec(
        name=attrs.get_name() or ir.PRIMARY_CONSTRUCTOR_NAME,
        arguments=[convert_argument(ci, arg) for arg in node.arguments],
        attributes=attrs,
    )


def convert_method(
    ci: ComponentInterface, object_name: str, node: OperationNode
) -> ir.MethodSpec:
    attrs = ir.MethodAttributes.from_nodes(node.attributes, node.name, node.location)
    return ir.MethodSpec(
        name=node.name,
        object_name=object_name,
        arguments=[convert_argument(ci, arg) for arg in node.arguments],
        return_type=resolve_type(ci, node.return_type) if node.return_type else None,
        attributes=attrs,
    )


def convert_object(
    ci: ComponentInterface, decl: InterfaceDecl, attrs: ir.InterfaceAttributes
) -> ir.ObjectSpec:
    constructors = [convert_constructor(ci, node) for node in decl.constructors]
    _check_unique(decl.name, [c.name for c in constructors], "constructor", decl)
    _check_unique(decl.name, [op.name for op in decl.operations], "method", decl)
    # Constructors and methods share the `{ffi_ns}_{Object}_` symbol prefix.
    _check_unique(
        decl.name,
        [*(c.name for c in constructors), *(op.name for op in decl.operations)],
        "constructor or method",
        decl,
    )
    return ir.ObjectSpec(
        name=decl.name,
        constructors=constructors,
        methods=[convert_method(ci, decl.name, op) for op in decl.operations],
        uses_deprecated_threadsafe_attribute=attrs.threadsafe(),
    )


def convert_callback_interface(
    ci: ComponentInterface, decl: CallbackInterfaceDecl
) -> ir.CallbackInterfaceSpec:
    ir.CallbackInterfaceAttributes.from_nodes(decl.attributes, decl.name, decl.location)
    _check_unique(decl.name, [op.name for op in decl.operations], "method", decl)
    return ir.CallbackInterfaceSpec(
        name=decl.name,
        methods=[convert_method(ci, decl.name, op) for op in decl.operations],
    )


def _check_unique(owner: str, names: list[str], what: str, decl: Declaration) -> None:
    seen: set[str] = set()
    for name in names:
        if name in seen:
            raise make_error(
                DuplicateDefinitionError,
                f"Duplicate {what} '{name}' in '{owner}'",
                name=name,
                location=decl.location,
            )
        seen.add(name)

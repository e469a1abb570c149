"""
Metadata records describing annotated source declarations.

Where an interface is declared by annotating native source instead of
writing an interface document, a separate extractor emits one record per
annotated item. Records arrive in no particular order, so they are grouped
and sorted before building; the same set of records therefore always yields
the same interface and the same checksum.

Example record (JSON form)::

    {"kind": "fn", "module": "example::api", "name": "hello",
     "inputs": [{"name": "who", "ty": "Option<String>"}], "output": "String"}
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Annotated, Any, Literal

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from . import ir
from .errors import ConsistencyError, DuplicateDefinitionError, ParseError, UnknownTypeError
from .type_expressions import parse_metadata_type

if TYPE_CHECKING:
    from .interface import ComponentInterface
    from .type_universe import TypeUniverse

logger = logging.getLogger(__name__)


class FieldMetadata(BaseModel):
    """A named, typed slot: a record field, variant field or function input."""

    name: str
    ty: str

    model_config = ConfigDict(frozen=True)


class VariantMetadata(BaseModel):
    name: str
    fields: list[FieldMetadata] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class FnMetadata(BaseModel):
    kind: Literal["fn"] = "fn"
    module: str
    name: str
    inputs: list[FieldMetadata] = Field(default_factory=list)
    output: str | None = None
    throws: str | None = None

    model_config = ConfigDict(frozen=True)


class MethodMetadata(BaseModel):
    kind: Literal["method"] = "method"
    module: str
    self_name: str
    name: str
    inputs: list[FieldMetadata] = Field(default_factory=list)
    output: str | None = None
    throws: str | None = None

    model_config = ConfigDict(frozen=True)


class ConstructorMetadata(BaseModel):
    kind: Literal["constructor"] = "constructor"
    module: str
    self_name: str
    name: str = ir.PRIMARY_CONSTRUCTOR_NAME
    inputs: list[FieldMetadata] = Field(default_factory=list)
    throws: str | None = None

    model_config = ConfigDict(frozen=True)


class RecordMetadata(BaseModel):
    kind: Literal["record"] = "record"
    module: str
    name: str
    fields: list[FieldMetadata] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class EnumMetadata(BaseModel):
    kind: Literal["enum"] = "enum"
    module: str
    name: str
    variants: list[VariantMetadata] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


class ErrorMetadata(BaseModel):
    """An error enum; ``flat`` errors expose only their variant names."""

    kind: Literal["error"] = "error"
    module: str
    name: str
    variants: list[VariantMetadata] = Field(default_factory=list)
    flat: bool = True

    model_config = ConfigDict(frozen=True)


class ObjectMetadata(BaseModel):
    kind: Literal["object"] = "object"
    module: str
    name: str

    model_config = ConfigDict(frozen=True)


Metadata = Annotated[
    FnMetadata
    | MethodMetadata
    | ConstructorMetadata
    | RecordMetadata
    | EnumMetadata
    | ErrorMetadata
    | ObjectMetadata,
    Field(discriminator="kind"),
]

_METADATA_LIST = TypeAdapter(list[Metadata])


def parse_metadata_records(payloads: Iterable[dict[str, Any]]) -> list[Metadata]:
    """
    Validate raw metadata dictionaries.

    Raises:
        ParseError: If any payload does not match a known record shape
    """
    try:
        return _METADATA_LIST.validate_python(list(payloads))
    except ValidationError as e:
        raise ParseError(f"Invalid metadata records: {e}") from e


@dataclass
class MetadataGroup:
    """Metadata records sorted by kind, then by name."""

    namespace: str | None = None
    records: list[RecordMetadata] = field(default_factory=list)
    enums: list[EnumMetadata] = field(default_factory=list)
    errors: list[ErrorMetadata] = field(default_factory=list)
    objects: list[ObjectMetadata] = field(default_factory=list)
    functions: list[FnMetadata] = field(default_factory=list)
    constructors: list[ConstructorMetadata] = field(default_factory=list)
    methods: list[MethodMetadata] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not (
            self.records
            or self.enums
            or self.errors
            or self.objects
            or self.functions
            or self.constructors
            or self.methods
        )


def group_metadata(records: Iterable[Metadata]) -> MetadataGroup:
    """
    Group an unordered stream of records.

    The namespace is the crate name, i.e. the first path segment of each
    record's ``module``.

    Raises:
        ConsistencyError: If records come from more than one crate
    """
    group = MetadataGroup()
    for record in records:
        crate = record.module.split("::")[0]
        if group.namespace is None:
            group.namespace = crate
        elif group.namespace != crate:
            raise ConsistencyError(
                f"Mismatched crate names in metadata: '{group.namespace}' and '{crate}'",
                name=record.name,
            )
        if isinstance(record, FnMetadata):
            group.functions.append(record)
        elif isinstance(record, MethodMetadata):
            group.methods.append(record)
        elif isinstance(record, ConstructorMetadata):
            group.constructors.append(record)
        elif isinstance(record, RecordMetadata):
            group.records.append(record)
        elif isinstance(record, EnumMetadata):
            group.enums.append(record)
        elif isinstance(record, ErrorMetadata):
            group.errors.append(record)
        elif isinstance(record, ObjectMetadata):
            group.objects.append(record)

    for items in (group.records, group.enums, group.errors, group.objects, group.functions):
        items.sort(key=lambda r: r.name)
    group.constructors.sort(key=lambda r: (r.self_name, r.name))
    group.methods.sort(key=lambda r: (r.self_name, r.name))
    return group


def discover_metadata(group: MetadataGroup, types: TypeUniverse) -> None:
    """Bind the names introduced by a metadata group."""
    for record in group.records:
        types.add_type_definition(record.name, ir.Type.record(record.name))
    for enum in group.enums:
        types.add_type_definition(enum.name, ir.Type.enum(enum.name))
    for error in group.errors:
        types.add_type_definition(error.name, ir.Type.error(error.name))
    for obj in group.objects:
        types.add_type_definition(obj.name, ir.Type.object(obj.name))


def populate_metadata(group: MetadataGroup, ci: ComponentInterface) -> None:
    """
    Convert a discovered metadata group and add it to ``ci``.

    Methods and constructors attach to their object, which may have been
    declared either by metadata or by an interface document.

    Raises:
        UnknownTypeError: If a method or constructor names an unknown object
        DuplicateDefinitionError: If a member name repeats on one object
    """
    for record in group.records:
        ci.add_record_definition(
            ir.RecordSpec(
                name=record.name,
                fields=[_convert_field(ci, f) for f in record.fields],
            )
        )
    for enum in group.enums:
        ci.add_enum_definition(
            ir.EnumSpec(name=enum.name, variants=[_convert_variant(ci, v) for v in enum.variants])
        )
    for error in group.errors:
        variants = [
            ir.VariantSpec(name=v.name) if error.flat else _convert_variant(ci, v)
            for v in error.variants
        ]
        ci.add_error_definition(ir.ErrorSpec(name=error.name, variants=variants))
    for obj in group.objects:
        # An object may also be declared in the interface document.
        if ci.get_object_definition(obj.name) is None:
            ci.add_object_definition(ir.ObjectSpec(name=obj.name))
    for fn in group.functions:
        ci.add_function_definition(
            ir.FunctionSpec(
                name=fn.name,
                arguments=[_convert_argument(ci, i) for i in fn.inputs],
                return_type=_resolve(ci, fn.output) if fn.output else None,
                attributes=_throws_attributes(ir.FunctionAttributes, fn.throws),
            )
        )
    for ctor in group.constructors:
        obj = _owning_object(ci, ctor.self_name, ctor.name)
        _check_member_name(obj, ctor.name, "constructor")
        constructor = ir.ConstructorSpec(
            name=ctor.name,
            arguments=[_convert_argument(ci, i) for i in ctor.inputs],
            attributes=_throws_attributes(ir.ConstructorAttributes, ctor.throws),
        )
        ci.replace_object_definition(
            obj.model_copy(update={"constructors": [*obj.constructors, constructor]})
        )
    for meth in group.methods:
        obj = _owning_object(ci, meth.self_name, meth.name)
        _check_member_name(obj, meth.name, "method")
        method = ir.MethodSpec(
            name=meth.name,
            object_name=obj.name,
            arguments=[_convert_argument(ci, i) for i in meth.inputs],
            return_type=_resolve(ci, meth.output) if meth.output else None,
            attributes=_throws_attributes(ir.MethodAttributes, meth.throws),
        )
        ci.replace_object_definition(obj.model_copy(update={"methods": [*obj.methods, method]}))
    if not group.is_empty():
        logger.debug("Added metadata for namespace %s", group.namespace)


def add_metadata_to_interface(ci: ComponentInterface, records: Iterable[Metadata]) -> None:
    """
    Merge metadata records into an interface that is still being built.

    Runs discovery and detail for the records, in that order.
    """
    group = group_metadata(records)
    discover_metadata(group, ci.types)
    populate_metadata(group, ci)


def _resolve(ci: ComponentInterface, ty: str) -> ir.Type:
    return ci.types.resolve_type_expression(parse_metadata_type(ty))


def _convert_field(ci: ComponentInterface, meta: FieldMetadata) -> ir.FieldSpec:
    return ir.FieldSpec(name=meta.name, type=_resolve(ci, meta.ty))


def _convert_argument(ci: ComponentInterface, meta: FieldMetadata) -> ir.ArgumentSpec:
    return ir.ArgumentSpec(name=meta.name, type=_resolve(ci, meta.ty))


def _convert_variant(ci: ComponentInterface, meta: VariantMetadata) -> ir.VariantSpec:
    return ir.VariantSpec(name=meta.name, fields=[_convert_field(ci, f) for f in meta.fields])


def _throws_attributes(cls, throws: str | None):
    if throws is None:
        return cls()
    return cls(attributes=(ir.Attribute(kind=ir.AttributeKind.THROWS, value=throws),))


def _owning_object(ci: ComponentInterface, self_name: str, member: str) -> ir.ObjectSpec:
    obj = ci.get_object_definition(self_name)
    if obj is None:
        raise UnknownTypeError(
            f"'{member}' is declared on unknown object `{self_name}`", name=self_name
        )
    return obj


def _check_member_name(obj: ir.ObjectSpec, name: str, what: str) -> None:
    """Constructors and methods of one object must not share a name."""
    if any(m.name == name for m in (*obj.constructors, *obj.methods)):
        raise DuplicateDefinitionError(f"Duplicate {what} '{name}' in '{obj.name}'", name=name)

"""
Typed members shared across declaration kinds.

Records own fields, enum and error variants own fields, and functions,
constructors and methods own arguments.
"""

from __future__ import annotations

from collections.abc import Iterator

from pydantic import BaseModel, ConfigDict, Field

from .ffi import FFIArgument
from .literal import Literal
from .types import Type


class FieldSpec(BaseModel):
    """
    A named, typed member of a record or variant.

    Attributes:
        name: Field identifier
        type: Resolved field type
        required: Whether callers must always supply a value
        default: Optional default value
    """

    name: str
    type: Type
    required: bool = False
    default: Literal | None = None

    model_config = ConfigDict(frozen=True)

    def iter_types(self) -> Iterator[Type]:
        return self.type.iter_types()


class VariantSpec(BaseModel):
    """A variant of an enum or error, with zero or more fields."""

    name: str
    fields: list[FieldSpec] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    def has_fields(self) -> bool:
        return bool(self.fields)

    def iter_types(self) -> Iterator[Type]:
        for field in self.fields:
            yield from field.iter_types()


class ArgumentSpec(BaseModel):
    """
    An argument to a function, constructor or method.

    Attributes:
        name: Argument identifier
        type: Resolved argument type
        by_ref: Pass by reference on the native side
        optional: Declared ``optional`` in the document
        default: Optional default value
    """

    name: str
    type: Type
    by_ref: bool = False
    optional: bool = False
    default: Literal | None = None

    model_config = ConfigDict(frozen=True)

    def iter_types(self) -> Iterator[Type]:
        return self.type.iter_types()

    def to_ffi_argument(self) -> FFIArgument:
        return FFIArgument.lower(self.name, self.type)

"""
Enum and error declarations.

Both are tagged unions: a list of named variants, each with zero or more
fields. They cross the FFI serialized into a byte buffer as an i32 variant
index followed by the variant's fields. An error is an enum flagged as an
error family so that functions can name it in ``[Throws=...]``.

Flatness is derived from the variants on every call rather than stored, so
it can never disagree with the member list.
"""

from __future__ import annotations

from collections.abc import Iterator

from pydantic import BaseModel, ConfigDict, Field

from .fields import VariantSpec
from .types import Type


class _TaggedUnionSpec(BaseModel):
    name: str
    variants: list[VariantSpec] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    def is_flat(self) -> bool:
        """True when no variant carries any field."""
        return not any(variant.has_fields() for variant in self.variants)

    def get_variant(self, name: str) -> VariantSpec | None:
        return next((v for v in self.variants if v.name == name), None)

    def iter_types(self) -> Iterator[Type]:
        for variant in self.variants:
            yield from variant.iter_types()


class EnumSpec(_TaggedUnionSpec):
    """
    An enum definition.

    Example::

        enum Color { "Red", "Green", "Blue" };

    gives a flat ``EnumSpec`` with three field-less variants, while::

        [Enum] interface Shape { Circle(f64 radius); Dot(); };

    gives a non-flat one whose ``Circle`` variant has a ``radius`` field.
    """

    @property
    def type_(self) -> Type:
        return Type.enum(self.name)


class ErrorSpec(_TaggedUnionSpec):
    """An error family; structurally the same as an enum."""

    @property
    def type_(self) -> Type:
        return Type.error(self.name)

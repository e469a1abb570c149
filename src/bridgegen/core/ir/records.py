"""
Record declarations.

A record is a "data class" style value passed by copy: it crosses the FFI
serialized into a byte buffer, field by field in declaration order.
"""

from __future__ import annotations

from collections.abc import Iterator

from pydantic import BaseModel, ConfigDict, Field

from .fields import FieldSpec
from .types import Type


class RecordSpec(BaseModel):
    """
    A record definition.

    Attributes:
        name: Record identifier
        fields: Ordered fields, as declared
    """

    name: str
    fields: list[FieldSpec] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)

    @property
    def type_(self) -> Type:
        return Type.record(self.name)

    def iter_types(self) -> Iterator[Type]:
        for field in self.fields:
            yield from field.iter_types()

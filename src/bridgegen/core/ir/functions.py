"""
Top-level function declarations.

Each function becomes one standalone FFI function named
``{ffi_namespace}_{function_name}`` with its arguments lowered to FFI types.
"""

from __future__ import annotations

from collections.abc import Iterator

from pydantic import BaseModel, ConfigDict, Field

from .attributes import FunctionAttributes
from .fields import ArgumentSpec
from .ffi import FFIArgument, FFIFunction, ffi_type_for
from .types import Type


class FunctionSpec(BaseModel):
    """
    A standalone function.

    Attributes:
        name: Function identifier
        arguments: Ordered arguments
        return_type: Return type, None for functions returning nothing
        attributes: Validated function attributes (``[Throws=E]``)
        ffi_func: Derived FFI descriptor; excluded from dumps and the checksum
    """

    name: str
    arguments: list[ArgumentSpec] = Field(default_factory=list)
    return_type: Type | None = None
    attributes: FunctionAttributes = Field(default_factory=FunctionAttributes)
    ffi_func: FFIFunction | None = Field(default=None, exclude=True)

    model_config = ConfigDict(frozen=True)

    def full_arguments(self) -> list[ArgumentSpec]:
        return list(self.arguments)

    def throws(self) -> str | None:
        return self.attributes.get_throws_err()

    def throws_type(self) -> Type | None:
        name = self.throws()
        return Type.error(name) if name else None

    def iter_types(self) -> Iterator[Type]:
        for argument in self.arguments:
            yield from argument.iter_types()
        if self.return_type is not None:
            yield from self.return_type.iter_types()

    def derive_ffi_func(self, ci_prefix: str) -> FunctionSpec:
        """Return a copy carrying the FFI descriptor for ``ci_prefix``."""
        ffi_func = FFIFunction(
            name=f"{ci_prefix}_{self.name}",
            arguments=lower_arguments(self.arguments),
            return_type=ffi_type_for(self.return_type) if self.return_type else None,
        )
        return self.model_copy(update={"ffi_func": ffi_func})


def lower_arguments(arguments: list[ArgumentSpec]) -> list[FFIArgument]:
    return [arg.to_ffi_argument() for arg in arguments]

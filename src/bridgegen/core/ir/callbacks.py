"""
Callback interface declarations.

A callback interface is implemented in the foreign language and invoked
from native code. Its methods are not exported functions; instead the
foreign side registers a single dispatch stub through
``ffi_{ffi_namespace}_{Name}_init_callback`` and native code routes every
method call through that function pointer.
"""

from __future__ import annotations

from collections.abc import Iterator

from pydantic import BaseModel, ConfigDict, Field

from .ffi import FFIArgument, FFIFunction, FFIType
from .objects import MethodSpec
from .types import Type


class CallbackInterfaceSpec(BaseModel):
    name: str
    methods: list[MethodSpec] = Field(default_factory=list)
    ffi_init_callback: FFIFunction | None = Field(default=None, exclude=True)

    model_config = ConfigDict(frozen=True)

    @property
    def type_(self) -> Type:
        return Type.callback_interface(self.name)

    def iter_types(self) -> Iterator[Type]:
        for method in self.methods:
            yield from method.iter_types()

    def derive_ffi_funcs(self, ci_prefix: str) -> CallbackInterfaceSpec:
        ffi_init_callback = FFIFunction(
            name=f"ffi_{ci_prefix}_{self.name}_init_callback",
            arguments=[FFIArgument(name="callback_stub", type=FFIType.FOREIGN_CALLBACK)],
            return_type=None,
        )
        return self.model_copy(update={"ffi_init_callback": ffi_init_callback})

"""
Object declarations.

An object is an opaque handle to native state with constructors and
methods. At the FFI level it is a set of functions sharing the prefix
``{ffi_namespace}_{ObjectName}``:

- each constructor returns a new ``ObjectHandle``;
- each method takes the ``ObjectHandle`` as its first argument (``ptr``);
- ``ffi_{ffi_namespace}_{ObjectName}_object_free`` releases a handle.

Foreign bindings stitch these back together into a class.

A declaration like::

    interface Example {
      constructor(string? name);
      [Name=from_bytes] constructor(bytes raw);
      string my_name();
    };

yields an ``ObjectSpec`` with a primary constructor ``new``, an alternate
constructor ``from_bytes`` and one method ``my_name``. Objects may also
have no constructors at all.
"""

from __future__ import annotations

from collections.abc import Iterator

from pydantic import BaseModel, ConfigDict, Field

from .attributes import ConstructorAttributes, MethodAttributes
from .fields import ArgumentSpec
from .ffi import FFIArgument, FFIFunction, FFIType, ffi_type_for
from .functions import lower_arguments
from .types import Type

PRIMARY_CONSTRUCTOR_NAME = "new"


class ConstructorSpec(BaseModel):
    """A constructor; the one named ``new`` is the primary constructor."""

    name: str = PRIMARY_CONSTRUCTOR_NAME
    arguments: list[ArgumentSpec] = Field(default_factory=list)
    attributes: ConstructorAttributes = Field(default_factory=ConstructorAttributes)
    ffi_func: FFIFunction | None = Field(default=None, exclude=True)

    model_config = ConfigDict(frozen=True)

    def full_arguments(self) -> list[ArgumentSpec]:
        return list(self.arguments)

    def throws(self) -> str | None:
        return self.attributes.get_throws_err()

    def throws_type(self) -> Type | None:
        name = self.throws()
        return Type.error(name) if name else None

    def is_primary_constructor(self) -> bool:
        return self.name == PRIMARY_CONSTRUCTOR_NAME

    def iter_types(self) -> Iterator[Type]:
        for argument in self.arguments:
            yield from argument.iter_types()

    def derive_ffi_func(self, ci_prefix: str, obj_prefix: str) -> ConstructorSpec:
        ffi_func = FFIFunction(
            name=f"{ci_prefix}_{obj_prefix}_{self.name}",
            arguments=lower_arguments(self.arguments),
            return_type=FFIType.OBJECT_HANDLE,
        )
        return self.model_copy(update={"ffi_func": ffi_func})


class MethodSpec(BaseModel):
    """
    An instance method.

    Methods have an implicit leading receiver argument, so ``arguments``
    and ``full_arguments()`` differ. The receiver is passed by reference
    unless the method is marked ``[Self=ByArc]``, in which case it receives
    a shared handle.
    """

    name: str
    object_name: str
    arguments: list[ArgumentSpec] = Field(default_factory=list)
    return_type: Type | None = None
    attributes: MethodAttributes = Field(default_factory=MethodAttributes)
    ffi_func: FFIFunction | None = Field(default=None, exclude=True)

    model_config = ConfigDict(frozen=True)

    def receiver(self) -> ArgumentSpec:
        return ArgumentSpec(
            name="ptr",
            type=Type.object(self.object_name),
            by_ref=not self.takes_self_by_arc(),
        )

    def full_arguments(self) -> list[ArgumentSpec]:
        return [self.receiver(), *self.arguments]

    def throws(self) -> str | None:
        return self.attributes.get_throws_err()

    def throws_type(self) -> Type | None:
        name = self.throws()
        return Type.error(name) if name else None

    def takes_self_by_arc(self) -> bool:
        return self.attributes.get_self_by_arc()

    def iter_types(self) -> Iterator[Type]:
        for argument in self.arguments:
            yield from argument.iter_types()
        if self.return_type is not None:
            yield from self.return_type.iter_types()

    def derive_ffi_func(self, ci_prefix: str, obj_prefix: str) -> MethodSpec:
        ffi_func = FFIFunction(
            name=f"{ci_prefix}_{obj_prefix}_{self.name}",
            arguments=lower_arguments(self.full_arguments()),
            return_type=ffi_type_for(self.return_type) if self.return_type else None,
        )
        return self.model_copy(update={"ffi_func": ffi_func})


class ObjectSpec(BaseModel):
    """
    An object definition.

    Attributes:
        name: Object identifier
        constructors: Constructors in declaration order
        methods: Methods in declaration order
        uses_deprecated_threadsafe_attribute: Declared with ``[Threadsafe]``
        ffi_func_free: Derived destructor descriptor; excluded from the checksum
    """

    name: str
    constructors: list[ConstructorSpec] = Field(default_factory=list)
    methods: list[MethodSpec] = Field(default_factory=list)
    uses_deprecated_threadsafe_attribute: bool = False
    ffi_func_free: FFIFunction | None = Field(default=None, exclude=True)

    model_config = ConfigDict(frozen=True)

    @property
    def type_(self) -> Type:
        return Type.object(self.name)

    def primary_constructor(self) -> ConstructorSpec | None:
        return next((c for c in self.constructors if c.is_primary_constructor()), None)

    def alternate_constructors(self) -> list[ConstructorSpec]:
        return [c for c in self.constructors if not c.is_primary_constructor()]

    def get_method(self, name: str) -> MethodSpec:
        """
        Look up a method by name.

        Raises:
            LookupError: Unless exactly one method has that name
        """
        matches = [m for m in self.methods if m.name == name]
        if len(matches) != 1:
            raise LookupError(f"{len(matches)} methods named {name} on {self.name}")
        return matches[0]

    def ffi_object_free(self) -> FFIFunction | None:
        return self.ffi_func_free

    def iter_ffi_function_definitions(self) -> Iterator[FFIFunction]:
        if self.ffi_func_free is not None:
            yield self.ffi_func_free
        for member in (*self.constructors, *self.methods):
            if member.ffi_func is not None:
                yield member.ffi_func

    def iter_types(self) -> Iterator[Type]:
        for method in self.methods:
            yield from method.iter_types()
        for constructor in self.constructors:
            yield from constructor.iter_types()

    def derive_ffi_funcs(self, ci_prefix: str) -> ObjectSpec:
        """Return a copy with FFI descriptors for the object and all its members."""
        ffi_func_free = FFIFunction(
            name=f"ffi_{ci_prefix}_{self.name}_object_free",
            arguments=[FFIArgument(name="ptr", type=FFIType.OBJECT_HANDLE)],
            return_type=None,
        )
        return self.model_copy(
            update={
                "ffi_func_free": ffi_func_free,
                "constructors": [c.derive_ffi_func(ci_prefix, self.name) for c in self.constructors],
                "methods": [m.derive_ffi_func(ci_prefix, self.name) for m in self.methods],
            }
        )

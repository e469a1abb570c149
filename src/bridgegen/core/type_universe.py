"""
The registry of every type known to an interface under construction.

One ``TypeUniverse`` is owned by each ``ComponentInterface`` and threaded
through both build passes: discovery binds declared names, and the detail
pass resolves type expressions against those bindings, recording every
structural type it builds along the way.
"""

import logging
from collections.abc import Iterator
from dataclasses import dataclass, field

from .errors import DuplicateDefinitionError, ParseError, UnknownTypeError, make_error
from .ir import Type, resolve_builtin_type
from .syntax import SourceLocation, TypeExpr, TypeExprKind

logger = logging.getLogger(__name__)


@dataclass
class TypeUniverse:
    """
    Name -> Type bindings plus the set of all types observed.

    ``all_known_types`` keeps insertion order so that iteration is
    deterministic for a given input.
    """

    type_definitions: dict[str, Type] = field(default_factory=dict)
    all_known_types: dict[Type, None] = field(default_factory=dict)

    def add_type_definition(
        self, name: str, type_: Type, location: SourceLocation | None = None
    ) -> None:
        """
        Bind ``name`` to ``type_``.

        Re-binding a name to the same type is a no-op.

        Raises:
            DuplicateDefinitionError: If the name shadows a builtin type or is
                already bound to a different type
        """
        if resolve_builtin_type(name) is not None:
            raise make_error(
                DuplicateDefinitionError,
                f"please don't shadow builtin types ({name}, {type_})",
                name=name,
                location=location,
            )
        existing = self.type_definitions.get(name)
        if existing is not None:
            if existing != type_:
                raise make_error(
                    DuplicateDefinitionError,
                    f"Conflicting type definition for '{name}': "
                    f"already defined as {existing.kind.value}, "
                    f"redefined as {type_.kind.value}",
                    name=name,
                    location=location,
                )
            return
        self.type_definitions[name] = type_
        self.add_known_type(type_)
        logger.debug("Defined type %s as %s", name, type_.kind.value)

    def add_known_type(self, type_: Type) -> None:
        """Record a type as used somewhere in the interface."""
        self.all_known_types.setdefault(type_, None)

    def get_type_definition(self, name: str) -> Type | None:
        return self.type_definitions.get(name)

    def iter_known_types(self) -> Iterator[Type]:
        return iter(self.all_known_types)

    def resolve_type_expression(self, expr: TypeExpr) -> Type:
        """
        Resolve a type expression into a canonical ``Type``.

        Every type built along the way is registered, so resolving
        ``sequence<Foo>?`` records both ``Sequence(Foo)`` and
        ``Optional(Sequence(Foo))``.

        Raises:
            UnknownTypeError: If a name in the expression is not defined
        """
        if expr.kind == TypeExprKind.SEQUENCE:
            if expr.element is None:
                raise make_error(
                    ParseError, "sequence type without an element type", location=expr.location
                )
            type_ = Type.sequence(self.resolve_type_expression(expr.element))
        elif expr.kind == TypeExprKind.MAP:
            if expr.key is None or expr.value is None:
                raise make_error(
                    ParseError, "map type without key and value types", location=expr.location
                )
            key = self.resolve_type_expression(expr.key)
            value = self.resolve_type_expression(expr.value)
            type_ = Type.map(key, value)
        else:
            type_ = self._resolve_identifier(expr)

        self.add_known_type(type_)
        if expr.nullable:
            type_ = Type.optional(type_)
            self.add_known_type(type_)
        return type_

    def _resolve_identifier(self, expr: TypeExpr) -> Type:
        name = expr.name or ""
        builtin = resolve_builtin_type(name)
        if builtin is not None:
            return builtin
        defined = self.get_type_definition(name)
        if defined is None:
            raise make_error(
                UnknownTypeError,
                f"Failed to resolve type `{name}`",
                name=name,
                location=expr.location,
            )
        return defined

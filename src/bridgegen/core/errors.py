"""
Error types for building a component interface.

Every error is fatal to the build in progress: the builder never catches
these, so a failed build produces no partial output.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .syntax import SourceLocation


class BridgegenError(Exception):
    """Base exception for all bridgegen errors."""

    def __init__(
        self,
        message: str,
        context: Optional["ErrorContext"] = None,
        name: str | None = None,
    ):
        self.message = message
        self.context = context
        self.name = name
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format error message with context if available."""
        if self.context:
            return f"{self.context.format()}\n{self.message}"
        return self.message


class ParseError(BridgegenError):
    """
    Raised when a textual input cannot be turned into a syntax node.

    Examples:
    - Malformed type expression (``sequence<Foo``)
    - Unbalanced generic arguments in a metadata type string
    - Syntax-tree JSON that does not match the node schema
    """

    pass


class DuplicateDefinitionError(BridgegenError):
    """
    Raised when a name is declared twice with conflicting meanings.

    Examples:
    - Two functions with the same name
    - A function named like a record, enum or object
    - A declaration that shadows a builtin type name
    - Two constructors with the same name on one object
    """

    pass


class UnknownTypeError(BridgegenError):
    """
    Raised when a type expression references a name that was never declared.
    """

    pass


class UnsupportedAttributeError(BridgegenError):
    """
    Raised when an attribute is unknown or not valid for a declaration kind.

    Examples:
    - ``[Frobnicate]`` anywhere
    - ``[ByRef]`` on a dictionary
    - ``[Self=ByValue]`` on a method
    """

    pass


class ConsistencyError(BridgegenError):
    """
    Raised when the interface as a whole violates a global invariant.

    Examples:
    - No namespace declaration
    - An enum variant named like a top-level type
    - ``[Throws=X]`` where ``X`` is not a declared error
    """

    pass


class InternalMappingError(BridgegenError):
    """
    Raised when a type has no low-level FFI representation.

    This indicates a bug in bridgegen rather than a problem with the input.
    """

    pass


class InvalidLiteralError(BridgegenError):
    """
    Raised when a default value is incompatible with its declared type.
    """

    pass


@dataclass
class ErrorContext:
    """
    Context information for an error, including source location.

    Attributes:
        file: Path to the source document where the error occurred
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        declaration: Optional name of the declaration being built
    """

    file: Path
    line: int
    column: int
    declaration: str | None = None

    def format(self) -> str:
        """
        Format error context as a human-readable string.

        Returns:
            Formatted string like: "example.udl:10:5 in declaration Point"
        """
        location = f"{self.file}:{self.line}:{self.column}"
        if self.declaration:
            location += f" in declaration {self.declaration}"
        return location


def make_error(
    error_class: type[BridgegenError],
    message: str,
    name: str | None = None,
    location: "SourceLocation | None" = None,
) -> BridgegenError:
    """
    Helper to create a build error with optional context.

    Args:
        error_class: Concrete error type to instantiate
        message: Error description
        name: Name of the offending declaration, if known
        location: Source location of the offending syntax node, if known

    Returns:
        Error instance with context attached when a location was provided
    """
    if location is not None:
        context = ErrorContext(
            file=Path(location.file),
            line=location.line,
            column=location.column,
            declaration=name,
        )
        return error_class(message, context, name=name)
    return error_class(message, name=name)

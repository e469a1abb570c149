"""
Syntax tree for interface-description documents.

These nodes are what an IDL front end hands to the builder. Grammar parsing
happens elsewhere; this module only fixes the shape of its output so that
documents can be constructed in code or loaded from JSON.

Example document (JSON form)::

    {
      "file": "example.udl",
      "definitions": [
        {"kind": "namespace", "name": "example", "functions": [
          {"name": "hello", "return_type": {"kind": "identifier", "name": "string"}}
        ]},
        {"kind": "dictionary", "name": "Point", "members": [
          {"name": "x", "type": {"kind": "identifier", "name": "i32"}},
          {"name": "y", "type": {"kind": "identifier", "name": "i32"}}
        ]}
      ]
    }
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ParseError


class SourceLocation(BaseModel):
    """Source position where a construct was declared.

    Attributes:
        file: Path to the document (relative or absolute)
        line: 1-indexed line number
        column: 1-indexed column number
    """

    file: str
    line: int
    column: int

    model_config = ConfigDict(frozen=True)

    def __str__(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"


class AttributeNode(BaseModel):
    """A raw ``[Key]`` or ``[Key=value]`` attribute."""

    key: str
    value: str | None = None
    location: SourceLocation | None = None

    model_config = ConfigDict(frozen=True)


class TypeExprKind(str, Enum):
    """Shapes a type expression can take."""

    IDENTIFIER = "identifier"
    SEQUENCE = "sequence"
    MAP = "map"


class TypeExpr(BaseModel):
    """
    An unresolved type expression.

    Examples:
        - ``i32``: TypeExpr(kind=IDENTIFIER, name="i32")
        - ``sequence<Foo>?``: TypeExpr(kind=SEQUENCE, element=<Foo>, nullable=True)
        - ``record<string, u8>``: TypeExpr(kind=MAP, key=<string>, value=<u8>)
    """

    kind: TypeExprKind
    name: str | None = None  # for identifier
    element: TypeExpr | None = None  # for sequence
    key: TypeExpr | None = None  # for map
    value: TypeExpr | None = None  # for map
    nullable: bool = False
    location: SourceLocation | None = None

    model_config = ConfigDict(frozen=True)

    @classmethod
    def identifier(cls, name: str, nullable: bool = False) -> TypeExpr:
        return cls(kind=TypeExprKind.IDENTIFIER, name=name, nullable=nullable)

    @classmethod
    def sequence(cls, element: TypeExpr, nullable: bool = False) -> TypeExpr:
        return cls(kind=TypeExprKind.SEQUENCE, element=element, nullable=nullable)

    @classmethod
    def map(cls, key: TypeExpr, value: TypeExpr, nullable: bool = False) -> TypeExpr:
        return cls(kind=TypeExprKind.MAP, key=key, value=value, nullable=nullable)

    def __str__(self) -> str:
        if self.kind == TypeExprKind.SEQUENCE:
            text = f"sequence<{self.element}>"
        elif self.kind == TypeExprKind.MAP:
            text = f"record<{self.key}, {self.value}>"
        else:
            text = str(self.name)
        return f"{text}?" if self.nullable else text


class DefaultValueKind(str, Enum):
    """Lexical categories of default values."""

    BOOLEAN = "boolean"
    INTEGER = "integer"
    FLOAT = "float"
    STRING = "string"
    NULL = "null"
    EMPTY_SEQUENCE = "empty_sequence"
    EMPTY_MAP = "empty_map"
    IDENTIFIER = "identifier"


class DefaultValueNode(BaseModel):
    """A default value exactly as written in the document.

    ``text`` keeps the source spelling (``0x1F``, ``3.50``, ``"hi"`` without
    quotes, ``Red``) so radix and precision survive into the model.
    """

    kind: DefaultValueKind
    text: str = ""
    location: SourceLocation | None = None

    model_config = ConfigDict(frozen=True)


class ArgumentNode(BaseModel):
    """An operation or constructor argument."""

    name: str
    type: TypeExpr
    optional: bool = False
    default: DefaultValueNode | None = None
    attributes: list[AttributeNode] | None = None
    location: SourceLocation | None = None

    model_config = ConfigDict(frozen=True)


class OperationNode(BaseModel):
    """A function, method, callback method or tagged-union variant."""

    name: str
    arguments: list[ArgumentNode] = Field(default_factory=list)
    return_type: TypeExpr | None = None
    attributes: list[AttributeNode] | None = None
    location: SourceLocation | None = None

    model_config = ConfigDict(frozen=True)


class ConstructorNode(BaseModel):
    """An interface constructor."""

    arguments: list[ArgumentNode] = Field(default_factory=list)
    attributes: list[AttributeNode] | None = None
    location: SourceLocation | None = None

    model_config = ConfigDict(frozen=True)


class MemberNode(BaseModel):
    """A dictionary member."""

    name: str
    type: TypeExpr
    required: bool = False
    default: DefaultValueNode | None = None
    attributes: list[AttributeNode] | None = None
    location: SourceLocation | None = None

    model_config = ConfigDict(frozen=True)


class NamespaceDecl(BaseModel):
    """The ``namespace`` block holding top-level functions."""

    kind: Literal["namespace"] = "namespace"
    name: str
    functions: list[OperationNode] = Field(default_factory=list)
    attributes: list[AttributeNode] | None = None
    location: SourceLocation | None = None

    model_config = ConfigDict(frozen=True)


class DictionaryDecl(BaseModel):
    """A ``dictionary`` (record) declaration."""

    kind: Literal["dictionary"] = "dictionary"
    name: str
    members: list[MemberNode] = Field(default_factory=list)
    attributes: list[AttributeNode] | None = None
    location: SourceLocation | None = None

    model_config = ConfigDict(frozen=True)


class EnumDecl(BaseModel):
    """A plain ``enum`` declaration; ``[Error]`` turns it into a flat error."""

    kind: Literal["enum"] = "enum"
    name: str
    values: list[str] = Field(default_factory=list)
    attributes: list[AttributeNode] | None = None
    location: SourceLocation | None = None

    model_config = ConfigDict(frozen=True)


class InterfaceDecl(BaseModel):
    """
    An ``interface`` declaration.

    Without attributes this is an object. With ``[Enum]`` or ``[Error]`` the
    operations are read as variants whose arguments are the variant fields.
    """

    kind: Literal["interface"] = "interface"
    name: str
    constructors: list[ConstructorNode] = Field(default_factory=list)
    operations: list[OperationNode] = Field(default_factory=list)
    attributes: list[AttributeNode] | None = None
    location: SourceLocation | None = None

    model_config = ConfigDict(frozen=True)


class CallbackInterfaceDecl(BaseModel):
    """A ``callback interface`` implemented on the foreign side."""

    kind: Literal["callback_interface"] = "callback_interface"
    name: str
    operations: list[OperationNode] = Field(default_factory=list)
    attributes: list[AttributeNode] | None = None
    location: SourceLocation | None = None

    model_config = ConfigDict(frozen=True)


class TypedefDecl(BaseModel):
    """A ``typedef``; needs ``[External=source]`` or ``[Custom]``.

    ``type_name`` is ``extern`` for external types and the underlying builtin
    for custom types.
    """

    kind: Literal["typedef"] = "typedef"
    name: str
    type_name: str = "extern"
    attributes: list[AttributeNode] | None = None
    location: SourceLocation | None = None

    model_config = ConfigDict(frozen=True)


Declaration = Annotated[
    NamespaceDecl
    | DictionaryDecl
    | EnumDecl
    | InterfaceDecl
    | CallbackInterfaceDecl
    | TypedefDecl,
    Field(discriminator="kind"),
]


class InterfaceDocument(BaseModel):
    """A complete parsed interface-description document."""

    file: str | None = None
    definitions: list[Declaration] = Field(default_factory=list)

    model_config = ConfigDict(frozen=True)


def load_document(text: str) -> InterfaceDocument:
    """
    Load a syntax tree from its JSON form.

    Args:
        text: JSON produced by an IDL front end

    Returns:
        The validated document

    Raises:
        ParseError: If the JSON does not match the syntax-tree schema
    """
    try:
        return InterfaceDocument.model_validate_json(text)
    except ValidationError as e:
        raise ParseError(f"Invalid interface document: {e}") from e

"""
Parsers for compact textual type expressions.

Two spellings are supported:

- interface-document style, as written in IDL files:
  ``i32``, ``sequence<Point>``, ``record<string, u64>``, ``string?``
- metadata style, as recorded from annotated source declarations:
  ``u32``, ``Vec<Point>``, ``HashMap<String, u64>``, ``Option<String>``

Both produce the same ``TypeExpr`` syntax nodes, so the type universe only
has one kind of expression to resolve.
"""

import re

from .errors import ParseError
from .syntax import SourceLocation, TypeExpr

_TOKEN_RE = re.compile(r"\s*(?:(?P<ident>[A-Za-z_][A-Za-z0-9_]*)|(?P<punct>[<>,?]))")

# Metadata spellings of builtin types that differ from the IDL spelling.
METADATA_BUILTIN_NAMES: dict[str, str] = {
    "bool": "boolean",
    "String": "string",
}


def _tokenize(text: str) -> list[str]:
    tokens: list[str] = []
    pos = 0
    stripped = text.rstrip()
    while pos < len(stripped):
        match = _TOKEN_RE.match(stripped, pos)
        if not match:
            raise ParseError(f"Unexpected character {stripped[pos:].strip()[0]!r} in type '{text}'")
        tokens.append(match.group("ident") or match.group("punct"))
        pos = match.end()
    return tokens


class _TypeParser:
    def __init__(self, text: str, metadata_style: bool, location: SourceLocation | None):
        self.text = text
        self.tokens = _tokenize(text)
        self.pos = 0
        self.metadata_style = metadata_style
        self.location = location

    def _peek(self) -> str | None:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _next(self) -> str:
        token = self._peek()
        if token is None:
            raise ParseError(f"Unexpected end of type '{self.text}'")
        self.pos += 1
        return token

    def _expect(self, token: str) -> None:
        actual = self._next()
        if actual != token:
            raise ParseError(f"Expected '{token}' but found '{actual}' in type '{self.text}'")

    def parse(self) -> TypeExpr:
        expr = self._parse_type()
        if self._peek() is not None:
            raise ParseError(f"Unexpected '{self._peek()}' after type in '{self.text}'")
        return expr

    def _parse_type(self) -> TypeExpr:
        name = self._next()
        if not name[0].isalpha() and name[0] != "_":
            raise ParseError(f"Expected a type name but found '{name}' in type '{self.text}'")

        if self.metadata_style:
            expr = self._parse_metadata_generic(name)
        else:
            expr = self._parse_idl_generic(name)

        if not self.metadata_style and self._peek() == "?":
            self._next()
            expr = expr.model_copy(update={"nullable": True})
        return expr

    def _parse_idl_generic(self, name: str) -> TypeExpr:
        if name == "sequence":
            self._expect("<")
            element = self._parse_type()
            self._expect(">")
            return TypeExpr.sequence(element).model_copy(update={"location": self.location})
        if name == "record":
            self._expect("<")
            key = self._parse_type()
            self._expect(",")
            value = self._parse_type()
            self._expect(">")
            return TypeExpr.map(key, value).model_copy(update={"location": self.location})
        return TypeExpr.identifier(name).model_copy(update={"location": self.location})

    def _parse_metadata_generic(self, name: str) -> TypeExpr:
        if name == "Option":
            self._expect("<")
            inner = self._parse_type()
            self._expect(">")
            if inner.nullable:
                raise ParseError(f"Nested Option is not supported in type '{self.text}'")
            return inner.model_copy(update={"nullable": True})
        if name == "Vec":
            self._expect("<")
            element = self._parse_type()
            self._expect(">")
            return TypeExpr.sequence(element).model_copy(update={"location": self.location})
        if name == "HashMap":
            self._expect("<")
            key = self._parse_type()
            self._expect(",")
            value = self._parse_type()
            self._expect(">")
            return TypeExpr.map(key, value).model_copy(update={"location": self.location})
        name = METADATA_BUILTIN_NAMES.get(name, name)
        return TypeExpr.identifier(name).model_copy(update={"location": self.location})


def parse_type_expression(text: str, location: SourceLocation | None = None) -> TypeExpr:
    """
    Parse an interface-document type expression such as ``sequence<Foo>?``.

    Raises:
        ParseError: If the text is not a well-formed type expression
    """
    return _TypeParser(text, metadata_style=False, location=location).parse()


def parse_metadata_type(text: str, location: SourceLocation | None = None) -> TypeExpr:
    """
    Parse a metadata type string such as ``Option<Vec<Foo>>``.

    Raises:
        ParseError: If the text is not a well-formed type string
    """
    return _TypeParser(text, metadata_style=True, location=location).parse()

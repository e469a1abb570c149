"""Shared pytest fixtures for bridgegen tests."""

from collections.abc import Callable

import pytest

from bridgegen.core.builder import build_component_interface
from bridgegen.core.config import BuildConfig
from bridgegen.core.interface import ComponentInterface
from bridgegen.core.syntax import (
    InterfaceDocument,
    NamespaceDecl,
    OperationNode,
)
from bridgegen.core.type_expressions import parse_type_expression

TEST_GENERATOR_VERSION = "test-1.0"


@pytest.fixture
def build() -> Callable[..., ComponentInterface]:
    """
    Return a function that builds an interface from declarations.

    A ``namespace example`` declaration is prepended unless ``namespace`` is
    None or the declarations already include one.
    """

    def _build(*definitions, namespace="example", metadata=None, config=None):
        decls = list(definitions)
        if namespace and not any(isinstance(d, NamespaceDecl) for d in decls):
            decls.insert(0, NamespaceDecl(name=namespace))
        document = InterfaceDocument(file="test.udl", definitions=decls)
        config = config or BuildConfig(generator_version=TEST_GENERATOR_VERSION)
        return build_component_interface(document, metadata, config)

    return _build


@pytest.fixture
def hello_document() -> InterfaceDocument:
    """namespace example { string hello(); };"""
    return InterfaceDocument(
        file="hello.udl",
        definitions=[
            NamespaceDecl(
                name="example",
                functions=[
                    OperationNode(name="hello", return_type=parse_type_expression("string"))
                ],
            )
        ],
    )

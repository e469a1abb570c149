"""
bridgegen - checksummed component interfaces for native/foreign-language bindings.

Builds a single interface model from an interface document or from metadata
records, and derives the low-level FFI calling convention that generated
scaffolding and foreign bindings share.
"""

from __future__ import annotations

from ._version import get_version

# Re-export commonly used types for convenience
from .core import ir
from .core.builder import build_component_interface
from .core.errors import BridgegenError, ConsistencyError, DuplicateDefinitionError
from .core.interface import ComponentInterface

__version__ = get_version()

__all__ = [
    "__version__",
    "ir",
    "BridgegenError",
    "ConsistencyError",
    "DuplicateDefinitionError",
    "ComponentInterface",
    "build_component_interface",
]

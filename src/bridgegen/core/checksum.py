"""
Deterministic interface checksums.

The checksum guards against loading scaffolding compiled from one version
of an interface with bindings generated from another: it is embedded in
every FFI symbol name, so a mismatch becomes a link error instead of memory
corruption. It is meant to catch accidents, not attacks.

Python's builtin ``hash()`` is salted per process, so the model is dumped to
canonical JSON and digested with SHA-256 instead. Derived FFI descriptors
are declared with ``exclude=True`` on their models and therefore never
reach the digest.
"""

import hashlib
import json
from typing import Any

from pydantic import BaseModel


def canonical_json(payload: dict[str, Any]) -> str:
    """Serialize with sorted keys and no insignificant whitespace."""
    return json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=True)


def dump_declarations(declarations: list[BaseModel]) -> list[dict[str, Any]]:
    return [decl.model_dump(mode="json") for decl in declarations]


def compute_checksum(payload: dict[str, Any]) -> int:
    """
    Compute a 64-bit checksum of a JSON-serializable payload.

    Returns:
        The first eight bytes of the SHA-256 digest as an unsigned integer
    """
    digest = hashlib.sha256(canonical_json(payload).encode("utf-8")).digest()
    return int.from_bytes(digest[:8], "big")

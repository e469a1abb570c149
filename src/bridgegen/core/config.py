import tomllib
from dataclasses import dataclass, fields
from pathlib import Path

from .errors import BridgegenError


@dataclass
class BuildConfig:
    """Build settings read from ``bridgegen.toml`` or ``pyproject.toml``."""

    generator_version: str | None = None  # overrides the checksum version tag
    namespace: str | None = None  # used when no document declares one


def load_config(path: Path | None) -> BuildConfig:
    """
    Load build settings.

    A ``pyproject.toml`` is read from its ``[tool.bridgegen]`` table; any
    other file from its ``[build]`` table. A missing file gives the defaults.

    Raises:
        BridgegenError: If the file has keys bridgegen does not know
    """
    if path is None or not path.exists():
        return BuildConfig()

    data = tomllib.loads(path.read_text(encoding="utf-8"))
    if path.name == "pyproject.toml":
        build_data = data.get("tool", {}).get("bridgegen", {})
    else:
        build_data = data.get("build", {})

    known = {f.name for f in fields(BuildConfig)}
    unknown = sorted(set(build_data) - known)
    if unknown:
        raise BridgegenError(f"Unknown configuration keys in {path}: {', '.join(unknown)}")

    return BuildConfig(
        generator_version=build_data.get("generator_version"),
        namespace=build_data.get("namespace"),
    )

"""Package version lookup."""

import tomllib
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _metadata_version
from pathlib import Path

_PYPROJECT = Path(__file__).resolve().parents[2] / "pyproject.toml"


def get_version() -> str:
    """Return the checkout's version when run from source, else the installed one."""
    if _PYPROJECT.exists():
        with _PYPROJECT.open("rb") as f:
            project = tomllib.load(f).get("project", {})
        if project.get("name") == "bridgegen" and "version" in project:
            return str(project["version"])
    try:
        return _metadata_version("bridgegen")
    except PackageNotFoundError:
        return "0.0.0"

from pathlib import Path
from importlib import metadata as importlib_metadata
from typing import Any
import tomllib

# Distribution name used when no pyproject.toml is reachable (installed wheels).
DISTRIBUTION_NAME = "bookstore-api"

# --------------------
# Find pyproject.toml
# --------------------


def find_pyproject(start: Path, max_up: int = 5) -> Path | None:
    p = start
    for _ in range(max_up):
        candidate = p / "pyproject.toml"
        if candidate.exists():
            return candidate
        if p.parent == p:
            break
        p = p.parent
    return None


def get_pyproject_value(key: str, start: Path | None = None, max_up: int = 5, default: Any = None) -> Any:
    """
    Return the value for the dot-separated `key` (e.g. "project.version") from the
    nearest pyproject.toml above `start`, or `default` when the file or key is missing.
    """
    start_path = start or Path(__file__).resolve().parent
    pyproject = find_pyproject(start_path, max_up=max_up)
    if pyproject is None:
        return default

    try:
        with pyproject.open("rb") as f:
            cur = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError):
        return default

    for part in key.split("."):
        if isinstance(cur, dict) and part in cur:
            cur = cur[part]
        else:
            return default
    return cur


def get_project_name(default: str = DISTRIBUTION_NAME) -> str:
    """
    Convenience wrapper for project.name in pyproject.toml.
    """
    return get_pyproject_value("project.name", default=default)


def get_project_version(default: str = "unknown") -> str:
    """
    Installed distribution version first (containers / wheels), then project.version
    from pyproject.toml (editable checkouts), then `default`.
    """
    try:
        return importlib_metadata.version(get_project_name())
    except importlib_metadata.PackageNotFoundError:
        pass

    val = get_pyproject_value("project.version", default=None)
    return val if val is not None else default


__all__ = [
    "find_pyproject",
    "get_pyproject_value",
    "get_project_name",
    "get_project_version",
]

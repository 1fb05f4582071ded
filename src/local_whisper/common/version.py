"""
Version lookup for local-whisper.

Reads installed package metadata, falling back to pyproject.toml when
running from a source checkout.
"""

from pathlib import Path

DIST_NAME = "local-whisper"


def get_version() -> str:
    """
    Get the package version.

    Priority:
    1. importlib.metadata.version() - when installed as a package
    2. pyproject.toml - when running from source

    Returns:
        Version string (e.g., "1.0.0") or "dev" if unavailable
    """
    try:
        from importlib.metadata import PackageNotFoundError, version

        return version(DIST_NAME)
    except PackageNotFoundError:
        pass

    try:
        import tomllib

        for parent in Path(__file__).resolve().parents:
            pyproject_path = parent / "pyproject.toml"
            if pyproject_path.exists():
                with open(pyproject_path, "rb") as f:
                    data = tomllib.load(f)
                return data.get("project", {}).get("version", "dev")
    except (OSError, ValueError):
        pass

    return "dev"


__version__ = get_version()

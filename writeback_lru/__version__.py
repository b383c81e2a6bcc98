"""
Version information for writeback-lru.

The package version is read from pyproject.toml via importlib.metadata, with
a direct read of pyproject.toml when the package is not installed.
"""

try:
    from importlib.metadata import version

    __version__ = version("writeback-lru")
except Exception:
    # Fallback for development (package not installed)
    import tomllib
    from pathlib import Path

    try:
        pyproject_path = Path(__file__).parent.parent / "pyproject.toml"
        with open(pyproject_path, "rb") as f:
            __version__ = tomllib.load(f)["project"]["version"]
    except Exception:
        __version__ = "0.0.0-dev"

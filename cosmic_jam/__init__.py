"""Cosmic Jam — capture and replay engine for timed keyboard performances."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("cosmic-jam")
except PackageNotFoundError:
    # Source checkout without installed metadata: read pyproject.toml directly
    try:
        import tomllib
        from pathlib import Path

        _toml = Path(__file__).resolve().parent.parent / "pyproject.toml"
        with open(_toml, "rb") as f:
            __version__ = tomllib.load(f)["project"]["version"]
    except Exception:
        __version__ = "0.0.0-dev"

"""Version information for Klarity.

The version is read from pyproject.toml to maintain a single source of truth.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("klarity")
except PackageNotFoundError:
    # Package not installed, fallback for development
    __version__ = "0.0.0-dev"

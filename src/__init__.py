# src/__init__.py - v1
"""aiexplorer: progressive file and directory analysis with a tiered cache."""

from aiexplorer.version import __version__

__all__ = ["__version__"]

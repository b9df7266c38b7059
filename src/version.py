# src/version.py - v1
"""Package version, single source for the CLI and packaging."""

__version__ = "0.1.0"

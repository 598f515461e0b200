# src/__init__.py — v1
"""ink2md — import handwritten notes and transcribe them to Markdown."""

from ink2md.version import __version__

__all__ = ["__version__"]

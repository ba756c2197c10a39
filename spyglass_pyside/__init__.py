"""Spyglass: tabbed folder browser with a global file index."""

__version__ = "0.1.0"

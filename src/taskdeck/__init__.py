"""Taskdeck: terminal client for project boards with optimistic drag-and-drop."""

__version__ = "0.1.0"

__all__ = ["__version__"]

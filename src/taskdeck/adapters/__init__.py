"""Data source adapters."""

from taskdeck.adapters.http import HttpBoardDataSource

__all__ = ["HttpBoardDataSource"]

"""Qt adapters for listloader (requires PySide6)."""

from .qt_bridge import QtCallbackContext, QtLoadListener

__all__ = ["QtCallbackContext", "QtLoadListener"]

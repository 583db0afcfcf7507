"""Custom exception hierarchy for listloader."""

from __future__ import annotations


class ListLoaderError(Exception):
    """Base class for all custom errors raised by listloader."""


# --- Load cycle errors ---

class PullError(ListLoaderError):
    """Base class for errors terminating a load cycle."""


class DataLimitReachedError(PullError):
    """Raised when the remote source has no items beyond what was loaded."""


class OperationCancelledError(PullError):
    """Raised when a queued load was cancelled before it could commit."""


class OperationTimeOutError(PullError):
    """Raised when a collaborator call did not finish within the configured bound."""


class QueueError(PullError):
    """Raised when the load queue reaches an inconsistent state."""


class InvalidCredentialsError(PullError):
    """Raised when a request window has a malformed range."""


# --- Refresh errors ---

class RefreshError(ListLoaderError):
    """Base class for refresh failures."""


class RefreshQueueBusyError(RefreshError):
    """Raised when a refresh is requested while the load queue has work."""


class RefreshUpToDateError(RefreshError):
    """Raised when an ``outdated`` refresh is requested too early."""


class RefreshTimeOutError(RefreshError):
    """Raised when a synchronous refresh did not finish in time."""


# --- Settings errors ---

class SettingsError(ListLoaderError):
    """Base class for settings related failures."""


class SettingsLoadError(SettingsError):
    """Raised when the settings file cannot be parsed or loaded."""


class SettingsValidationError(SettingsError):
    """Raised when settings data fails schema validation."""

"""Exceptions raised by formwatchers."""


class FormWatcherError(Exception):
    """Base class for all formwatchers errors."""


class InputValidationError(FormWatcherError, TypeError):
    """Raised by create_form_watchers() when its arguments are malformed.

    Always raised before any watcher is installed, so a failed construction
    leaves nothing behind to clean up.
    """


class SchedulerUnavailableError(FormWatcherError, RuntimeError):
    """Raised when no scheduler was passed and no asyncio event loop is running."""

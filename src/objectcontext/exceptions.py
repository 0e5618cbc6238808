"""
Usage errors raised by the object context.

Each error also derives from the builtin exception a caller would naturally
catch for the same misuse (TypeError for wrong value kinds, ValueError for bad
arguments, KeyError for unknown references).
"""


class ObjectContextError(Exception):
    """Base class for all object context usage errors."""


class NotAnObjectError(ObjectContextError, TypeError):
    """Raised when a value that is not a trackable object is registered."""


class AlreadyTrackedError(ObjectContextError, ValueError):
    """Raised when the same reference is registered twice at the top level."""


class InvalidStatusError(ObjectContextError, ValueError):
    """Raised when a status literal does not name an ObjectStatus."""


class NotTrackedError(ObjectContextError, KeyError):
    """Raised when an operation targets a reference the context does not track."""

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message
        return str(self.args[0]) if self.args else ''


class InvalidListenerError(ObjectContextError, TypeError):
    """Raised when a non-callable change listener is subscribed."""


class NotSubscribedError(ObjectContextError, ValueError):
    """Raised when unsubscribing a listener that was never subscribed."""


class TransportError(ObjectContextError, RuntimeError):
    """Raised when load/save is requested without a usable transport."""

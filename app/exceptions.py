# app/exceptions.py
"""
Error taxonomy for the automation + notification engine.
None of these abort a batch: the action executor and the dispatcher catch
them per item and report them back to the caller.
"""

from typing import Optional


class DispatchError(Exception):
    """Base class for all engine errors."""


class UnresolvedReferenceError(DispatchError):
    """An action names a status (or truck) that does not exist. Action is skipped."""

    def __init__(self, kind: str, value: str):
        self.kind = kind
        self.value = value
        super().__init__(f"Unknown {kind}: {value!r}")


class StorageWriteError(DispatchError):
    """Persisting one action failed. Wraps the underlying SQLAlchemy error."""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        self.cause = cause
        super().__init__(message)


class DeliveryError(DispatchError):
    """Sending one SMS / e-mail failed. Collected per recipient."""

    def __init__(self, recipient: str, cause: Optional[Exception] = None):
        self.recipient = recipient
        self.cause = cause
        super().__init__(f"Delivery to {recipient} failed: {cause}")

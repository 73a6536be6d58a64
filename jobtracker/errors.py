"""Exception types shared by the tracker core."""
from typing import Optional


class TrackerError(Exception):
    """Base class for every error the tracker raises on purpose."""


class ValidationError(TrackerError):
    """Draft input rejected before anything is sent to the store."""

    def __init__(self, field: str, message: str):
        self.field = field
        self.message = message
        super().__init__(f"{field}: {message}")


class RemoteError(TrackerError):
    """A store operation failed (transport, timeout, HTTP status or bad body)."""

    def __init__(self, operation: str, cause: Optional[BaseException] = None, detail: str = ""):
        self.operation = operation
        self.cause = cause
        self.detail = detail or (str(cause) if cause else "")
        super().__init__(f"{operation} failed: {self.detail}" if self.detail else f"{operation} failed")


class BusyError(TrackerError):
    """Raised when a mutation is requested while another one is still in flight."""

    def __init__(self, requested: str, in_flight: str):
        self.requested = requested
        self.in_flight = in_flight
        super().__init__(f"Cannot {requested} while {in_flight} is in progress")


class DraftStateError(TrackerError):
    """Draft operation attempted in a state that does not allow it."""

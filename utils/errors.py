"""
utils/errors.py
---------------
Domain exceptions shared by services, repositories and handlers.
"""

from typing import Optional


class TrackerError(Exception):
    """Base class for every error raised by this application."""


class InvalidFrequencyError(TrackerError, ValueError):
    """A frequency kind is unknown, or a custom frequency lacks a positive day count."""


class BackendError(TrackerError):
    """
    A call to the REST backend failed.

    Attributes:
        operation: Short description of the attempted call (e.g. 'update plan').
        status_code: HTTP status when the server answered, None on transport errors.
    """

    def __init__(self, operation: str, status_code: Optional[int] = None, detail: str = ""):
        self.operation = operation
        self.status_code = status_code
        self.detail = detail
        msg = f"Failed to {operation}"
        if status_code is not None:
            msg += f" (HTTP {status_code})"
        if detail:
            msg += f": {detail}"
        super().__init__(msg)


class FinalPaymentError(TrackerError):
    """Marking a premium paid would schedule the next due date past the plan's expiry."""


class PlanExpiredError(TrackerError):
    """A premium was marked paid on a plan whose expiry date has passed."""

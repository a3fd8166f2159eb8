"""
Domain exceptions for the billing service.

Routers never catch these; app.main maps each one to an HTTP status.
"""
from typing import Dict, List, Optional


class RecurringBillingError(Exception):
    """Base class for errors raised by the billing domain."""


class ValidationError(RecurringBillingError):
    """Malformed or missing profile data.

    ``errors`` holds every problem found, as ``{"field": ..., "message": ...}``.
    """

    def __init__(self, errors: List[Dict[str, str]]):
        self.errors = errors
        messages = "; ".join(f"{e['field']}: {e['message']}" for e in errors)
        super().__init__(f"Invalid recurring invoice profile ({messages})")


class InvalidTransitionError(RecurringBillingError):
    """An event was applied to a profile whose status does not accept it."""

    def __init__(self, message: str, status: Optional[str] = None, event: Optional[str] = None):
        self.status = status
        self.event = event
        super().__init__(message)


class NotFoundError(RecurringBillingError):
    """A referenced customer, item, profile or invoice does not exist."""


class ConflictError(RecurringBillingError):
    """A write would break a uniqueness or reference constraint."""

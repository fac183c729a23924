"""
ContactBook: Custom Exception Hierarchy
========================================

What:  Application-specific exceptions for the server and the client half.
How:   Each exception carries a message and an optional context dict.
       Global exception handlers (registered in main.py) map the server-side
       ones to structured JSON error responses.

Exception Hierarchy:
    ContactBookError (base)
    ├── ValidationError          → 400 Bad Request
    ├── NotFoundError            → 404 Not Found
    ├── DatabaseError            → 500 Internal Server Error
    │   └── StoreUnavailableError → 503 Service Unavailable
    ├── ResourceRequestError     (client: an API request failed)
    └── ClientRoutingError       (client: navigation could not be resolved)
"""

from typing import Any, Dict, Optional


class ContactBookError(Exception):
    """
    Base exception for all ContactBook errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(ContactBookError):
    """
    Raised when client input is well-formed JSON but unusable.

    Schema-level problems (wrong types, missing fields) are caught earlier by
    FastAPI and answered with 422. This covers the rest, e.g. an update body
    that carries no known field.
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class NotFoundError(ContactBookError):
    """
    Raised when a requested resource does not exist.

    The store returns None for missing documents; services convert that into
    NotFoundError so the route layer answers 404 instead of an empty body.
    """

    def __init__(
        self,
        resource: str = "resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"The requested {resource} was not found"
        if resource_id:
            message = f"{resource} with ID '{resource_id}' was not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)
        self.resource = resource
        self.resource_id = resource_id


class DatabaseError(ContactBookError):
    """
    Raised when a document store operation fails.

    The message returned to the client is always generic. Driver messages,
    statements and table names stay in the server log.
    """

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class StoreUnavailableError(DatabaseError):
    """
    Raised when the document store cannot be reached at all.

    Connection refused, pool exhausted, store never opened. Answered with 503
    so clients can tell an outage apart from a failing query.
    """

    def __init__(
        self,
        message: str = "The data store is temporarily unavailable. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class ResourceRequestError(ContactBookError):
    """
    Raised by the client resource binding when a request fails.

    "No data" (404 on a singular action) is NOT an error: the binding returns
    None for it. Everything else lands here: transport errors, timeouts and
    non-2xx statuses.
    """

    def __init__(
        self,
        message: str = "The request to the server failed",
        status_code: Optional[int] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if status_code is not None:
            ctx["status_code"] = status_code
        super().__init__(message=message, context=ctx)
        self.status_code = status_code


class ClientRoutingError(ContactBookError):
    """Raised when a client path cannot be resolved, even after the default redirect."""

    def __init__(
        self,
        path: str,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["path"] = path
        super().__init__(message=f"No client route matches '{path}'", context=ctx)
        self.path = path

"""
CaseDesk Backend — Custom Exception Hierarchy
===============================================

What:  Defines application-specific exceptions for different error scenarios.
How:   Each exception class carries a message and optional context dict.
       Global exception handlers (registered in main.py) catch these and
       return the `{status, message}` envelope with the right HTTP status code.
Who:   Raised by services; caught by global handlers.

Exception Hierarchy:
    CaseDeskError (base)
    ├── ValidationError   → 400 Bad Request (missing/invalid fields)
    ├── ConflictError     → 400 Bad Request (duplicate unique key)
    ├── NotFoundError     → 404 Not Found
    └── DatabaseError     → 500 Internal Server Error (generic message only)
"""

from typing import Any, Dict, List, Optional


class CaseDeskError(Exception):
    """
    Base exception for all CaseDesk application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    status_code = 500

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(CaseDeskError):
    """
    Raised when client input fails validation.

    When:    Missing required fields, blank values, enum violations,
             malformed request bodies or query parameters.
    HTTP:    400 Bad Request

    `fields` lists every offending field so a client can fix all of them
    from a single response.
    """

    status_code = 400

    def __init__(
        self,
        message: str = "Validation failed",
        fields: Optional[List[str]] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if fields:
            ctx["fields"] = list(fields)
        super().__init__(message=message, context=ctx)
        self.fields = list(fields or [])

    @classmethod
    def missing(cls, fields: List[str]) -> "ValidationError":
        return cls(
            message=f"Missing required fields: {', '.join(fields)}",
            fields=fields,
        )


class ConflictError(CaseDeskError):
    """
    Raised when a write would violate a uniqueness rule.

    When:    POST/PUT with a caseNumber that already exists; duplicate custom
             field id while ENFORCE_UNIQUE_CUSTOM_FIELD_IDS is on.
    HTTP:    400 Bad Request
    """

    status_code = 400

    def __init__(
        self,
        message: str = "Resource already exists",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)


class NotFoundError(CaseDeskError):
    """
    Raised when a requested resource does not exist.

    When:    GET/PUT/DELETE on an unknown or malformed identifier.
    HTTP:    404 Not Found
    """

    status_code = 404

    def __init__(
        self,
        resource: str = "Resource",
        resource_id: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        message = f"{resource} not found"
        ctx = context or {}
        ctx["resource"] = resource
        if resource_id:
            ctx["resource_id"] = resource_id
        super().__init__(message=message, context=ctx)


class DatabaseError(CaseDeskError):
    """
    Raised when database operations fail unexpectedly.

    When:    Connection lost mid-query, deadlock, driver error.
    HTTP:    500 Internal Server Error

    The message given here is logged; the client always receives a generic
    message from the global handler.
    """

    status_code = 500

    def __init__(
        self,
        message: str = "A database error occurred. Please try again later.",
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message=message, context=context)

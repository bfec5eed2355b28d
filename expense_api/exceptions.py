"""
Expense API — Custom Exception Hierarchy
==========================================

What:  Application-specific exceptions raised by the route layer.
Why:   Every remote failure is collapsed to an absent result inside the
       services. Routes turn that absent result into one of these exceptions,
       and the global handlers in main.py render a fixed response for each.
How:   Each exception carries a message and an optional context dict.
       The message is never the thing returned to the caller; the handlers
       return a static body so nothing about the failure leaks.

Exception Hierarchy:
    ExpenseApiError (base)             → 500 {"message": "Something went wrong"}
    ├── NotFoundError                  → 404 (empty body)
    ├── WorkspaceOperationError        → 500 {"message": "Something went wrong"}
    └── ExpenseSubmissionError         → 500 {"message": "Something went wrong"}

Callers cannot tell an invalid token from a missing database from a network
error. All of them produce the same status and body for a given route.
"""

from typing import Any, Dict, Optional

GENERIC_ERROR_MESSAGE = "Something went wrong"


class ExpenseApiError(Exception):
    """
    Base exception for all Expense API errors.

    Attributes:
        message:  Description for the server log
        context:  Additional debug info (logged, never returned to the client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class NotFoundError(ExpenseApiError):
    """
    Raised when a read route has nothing to return.

    When:    The database could not be resolved, the query failed, or a
             property value could not be fetched.
    HTTP:    404 with an empty body.
    """

    def __init__(
        self,
        resource: str = "resource",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["resource"] = resource
        super().__init__(message=f"The requested {resource} was not found", context=ctx)
        self.resource = resource


class WorkspaceOperationError(ExpenseApiError):
    """
    Raised when a write against the workspace did not produce a result.

    When:    Archive, complete, or create returned nothing (remote rejection,
             auth failure, unresolved database, no matching balance period).
    HTTP:    500 {"message": "Something went wrong"}
    """

    def __init__(
        self,
        operation: str = "operation",
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        ctx["operation"] = operation
        super().__init__(message=f"Workspace {operation} failed", context=ctx)
        self.operation = operation


class ExpenseSubmissionError(ExpenseApiError):
    """
    Raised when a submitted expense form cannot be turned into a record.

    When:    A field is missing, the date does not parse, or the amount is
             not numeric. No remote call is made in that case.
    HTTP:    500 {"message": "Something went wrong"}
    """

    def __init__(
        self,
        message: str = "Invalid expense submission",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field

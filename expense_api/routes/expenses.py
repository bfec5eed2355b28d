"""
Expense API — Expense Route Handlers
======================================

What:  The five workspace-backed endpoints.
How:   Each handler gets a fresh WorkspaceClient for the caller's `token`
       query parameter, delegates to a service, and turns "no result" into
       an application exception. The global handlers in main.py render it.

Response mapping:
    Reads  (GET /expenses, GET /expected-balance)       no result → 404, empty body
    Writes (GET /expense, GET /complete-expense,
            POST /expense)                              no result → 500 {message}

Archive lives on GET /expense and completion on GET /complete-expense
because that is what the deployed web client calls.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Form, Query
from pydantic import ValidationError as PydanticValidationError

from expense_api.exceptions import (
    ExpenseSubmissionError,
    NotFoundError,
    WorkspaceOperationError,
)
from expense_api.schemas.expense import (
    CreatedExpenseResponse,
    ExpectedBalanceResponse,
    ExpenseListResponse,
    ExpenseSubmission,
    MessageResponse,
)
from expense_api.services.balance_service import balance_service
from expense_api.services.expense_service import expense_service
from expense_api.services.workspace_client import WorkspaceClient, get_workspace_client

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Expenses"])

READ_FAILURE = {404: {"description": "Nothing could be read (empty body)"}}
WRITE_FAILURE = {500: {"description": "Workspace operation failed", "model": MessageResponse}}


@router.get(
    "/expenses",
    response_model=ExpenseListResponse,
    responses=READ_FAILURE,
    summary="List pending expenses that are due",
)
async def list_expenses(
    workspace: WorkspaceClient = Depends(get_workspace_client),
) -> ExpenseListResponse:
    """
    Pending expenses dated today or earlier, with full property values.

    An empty match gives `{"pages": []}`, not a 404.
    """
    pages = await expense_service.list_pending(workspace)
    if pages is None:
        raise NotFoundError(resource="expenses")
    return ExpenseListResponse(pages=pages)


@router.get(
    "/expected-balance",
    response_model=ExpectedBalanceResponse,
    responses=READ_FAILURE,
    summary="Expected balance for the current month",
)
async def get_expected_balance(
    workspace: WorkspaceClient = Depends(get_workspace_client),
) -> ExpectedBalanceResponse:
    balance = await balance_service.expected_balance(workspace)
    if balance is None:
        raise NotFoundError(resource="expected balance")
    return ExpectedBalanceResponse(**balance)


@router.get(
    "/expense",
    responses=WRITE_FAILURE,
    summary="Archive an expense",
)
async def archive_expense(
    page_id: Optional[str] = Query(default=None, description="Workspace page id of the expense"),
    workspace: WorkspaceClient = Depends(get_workspace_client),
) -> Dict[str, Any]:
    """
    Returns the archived page object exactly as the workspace sent it.

    A missing `page_id` fails like any other write (500), not with 422.
    """
    if not page_id:
        raise WorkspaceOperationError(operation="archive", context={"page_id": None})
    page = await expense_service.archive(workspace, page_id)
    if page is None:
        raise WorkspaceOperationError(operation="archive", context={"page_id": page_id})
    return page


@router.get(
    "/complete-expense",
    responses=WRITE_FAILURE,
    summary="Mark an expense complete",
)
async def complete_expense(
    page_id: Optional[str] = Query(default=None, description="Workspace page id of the expense"),
    workspace: WorkspaceClient = Depends(get_workspace_client),
) -> Dict[str, Any]:
    if not page_id:
        raise WorkspaceOperationError(operation="complete", context={"page_id": None})
    page = await expense_service.complete(workspace, page_id)
    if page is None:
        raise WorkspaceOperationError(operation="complete", context={"page_id": page_id})
    return page


@router.post(
    "/expense",
    response_model=CreatedExpenseResponse,
    responses=WRITE_FAILURE,
    summary="Create an expense",
)
async def create_expense(
    description: Optional[str] = Form(default=None),
    date: Optional[str] = Form(default=None, description="ISO date, e.g. 2024-03-10"),
    amount: Optional[str] = Form(default=None),
    workspace: WorkspaceClient = Depends(get_workspace_client),
) -> CreatedExpenseResponse:
    """
    Create a Pending expense related to the balance periods of its date.

    Form fields are optional at the HTTP level so that a missing or invalid
    field produces the same 500 as every other failure of this route.
    """
    fields = {"description": description, "date": date, "amount": amount}
    missing = [name for name, value in fields.items() if value is None]
    if missing:
        raise ExpenseSubmissionError(
            message="Missing expense field(s): " + ", ".join(missing),
            field=missing[0],
        )

    try:
        submission = ExpenseSubmission(**fields)
    except PydanticValidationError as e:
        raise ExpenseSubmissionError(
            message="Invalid expense submission",
            context={"errors": [err.get("msg") for err in e.errors()]},
        )

    page_id = await expense_service.create(workspace, submission)
    if page_id is None:
        raise WorkspaceOperationError(operation="create")
    return CreatedExpenseResponse(id=page_id)

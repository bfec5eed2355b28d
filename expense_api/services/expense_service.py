"""
Expense API — Expense Service (Business Logic Orchestrator)
=============================================================

What:  Lists pending expenses and performs the three expense mutations.
Why:   Keeps every remote-call sequence out of the route handlers, so the
       routes only map "result" / "no result" to an HTTP response.
How:   Composes WorkspaceClient calls; uses BalanceService for relations.
Who:   Called by the expense routes.

Orchestration Flow (GET /expenses):
    resolve "Expenses" → query (Pending, Date <= today)
        → for each record, for each tracked property:
              pages.properties.retrieve → extract scalar
        → [ExpenseItem, ...]

Orchestration Flow (POST /expense):
    resolve "Expenses" → match balance periods → pages.create

Remote calls inside a request are awaited one after another, so listing
cost grows with (matching records × tracked properties).
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from expense_api.config import settings
from expense_api.schemas.expense import ExpenseItem, ExpenseSubmission
from expense_api.services.balance_service import balance_service
from expense_api.services.properties import EXPENSE_PROPERTY_EXTRACTORS
from expense_api.services.workspace_client import WorkspaceClient

logger = logging.getLogger(__name__)

# Maps workspace property names onto ExpenseItem attributes.
ITEM_FIELDS = {"Description": "description", "Date": "date", "Amount": "amount"}


def pending_expenses_filter(today: date) -> Dict[str, Any]:
    """Status == Pending AND Date on or before `today` (calendar date)."""
    return {
        "and": [
            {"property": "Status", "select": {"equals": settings.pending_status}},
            {"property": "Date", "date": {"on_or_before": today.isoformat()}},
        ]
    }


class ExpenseService:
    """
    Business logic for expense records.

    Responsibilities:
        - list_pending(): due, still-pending expenses with full values
        - archive():      archive one expense page
        - complete():     move one expense to the complete status
        - create():       add an expense related to its balance periods

    Every method returns None when it could not produce a result; the
    reason has already been logged by the workspace client.
    """

    async def list_pending(
        self,
        workspace: WorkspaceClient,
        today: Optional[date] = None,
    ) -> Optional[List[ExpenseItem]]:
        """
        Pending expenses dated on or before today.

        Returns:
            A list of ExpenseItem (empty when nothing matches), or None if
            the database could not be resolved, the query failed, or any
            property value could not be fetched.
        """
        today = today or date.today()

        database_id = await workspace.resolve_database_id(settings.expenses_database_name)
        if not database_id:
            return None

        records = await workspace.query_database(database_id, pending_expenses_filter(today))
        if records is None:
            return None

        pages: List[ExpenseItem] = []
        for record in records:
            item = await self._load_expense(workspace, record)
            if item is None:
                return None
            pages.append(item)

        logger.info("Listed %d pending expense(s) due by %s", len(pages), today.isoformat())
        return pages

    async def _load_expense(
        self,
        workspace: WorkspaceClient,
        record: Dict[str, Any],
    ) -> Optional[ExpenseItem]:
        """Fetch and extract each tracked property of one record, one call at a time."""
        fields: Dict[str, Any] = {}
        for name, preview in (record.get("properties") or {}).items():
            extractor = EXPENSE_PROPERTY_EXTRACTORS.get(name)
            if extractor is None:
                continue

            property_id = (preview or {}).get("id")
            if not property_id:
                logger.warning("Expense %s property %s has no id", record.get("id"), name)
                return None

            value = await workspace.retrieve_property(record["id"], property_id)
            if value is None:
                return None
            fields[ITEM_FIELDS[name]] = extractor(value)

        return ExpenseItem(id=record["id"], **fields)

    async def archive(
        self,
        workspace: WorkspaceClient,
        page_id: str,
    ) -> Optional[Dict[str, Any]]:
        """Archive an expense. Repeating it on an archived page behaves the same way."""
        return await workspace.update_page(page_id, archived=True)

    async def complete(
        self,
        workspace: WorkspaceClient,
        page_id: str,
    ) -> Optional[Dict[str, Any]]:
        """Set Status to the complete status; no other property is sent."""
        return await workspace.update_page(
            page_id,
            properties={"Status": {"select": {"name": settings.complete_status}}},
        )

    async def create(
        self,
        workspace: WorkspaceClient,
        submission: ExpenseSubmission,
    ) -> Optional[str]:
        """
        Create an expense related to the balance periods of its date.

        Card and Status come from settings, never from the request.

        Returns:
            The new page id, or None when the Expenses database could not be
            resolved, no balance period matched (nothing is created), or the
            create call failed.
        """
        database_id = await workspace.resolve_database_id(settings.expenses_database_name)
        if not database_id:
            return None

        relations = await balance_service.match_balance_relations(workspace, submission.date)
        if not relations:
            logger.warning("No balance period matches %s; expense not created", submission.date)
            return None

        response = await workspace.create_page(
            database_id,
            submission.to_properties(
                relations,
                card=settings.default_card,
                status=settings.pending_status,
            ),
        )
        if response is None:
            return None

        logger.info("Created expense %s with %d balance relation(s)", response.get("id"), len(relations))
        return response.get("id")


# ── Singleton Instance ────────────────────────────────────────────────────
# Stateless; the per-request state lives in the WorkspaceClient argument
expense_service = ExpenseService()

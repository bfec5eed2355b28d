"""
Expense API — Balance Service
===============================

What:  Reads the Balance database: this month's expected balance, and the
       balance periods a new expense should be related to.
Why:   Balance records are keyed by a `Time Period` title that is either a
       month name ("March") or a year ("2024"). Both readers are just a
       filtered query on that title.
Who:   Called by the expected-balance route and by ExpenseService.create().

Failure Policy:
    expected_balance() returns None on any failure.
    match_balance_relations() returns [] on any failure, which the creator
    treats the same as "no matching period".
"""

import logging
from datetime import date
from typing import Any, Dict, List, Optional

from expense_api.config import settings
from expense_api.services.properties import extract_formula_number
from expense_api.services.workspace_client import WorkspaceClient

logger = logging.getLogger(__name__)

TIME_PERIOD_PROPERTY = "Time Period"
EXPECTED_BALANCE_PROPERTY = "Expected Balance"


# Balance titles are English whatever the server locale is
MONTH_NAMES = (
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
)


def month_name(day: date) -> str:
    """Full English month name, e.g. 'March'."""
    return MONTH_NAMES[day.month - 1]


def time_period_equals(title: str) -> Dict[str, Any]:
    return {"property": TIME_PERIOD_PROPERTY, "title": {"equals": title}}


class BalanceService:
    """Stateless reader over the Balance database."""

    async def expected_balance(
        self,
        workspace: WorkspaceClient,
        today: Optional[date] = None,
    ) -> Optional[Dict[str, Any]]:
        """
        Expected balance for the current calendar month.

        Steps:
            1. Resolve the Balance database
            2. Query for the record titled with this month's name
            3. Fetch the full Expected Balance formula value of that record

        Returns:
            The Expected Balance property preview with `value` set to the
            formula's number, or None if any step produced nothing.
        """
        today = today or date.today()

        database_id = await workspace.resolve_database_id(settings.balance_database_name)
        if not database_id:
            return None

        results = await workspace.query_database(
            database_id,
            {"and": [time_period_equals(month_name(today))]},
        )
        if not results:
            logger.info("No balance record for %s", month_name(today))
            return None

        record = results[0]
        preview = (record.get("properties") or {}).get(EXPECTED_BALANCE_PROPERTY)
        if not preview or not preview.get("id"):
            logger.warning("Balance record %s has no %s property", record.get("id"), EXPECTED_BALANCE_PROPERTY)
            return None

        value = await workspace.retrieve_property(record["id"], preview["id"])
        if value is None:
            return None

        return {**preview, "value": extract_formula_number(value)}

    async def match_balance_relations(
        self,
        workspace: WorkspaceClient,
        date_str: str,
    ) -> List[Dict[str, str]]:
        """
        Relation entries for every balance period covering `date_str`.

        A record matches when its Time Period equals the month name OR the
        year of the date. "2024-03-10" looks for "March" and "2024".

        Returns:
            [{"id": <balance page id>}, ...], possibly empty.
        """
        try:
            day = date.fromisoformat(date_str[:10])
        except (TypeError, ValueError):
            logger.warning("Cannot match balance periods for date %r", date_str)
            return []

        database_id = await workspace.resolve_database_id(settings.balance_database_name)
        if not database_id:
            return []

        results = await workspace.query_database(
            database_id,
            {
                "or": [
                    time_period_equals(month_name(day)),
                    time_period_equals(str(day.year)),
                ]
            },
        )
        return [{"id": entry["id"]} for entry in results or [] if entry.get("id")]


# ── Singleton Instance ────────────────────────────────────────────────────
balance_service = BalanceService()

"""
Expense API — Expense Service Unit Tests
==========================================

What:  Tests for ExpenseService (list pending, archive, complete, create).
How:   WorkspaceClient wraps a mocked SDK client; no network calls.

What we test:
    ✅ Unresolved database / failed query / failed property fetch → None
    ✅ Zero matches → empty list
    ✅ Tracked properties fetched one by one and reduced to scalars
    ✅ Complete sends only Status; archive is repeatable
    ✅ Create relates balance periods and refuses when none match
"""

from datetime import date

import httpx
import pytest
from notion_client.errors import RequestTimeoutError

from expense_api.schemas.expense import ExpenseSubmission
from expense_api.services.expense_service import ExpenseService, pending_expenses_filter

from conftest import AMOUNT_ID, DATE_ID, DESCRIPTION_ID


def queries_by_database(notion, results_by_db):
    notion.databases.query.side_effect = (
        lambda **kwargs: {"results": results_by_db.get(kwargs["database_id"], [])}
    )


class TestListPending:

    def setup_method(self):
        self.service = ExpenseService()

    @pytest.mark.asyncio
    async def test_unresolved_database(self, workspace, notion):
        assert await self.service.list_pending(workspace) is None
        notion.databases.query.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_zero_matches_is_empty_list(self, workspace, databases_found):
        result = await self.service.list_pending(workspace)

        assert result == []

    @pytest.mark.asyncio
    async def test_query_filter(self, workspace, databases_found):
        await self.service.list_pending(workspace, today=date(2024, 3, 20))

        kwargs = databases_found.databases.query.call_args.kwargs
        assert kwargs["database_id"] == "db-expenses"
        assert kwargs["filter"] == {
            "and": [
                {"property": "Status", "select": {"equals": "Pending"}},
                {"property": "Date", "date": {"on_or_before": "2024-03-20"}},
            ]
        }

    @pytest.mark.asyncio
    async def test_record_is_flattened(self, workspace, databases_found, retrieve_by_property_id, expense_page):
        databases_found.databases.query.return_value = {"results": [expense_page("exp-1")]}

        pages = await self.service.list_pending(workspace)

        assert len(pages) == 1
        item = pages[0]
        assert item.id == "exp-1"
        assert item.description == "Groceries"
        assert item.date == date(2024, 3, 15)
        assert item.amount == 42.5

    @pytest.mark.asyncio
    async def test_only_tracked_properties_are_fetched(self, workspace, databases_found, retrieve_by_property_id, expense_page):
        databases_found.databases.query.return_value = {"results": [expense_page()]}

        await self.service.list_pending(workspace)

        fetched = [
            call.kwargs["property_id"]
            for call in retrieve_by_property_id.pages.properties.retrieve.call_args_list
        ]
        assert sorted(fetched) == sorted([DESCRIPTION_ID, DATE_ID, AMOUNT_ID])

    @pytest.mark.asyncio
    async def test_order_is_preserved(self, workspace, databases_found, retrieve_by_property_id, expense_page):
        databases_found.databases.query.return_value = {
            "results": [expense_page("exp-b"), expense_page("exp-a"), expense_page("exp-c")]
        }

        pages = await self.service.list_pending(workspace)

        assert [p.id for p in pages] == ["exp-b", "exp-a", "exp-c"]

    @pytest.mark.asyncio
    async def test_missing_tracked_property_is_none(self, workspace, databases_found, retrieve_by_property_id, expense_page):
        page = expense_page()
        del page["properties"]["Amount"]
        databases_found.databases.query.return_value = {"results": [page]}

        pages = await self.service.list_pending(workspace)

        assert pages[0].amount is None
        assert pages[0].description == "Groceries"

    @pytest.mark.asyncio
    async def test_property_fetch_failure(self, workspace, databases_found, expense_page):
        databases_found.databases.query.return_value = {"results": [expense_page()]}
        databases_found.pages.properties.retrieve.side_effect = RequestTimeoutError()

        assert await self.service.list_pending(workspace) is None

    @pytest.mark.asyncio
    async def test_query_failure(self, workspace, databases_found):
        databases_found.databases.query.side_effect = httpx.ReadError("reset")

        assert await self.service.list_pending(workspace) is None


class TestMutations:

    def setup_method(self):
        self.service = ExpenseService()

    @pytest.mark.asyncio
    async def test_complete_sets_only_status(self, workspace, notion):
        notion.pages.update.return_value = {"id": "exp-1", "object": "page"}

        result = await self.service.complete(workspace, "exp-1")

        assert result == {"id": "exp-1", "object": "page"}
        notion.pages.update.assert_awaited_once_with(
            page_id="exp-1",
            properties={"Status": {"select": {"name": "Complete"}}},
        )

    @pytest.mark.asyncio
    async def test_archive_twice_behaves_the_same(self, workspace, notion):
        notion.pages.update.return_value = {"id": "exp-1", "archived": True}

        first = await self.service.archive(workspace, "exp-1")
        second = await self.service.archive(workspace, "exp-1")

        assert first == second == {"id": "exp-1", "archived": True}
        assert notion.pages.update.await_count == 2
        for call in notion.pages.update.await_args_list:
            assert call.kwargs == {"page_id": "exp-1", "archived": True}


class TestCreate:

    def setup_method(self):
        self.service = ExpenseService()
        self.submission = ExpenseSubmission(
            description="Coffee beans",
            date="2024-03-10",
            amount="18.75",
        )

    @pytest.mark.asyncio
    async def test_create_success(self, workspace, databases_found, balance_page):
        queries_by_database(databases_found, {
            "db-balance": [balance_page("bal-march", "March"), balance_page("bal-2024", "2024")],
        })
        databases_found.pages.create.return_value = {"id": "new-expense"}

        page_id = await self.service.create(workspace, self.submission)

        assert page_id == "new-expense"
        kwargs = databases_found.pages.create.call_args.kwargs
        assert kwargs["parent"] == {"type": "database_id", "database_id": "db-expenses"}
        properties = kwargs["properties"]
        assert properties["Description"] == {"title": [{"text": {"content": "Coffee beans"}}]}
        assert properties["Date"] == {"date": {"start": "2024-03-10"}}
        assert properties["Amount"] == {"number": 18}
        assert properties["Balance"] == {"relation": [{"id": "bal-march"}, {"id": "bal-2024"}]}
        assert properties["Card"] == {"select": {"name": "Discover it"}}
        assert properties["Status"] == {"select": {"name": "Pending"}}

    @pytest.mark.asyncio
    async def test_no_balance_period_creates_nothing(self, workspace, databases_found):
        queries_by_database(databases_found, {})

        assert await self.service.create(workspace, self.submission) is None
        databases_found.pages.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unresolved_expenses_database(self, workspace, notion):
        assert await self.service.create(workspace, self.submission) is None
        notion.pages.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_create_rejected(self, workspace, databases_found, balance_page):
        queries_by_database(databases_found, {"db-balance": [balance_page()]})
        databases_found.pages.create.side_effect = httpx.ConnectTimeout("slow")

        assert await self.service.create(workspace, self.submission) is None


def test_pending_filter_uses_calendar_date():
    f = pending_expenses_filter(date(2024, 12, 31))
    assert f["and"][1]["date"]["on_or_before"] == "2024-12-31"

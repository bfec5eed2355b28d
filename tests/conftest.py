"""
Expense API — Test Configuration (conftest.py)
================================================

What:  Shared pytest fixtures for the entire test suite.
Why:   Every test talks to a mocked Notion SDK client; no network needed.

Fixture Hierarchy:
    ├── notion:          MagicMock standing in for notion_client.AsyncClient
    ├── workspace:       WorkspaceClient wrapping `notion`
    ├── expense_page:    Factory for expense page dicts as databases.query returns them
    ├── balance_page:    Factory for balance page dicts
    ├── property_values: Full property values keyed by property id
    └── test_client:     HTTPX AsyncClient against the app, SDK patched to `notion`
"""

import os
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

# Override settings for testing BEFORE any app imports
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["RETRY_MAX_ATTEMPTS"] = "1"

from expense_api.services.workspace_client import WorkspaceClient  # noqa: E402


DESCRIPTION_ID = "title"
DATE_ID = "d%3Ab%7C"
AMOUNT_ID = "Am%5Dt"
EXPECTED_BALANCE_ID = "xB%3Fa"


@pytest.fixture
def notion():
    """
    Mock of notion_client.AsyncClient.

    Defaults: search finds nothing, queries return no pages. Tests override
    return_value / side_effect per call they care about.
    """
    client = MagicMock()
    client.search = AsyncMock(return_value={"object": "list", "results": []})
    client.databases.query = AsyncMock(return_value={"object": "list", "results": []})
    client.pages.properties.retrieve = AsyncMock()
    client.pages.update = AsyncMock()
    client.pages.create = AsyncMock()
    return client


@pytest.fixture
def workspace(notion):
    return WorkspaceClient(token="secret_test_token", client=notion)


@pytest.fixture
def databases_found(notion):
    """Make every database search resolve to 'db-<name lowercased>'."""

    def search(**kwargs):
        return {
            "object": "list",
            "results": [{"object": "database", "id": f"db-{kwargs['query'].lower()}"}],
        }

    notion.search.side_effect = search
    return notion


@pytest.fixture
def expense_page():
    """Builds an expense page as it appears in a databases.query result."""

    def build(page_id: str = "exp-1", extra_properties=None):
        properties = {
            "Status": {"id": "St%40t", "type": "select", "select": {"name": "Pending"}},
            "Description": {"id": DESCRIPTION_ID, "type": "title", "title": []},
            "Date": {"id": DATE_ID, "type": "date", "date": {"start": "2024-03-15"}},
            "Amount": {"id": AMOUNT_ID, "type": "number", "number": None},
            "Card": {"id": "C%7Cd", "type": "select", "select": {"name": "Discover it"}},
            "Balance": {"id": "B%3Dl", "type": "relation", "relation": [], "has_more": False},
        }
        properties.update(extra_properties or {})
        return {"object": "page", "id": page_id, "archived": False, "properties": properties}

    return build


@pytest.fixture
def balance_page():
    def build(page_id: str = "bal-march", period: str = "March"):
        return {
            "object": "page",
            "id": page_id,
            "properties": {
                "Time Period": {"id": "title", "type": "title", "title": [{"plain_text": period}]},
                "Expected Balance": {
                    "id": EXPECTED_BALANCE_ID,
                    "type": "formula",
                    "formula": {"type": "number", "number": None},
                },
            },
        }

    return build


@pytest.fixture
def property_values():
    """Full values returned by pages.properties.retrieve, keyed by property id."""
    return {
        DESCRIPTION_ID: {
            "object": "list",
            "type": "property_item",
            "results": [
                {
                    "object": "property_item",
                    "type": "title",
                    "title": {
                        "type": "text",
                        "text": {"content": "Groceries", "link": None},
                        "plain_text": "Groceries",
                    },
                }
            ],
            "has_more": False,
        },
        DATE_ID: {
            "object": "property_item",
            "type": "date",
            "date": {"start": "2024-03-15", "end": None, "time_zone": None},
        },
        AMOUNT_ID: {"object": "property_item", "type": "number", "number": 42.5},
        EXPECTED_BALANCE_ID: {
            "object": "property_item",
            "type": "formula",
            "formula": {"type": "number", "number": 1250.75},
        },
    }


@pytest.fixture
def retrieve_by_property_id(notion, property_values):
    """Serve pages.properties.retrieve from `property_values`."""
    notion.pages.properties.retrieve.side_effect = (
        lambda **kwargs: property_values[kwargs["property_id"]]
    )
    return notion


@pytest_asyncio.fixture
async def test_client(notion):
    """
    HTTPX AsyncClient talking to the FastAPI app through ASGITransport.

    The SDK class is patched so every per-request WorkspaceClient wraps
    the `notion` mock.
    """
    from expense_api.main import app

    with patch(
        "expense_api.services.workspace_client.AsyncClient",
        return_value=notion,
    ):
        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client

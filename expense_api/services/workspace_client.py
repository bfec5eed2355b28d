"""
Expense API — Workspace (Notion) Client
=========================================

What:  Thin wrapper around notion_client.AsyncClient used by every service.
Why:   The remote API is the only collaborator this service has. Wrapping it
       in one place gives every call the same retry policy, the same timing
       log, and the same failure policy.
How:   Each public method performs exactly one remote call (plus tenacity
       retries on transient transport errors) and returns the response dict,
       or None if the call failed for any reason.
Who:   Built per request by the get_workspace_client dependency.
When:  For every remote call made while serving a request.

Failure Policy:
    Network errors, auth failures, not-found responses and validation
    rejections are all caught here and collapsed to None. The reason is
    logged server-side at WARNING; nothing distinguishing reaches the caller.

Per-request Lifecycle:
    The token arrives as a query parameter, so a client is built for every
    request and dropped when the request ends. Nothing is shared between
    requests, which is why there is no circuit breaker or cache here.
"""

import logging
import time
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx
from fastapi import Query
from notion_client import AsyncClient
from notion_client.errors import HTTPResponseError, RequestTimeoutError
from tenacity import (
    before_sleep_log,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)

from expense_api.config import settings
from expense_api.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)

# Everything the SDK raises for a failed call. APIResponseError subclasses
# HTTPResponseError; transport problems surface as httpx errors.
REMOTE_ERRORS = (HTTPResponseError, RequestTimeoutError, httpx.HTTPError)

# Worth retrying: the request may not have reached the API at all.
TRANSIENT_ERRORS = (RequestTimeoutError, httpx.TransportError)

DATABASE_SEARCH_FILTER = {"property": "object", "value": "database"}


class WorkspaceClient:
    """
    One authenticated session against the workspace-database API.

    Methods mirror the remote operations the service needs:
        search            → resolve_database_id()
        databases.query   → query_database()
        pages.properties  → retrieve_property()
        pages.update      → update_page()
        pages.create      → create_page()
    """

    def __init__(self, token: Optional[str], client: Optional[AsyncClient] = None):
        """
        Args:
            token:  Bearer token supplied by the caller (may be None; the
                    remote API then rejects every call).
            client: Pre-built SDK client, used by tests.
        """
        self._client = client or AsyncClient(
            auth=token,
            timeout_ms=settings.notion_timeout_ms,
            notion_version=settings.notion_version,
        )

    # ── Remote Operations ─────────────────────────────────────────────────

    async def resolve_database_id(self, name: str) -> Optional[str]:
        """
        Find the id of the first database whose title matches `name`.

        No disambiguation: when several databases share a name, the first
        search result wins. Returns None when nothing matched or the search
        call failed.
        """
        response = await self._call(
            "search",
            self._client.search,
            query=name,
            filter=DATABASE_SEARCH_FILTER,
        )
        results = (response or {}).get("results") or []
        if not results:
            logger.info("No database named %r could be resolved", name)
            return None
        return results[0].get("id")

    async def query_database(
        self, database_id: str, filter: Dict[str, Any]
    ) -> Optional[List[Dict[str, Any]]]:
        """Run a filtered query. Returns the result pages, or None on failure."""
        response = await self._call(
            "databases.query",
            self._client.databases.query,
            database_id=database_id,
            filter=filter,
        )
        if response is None:
            return None
        return response.get("results") or []

    async def retrieve_property(
        self, page_id: str, property_id: str
    ) -> Optional[Dict[str, Any]]:
        """Fetch the full value of one page property by its id."""
        return await self._call(
            "pages.properties.retrieve",
            self._client.pages.properties.retrieve,
            page_id=page_id,
            property_id=property_id,
        )

    async def update_page(self, page_id: str, **fields: Any) -> Optional[Dict[str, Any]]:
        """Update a page (archive flag and/or properties)."""
        return await self._call(
            "pages.update",
            self._client.pages.update,
            page_id=page_id,
            **fields,
        )

    async def create_page(
        self, database_id: str, properties: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        """Create a page inside a database."""
        return await self._call(
            "pages.create",
            self._client.pages.create,
            parent={"type": "database_id", "database_id": database_id},
            properties=properties,
        )

    # ── Call Plumbing ─────────────────────────────────────────────────────

    async def _call(
        self,
        operation: str,
        method: Callable[..., Awaitable[Dict[str, Any]]],
        **kwargs: Any,
    ) -> Optional[Dict[str, Any]]:
        """
        Perform one remote call and collapse any failure to None.

        Every outcome is logged with the operation name, the duration and
        the request id. Tokens and request bodies are never logged.
        """
        rid = request_id_var.get("")
        start_time = time.perf_counter()

        try:
            response = await self._call_with_retry(method, **kwargs)
        except REMOTE_ERRORS as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            logger.warning(
                "[%s] Workspace %s failed after %.0fms: %s: %s",
                rid,
                operation,
                duration_ms,
                type(e).__name__,
                str(e),
            )
            return None

        duration_ms = (time.perf_counter() - start_time) * 1000
        logger.debug("[%s] Workspace %s completed in %.0fms", rid, operation, duration_ms)
        return response

    @retry(
        retry=retry_if_exception_type(TRANSIENT_ERRORS),
        stop=stop_after_attempt(settings.retry_max_attempts),
        wait=wait_exponential_jitter(
            initial=settings.retry_min_wait,
            max=settings.retry_max_wait,
            jitter=1,
        ),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _call_with_retry(
        self,
        method: Callable[..., Awaitable[Dict[str, Any]]],
        **kwargs: Any,
    ) -> Dict[str, Any]:
        # Kept separate from _call so the timing log covers all attempts
        return await method(**kwargs)


def get_workspace_client(
    token: Optional[str] = Query(
        default=None,
        description="Workspace integration token, forwarded to the remote API as-is.",
    ),
) -> WorkspaceClient:
    """FastAPI dependency: a fresh client for the token on this request."""
    return WorkspaceClient(token)

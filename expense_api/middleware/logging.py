"""
Expense API — Request Logging Middleware
==========================================

What:  One access-log line per HTTP request.
How:   Logs once the response is ready. The level follows the status
       (5xx ERROR, 4xx WARNING).

The query string is never logged as a whole: `token` is the caller's
workspace credential. The line records only whether a token was sent, plus
the `page_id` of archive/complete calls so a failed write can be traced to
its record. Form bodies (descriptions, amounts) are not logged either.
"""

import logging
import time
from typing import Any, Dict

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from expense_api.middleware.request_id import request_id_var

logger = logging.getLogger("expense_api.access")

# Query parameters that are safe to copy into the log line
LOGGED_QUERY_PARAMS = ("page_id",)


def status_log_level(status: int) -> int:
    if status >= 500:
        return logging.ERROR
    if status >= 400:
        return logging.WARNING
    return logging.INFO


def workspace_fields(request: Request) -> Dict[str, Any]:
    """Token presence and the loggable query parameters of a request."""
    params = request.query_params
    fields: Dict[str, Any] = {"token_sent": bool(params.get("token"))}
    for name in LOGGED_QUERY_PARAMS:
        if name in params:
            fields[name] = params[name]
    return fields


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs each request with its status, duration and request ID.

    Duration is dominated by the sequential workspace calls made by the
    expense routes (up to one per tracked property per record on a listing).
    """

    SILENT_PATHS = {"/health"}

    async def dispatch(
        self, request: Request, call_next: RequestResponseEndpoint
    ) -> Response:
        path = request.url.path
        if path in self.SILENT_PATHS:
            return await call_next(request)

        start_time = time.perf_counter()
        response = await call_next(request)
        duration_ms = (time.perf_counter() - start_time) * 1000

        rid = request_id_var.get("")
        fields = workspace_fields(request)
        target = f" page={fields['page_id']}" if "page_id" in fields else ""

        logger.log(
            status_log_level(response.status_code),
            "%s %s%s %d %.1fms [%s] token=%s",
            request.method,
            path,
            target,
            response.status_code,
            duration_ms,
            rid,
            "yes" if fields["token_sent"] else "no",
            extra={
                "request_id": rid,
                "method": request.method,
                "path": path,
                "status": response.status_code,
                "duration_ms": round(duration_ms, 2),
                **fields,
            },
        )

        return response

"""
Expense API — Home and Health Routes
======================================

What:  GET / (HTML greeting) and GET /health (liveness).
Why:   The greeting is what a browser sees at the root URL; /health is what
       a process supervisor or load balancer polls.

Health Check Philosophy:
    The service holds no credentials of its own (every request brings its
    token), so there is no dependency it could probe on its own behalf.
    If the process answers, it is healthy.
"""

import time

from fastapi import APIRouter
from fastapi.responses import HTMLResponse

from expense_api import __version__
from expense_api.schemas.expense import HealthResponse

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get("/", response_class=HTMLResponse, summary="Greeting")
async def home() -> str:
    return "<h1>Hello World!</h1>"


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check() -> HealthResponse:
    return HealthResponse(
        status="healthy",
        version=__version__,
        uptime_seconds=round(time.time() - _start_time, 2),
    )

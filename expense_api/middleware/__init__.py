# Middleware package init
"""
Expense API — Middleware Package
==================================

Middleware Chain (order matters!):
    Request → [Request ID] → [Logging] → [CORS] → Route Handler

    1. Request ID first so every later log line can carry it
    2. Logging measures the status and duration of the whole request
    3. CORS (FastAPI's CORSMiddleware) answers preflight requests for the
       single allow-listed web client origin
"""

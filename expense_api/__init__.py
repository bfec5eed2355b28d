"""
Expense API — Application Package
===================================

What: HTTP façade over a Notion workspace that tracks expenses against
      monthly and yearly balance periods.

Layers:

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← Remote-call sequences
    ├─────────────────────────────────────┤
    │           Schemas (Contract)        │  ← Pydantic request/response
    ├─────────────────────────────────────┤
    │     WorkspaceClient (Remote API)    │  ← notion_client, per request
    └─────────────────────────────────────┘

There is no persistence layer; the workspace is the only store.
"""

__version__ = "1.0.0"

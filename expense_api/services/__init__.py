# Services package init
"""
Expense API — Services Layer
==============================

What:  Business logic between the routes (HTTP) and the workspace API.
Why:   Routes handle HTTP; services own the remote-call sequences.

Service Inventory:
    - WorkspaceClient: One per request; wraps notion_client.AsyncClient
    - ExpenseService:  List pending expenses; archive, complete, create
    - BalanceService:  Expected balance; balance periods for a new expense
    - properties:      Extract scalars from full property values
"""

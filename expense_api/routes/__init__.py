# Routes package init
"""
Expense API — API Routes Package
==================================

Route Inventory:
    - health.py:    GET  /                   (HTML greeting)
                    GET  /health             (liveness)
    - expenses.py:  GET  /expenses           (pending expenses due by today)
                    GET  /expected-balance   (this month's expected balance)
                    GET  /expense            (archive an expense)
                    GET  /complete-expense   (mark an expense complete)
                    POST /expense            (create an expense)

Routes are THIN: read the token and parameters, call a service, map
"no result" to an exception.
"""

"""
Budgets Module

Money paid to teachers placed through vacancies, and refunds of it:
1. Payments, paid in full or partially with a remaining amount and due date
2. Refunds, each tied to one original payment unless an admin overrides
3. Totals of payments, refunds and the net amount

API Endpoints:
- /admin/budget/... - Admin only
"""

from .admin_router import router

__all__ = ["router"]

"""
Parent Requests Module

Tuition requests submitted by parents:
1. Public submission with a sequential application number
2. Admin status management and vacancy linking
3. Rejection counting (given up on after 5 rejections)
4. Marked done when a teacher is accepted on the linked vacancy

API Endpoints:
- POST /parent-requests - Submit a request
- /admin/parent-requests/... - Admin management
"""

from .router import router

__all__ = ["router"]

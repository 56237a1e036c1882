"""
Scheduled Calls Module

Follow-up phone calls admins plan with parents and teachers.

API Endpoints:
- /admin/scheduled-calls/... - Admin only
"""

from .admin_router import router

__all__ = ["router"]

"""
Notifications module - WebSocket stream of lifecycle events for admins.
"""

from .router import router

__all__ = ["router"]

"""
Teachers module - read-only view of teacher profiles.

Teacher accounts are created by the signup service; this API only reads
them to show applicants and to name teachers in notifications.
"""

from tutormatch.modules.teachers.models import UNKNOWN_TEACHER_NAME, Teacher

__all__ = ["Teacher", "UNKNOWN_TEACHER_NAME"]

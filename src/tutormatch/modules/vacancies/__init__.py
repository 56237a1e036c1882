"""
Vacancies Module

Teaching positions posted by admins and the teacher application lifecycle:
1. Teachers apply (at most 5 applications per vacancy, one per teacher)
2. Admins accept or reject applications
3. Accepting closes the vacancy, rejects the other pending applications and
   marks the linked parent request done

API Endpoints:
- GET /vacancies, /vacancies/featured, /vacancies/{id} - Public listings
- GET /vacancies/available, /vacancies/my-applications - Teacher views
- POST /vacancies/{id}/apply - Teacher applies
- /admin/vacancies/... - Admin management and application decisions

Background Jobs (via APScheduler):
- vacancies_reconcile_cascades: finishes acceptance cascades that failed
"""

from .jobs import register_vacancy_jobs
from .router import router

__all__ = ["router", "register_vacancy_jobs"]

from fastapi import APIRouter

from tutormatch.modules.budgets import router as budget_router
from tutormatch.modules.parent_requests import router as parent_requests_router
from tutormatch.modules.parent_requests.admin_router import router as admin_parent_requests_router
from tutormatch.modules.scheduled_calls import router as scheduled_calls_router
from tutormatch.modules.vacancies import router as vacancies_router
from tutormatch.modules.vacancies.admin_router import router as admin_vacancies_router

api_router = APIRouter()

api_router.include_router(vacancies_router, prefix="/vacancies", tags=["Vacancies"])

api_router.include_router(
    parent_requests_router, prefix="/parent-requests", tags=["Parent Requests"]
)

api_router.include_router(
    admin_vacancies_router,
    prefix="/admin/vacancies",
    tags=["Admin - Vacancies"],
)

api_router.include_router(
    admin_parent_requests_router,
    prefix="/admin/parent-requests",
    tags=["Admin - Parent Requests"],
)

api_router.include_router(
    budget_router,
    prefix="/admin/budget",
    tags=["Admin - Budget"],
)

api_router.include_router(
    scheduled_calls_router,
    prefix="/admin/scheduled-calls",
    tags=["Admin - Scheduled Calls"],
)

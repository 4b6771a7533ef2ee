"""V1 API router aggregation."""

from fastapi import APIRouter

from workhub.api.v1.accounts import router as accounts_router
from workhub.api.v1.auth import router as auth_router
from workhub.api.v1.boards import router as boards_router
from workhub.api.v1.employees import router as employees_router
from workhub.api.v1.files import router as files_router
from workhub.api.v1.projects import router as projects_router
from workhub.api.v1.task_states import router as task_states_router
from workhub.api.v1.tasks import router as tasks_router
from workhub.api.v1.tenants import router as tenants_router

v1_router = APIRouter(prefix="/v1")
v1_router.include_router(auth_router)
v1_router.include_router(accounts_router)
v1_router.include_router(tenants_router)
v1_router.include_router(employees_router)
v1_router.include_router(projects_router)
v1_router.include_router(boards_router)
v1_router.include_router(task_states_router)
v1_router.include_router(tasks_router)
v1_router.include_router(files_router)

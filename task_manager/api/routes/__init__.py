from fastapi import APIRouter
from task_manager.api.routes.session import router as session_router
from task_manager.api.routes.users import router as users_router
from task_manager.api.routes.statuses import router as statuses_router
from task_manager.api.routes.labels import router as labels_router
from task_manager.api.routes.tasks import router as tasks_router

# Create main router
app_router = APIRouter()

# Include routers
app_router.include_router(session_router)
app_router.include_router(users_router)
app_router.include_router(statuses_router)
app_router.include_router(labels_router)
app_router.include_router(tasks_router)

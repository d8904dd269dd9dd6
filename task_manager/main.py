import asyncio
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional
import os
from pathlib import Path

from fastapi import Depends, FastAPI, Request, status
from fastapi.responses import HTMLResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from alembic.config import Config
from alembic import command

from task_manager.db import init_db
from task_manager.core import get_settings
from task_manager.core.error_reporting import init_error_reporting, report_exception
from task_manager.core.flash import redirect_with_flash
from task_manager.core.middleware import RequestLoggingMiddleware
from task_manager.core.templating import render
from task_manager.api.dependencies.auth import NotAuthenticatedError, get_current_user
from task_manager.api.routes import app_router
from task_manager.models.user import User
from task_manager.logs.server_log import api_logger
from task_manager.logs.debug_log import debug_logger

# Get application settings
settings = get_settings()

ALEMBIC_INI = Path(__file__).parent.parent / "alembic.ini"


def run_migrations() -> None:
    alembic_cfg = Config(str(ALEMBIC_INI))
    alembic_cfg.set_main_option("sqlalchemy.url", settings.DATABASE_URL)
    command.upgrade(alembic_cfg, "head")


# Lifespan event handler
@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    init_error_reporting(settings)
    try:
        if settings.RUN_MIGRATIONS:
            # env.py запускает свой event loop, поэтому миграции идут в отдельном потоке
            await asyncio.to_thread(run_migrations)

        # Initialize database on startup
        await init_db()
        api_logger.info("Database migrations applied and initialized successfully")
    except Exception as e:
        api_logger.error(f"Error applying migrations: {e}")
        report_exception(e)
        raise

    yield


# Initialize FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="Task manager with statuses, labels and task filters",
    version="0.1.0",
    lifespan=lifespan,
)

# Add request logging middleware
app.add_middleware(RequestLoggingMiddleware)

# Include page routers
app.include_router(app_router)


@app.exception_handler(NotAuthenticatedError)
async def not_authenticated_handler(request: Request, exc: NotAuthenticatedError):
    api_logger.info(f"Anonymous access to {request.method} {request.url.path}")
    return redirect_with_flash("/session/new", "danger", "Access denied. Please sign in.")


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return render(
        request,
        "errors.html",
        {"status_code": exc.status_code, "detail": exc.detail},
        status_code=exc.status_code,
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    debug_logger.log_exception(f"Необработанная ошибка: {request.method} {request.url}")
    api_logger.error(f"Unhandled error on {request.method} {request.url}: {exc}")
    report_exception(exc, request)
    return HTMLResponse(
        "<h1>Internal Server Error</h1>",
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
    )


@app.get("/")
async def root(
    request: Request,
    current_user: Optional[User] = Depends(get_current_user),
):
    """Welcome page"""
    return render(request, "index.html")


if __name__ == "__main__":
    import uvicorn
    print("\033[1;36m" + "=" * 50 + "\033[0m")  # Cyan
    print("\033[1;36m" + "  Запуск менеджера задач" + "\033[0m")  # Cyan
    print("\033[1;36m" + "=" * 50 + "\033[0m")  # Cyan

    port = int(os.getenv("PORT", "8000"))
    api_logger.info(f"Сервер запускается на http://0.0.0.0:{port}")

    # Запускаем uvicorn с настройкой логирования
    uvicorn.run(
        "task_manager.main:app",
        host="0.0.0.0",
        port=port,
        reload=settings.DEBUG,
        log_level="info"
    )

import logging
import time
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, FastAPI, Request
from fastapi.staticfiles import StaticFiles

from academia.core.config import Settings, get_settings
from academia.core.errors import register_exception_handlers
from academia.core.logging_config import configure_logging
from academia.core.logging_middleware import LoggingMiddleware
from academia.db.database import Database
from academia.db.init_db import init_db
from academia.routers.ai import router as ai_router
from academia.routers.assignments import router as assignments_router
from academia.routers.auth import router as auth_router
from academia.routers.courses import router as courses_router
from academia.routers.enrollments import router as enrollments_router
from academia.routers.stats import router as stats_router
from academia.routers.submissions import router as submissions_router
from academia.schemas.health import HealthResponse
from academia.services.ai import AIService

logger = logging.getLogger(__name__)

health_router = APIRouter()


@health_router.get("/health", response_model=HealthResponse)
def health(request: Request):
    state = request.app.state
    return {
        "status": "healthy",
        "timestamp": datetime.now(timezone.utc),
        "uptime": round(time.monotonic() - state.started_at, 3),
        "environment": state.settings.ENVIRONMENT,
        "database": "ok" if state.database.ping() else "unavailable",
    }


def create_app(
    settings: Optional[Settings] = None,
    database: Optional[Database] = None,
    ai_service: Optional[AIService] = None,
) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(title="Academia Portal")

    app.state.settings = settings
    app.state.database = database or Database.from_settings(settings)
    app.state.ai_service = ai_service or AIService.from_settings(settings)
    app.state.started_at = time.monotonic()

    # Middleware
    app.add_middleware(LoggingMiddleware)
    register_exception_handlers(app)

    @app.on_event("startup")
    def on_startup():
        init_db(app.state.database)

    @app.on_event("shutdown")
    def on_shutdown():
        app.state.database.dispose()

    app.include_router(health_router, prefix="/api", tags=["health"])
    app.include_router(auth_router, prefix="/api", tags=["auth"])
    app.include_router(enrollments_router, prefix="/api", tags=["enrollments"])
    app.include_router(courses_router, prefix="/api", tags=["courses"])
    app.include_router(assignments_router, prefix="/api", tags=["assignments"])
    app.include_router(submissions_router, prefix="/api", tags=["submissions"])
    app.include_router(ai_router, prefix="/api", tags=["ai"])
    app.include_router(stats_router, prefix="/api", tags=["stats"])

    app.mount("/uploads", StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False), name="uploads")

    logger.info("Academia Portal configured (%s, %s database)", settings.ENVIRONMENT, app.state.database.type.value)
    return app

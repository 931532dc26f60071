"""
FastAPI application factory and configuration.
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.core.config import get_settings
from app.core.database import get_db_context, init_db
from app.core.errors import WorkspaceError, workspace_error_handler
from app.core.logging import setup_logging, get_logger
from app.core.scheduler import get_scheduler
from app.api import auth, users, channels, dms, messages, notifications, standup, health
from app.services.message_service import restore_pending_messages
from app.services.standup_service import restore_active_standups

ROUTERS = (
    auth.router,
    users.router,
    channels.router,
    dms.router,
    messages.router,
    standup.router,
    notifications.router,
    health.router,
)


def start_scheduler() -> None:
    """Start the job scheduler and re-arm jobs persisted before a restart."""
    scheduler = get_scheduler()
    with get_db_context() as db:
        restore_pending_messages(db, scheduler)
        restore_active_standups(db, scheduler)
    scheduler.start()


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger = get_logger(__name__)
    logger.info("Starting application...")

    init_db()

    if get_settings().scheduler_enabled:
        start_scheduler()
    else:
        logger.info("Scheduler disabled; deferred sends and standups will not fire")

    yield

    logger.info("Shutting down application...")
    get_scheduler().stop()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    setup_logging()
    logger = get_logger(__name__)

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        description="Workspace messaging backend: channels, DMs, reacts, mentions and notifications",
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # InputError -> 400, AuthError -> 403
    app.add_exception_handler(WorkspaceError, workspace_error_handler)

    for router in ROUTERS:
        app.include_router(router)

    logger.info(
        "Application created",
        extra={
            "extra_data": {
                "version": settings.app_version,
                "routes": len(app.routes),
                "scheduler_enabled": settings.scheduler_enabled,
            }
        }
    )
    return app


app = create_app()

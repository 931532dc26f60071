"""
Liveness and readiness probes.
"""
from typing import Dict, Tuple

from fastapi import APIRouter, Response

from app.core.config import get_settings
from app.core.database import check_db_connection
from app.core.logging import get_logger
from app.core.scheduler import get_scheduler
from app.schemas.common import HealthResponse

logger = get_logger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])


def _scheduler_check() -> Tuple[str, bool]:
    if not get_settings().scheduler_enabled:
        return "disabled", True
    if get_scheduler().running:
        return "running", True
    return "stopped", False


def _run_checks() -> Tuple[Dict[str, str], bool]:
    checks: Dict[str, str] = {}
    failed = []

    if check_db_connection():
        checks["database"] = "ok"
    else:
        checks["database"] = "failed"
        failed.append("database")

    if get_settings().is_secret_key_configured:
        checks["secret_key"] = "ok"
    else:
        checks["secret_key"] = "not configured"
        failed.append("secret_key")

    # Deferred sends and standups never fire without a running scheduler
    checks["scheduler"], scheduler_ok = _scheduler_check()
    if not scheduler_ok:
        failed.append("scheduler")

    if failed:
        logger.warning("Readiness check failed", extra={"extra_data": {"failed": failed}})
    return checks, not failed


@router.get(
    "/live",
    response_model=HealthResponse,
    summary="Liveness probe",
    description="Always returns 200 to indicate the service is alive."
)
async def liveness() -> HealthResponse:
    return HealthResponse(status="ok")


@router.get(
    "/ready",
    response_model=HealthResponse,
    summary="Readiness probe",
    description="Returns 200 once the database, secret key and scheduler are usable, 503 otherwise."
)
async def readiness(response: Response) -> HealthResponse:
    checks, is_ready = _run_checks()
    if is_ready:
        return HealthResponse(status="ok", checks=checks)
    response.status_code = 503
    return HealthResponse(status="not ready", checks=checks)

"""Health, readiness and metrics routes."""

from typing import Optional

from fastapi import APIRouter, Request
from fastapi.responses import Response
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST
from pydantic import BaseModel

from src.bot.command_loop import get_command_loop
from src.config import APP_VERSION, settings
from src.scheduler.job_scheduler import get_scheduler

router = APIRouter()


class HealthResponse(BaseModel):
    status: str  # "healthy" or "degraded"
    scheduler_running: bool
    command_loop: str  # "running", "stopped" or "disabled"
    observed: bool
    version: str
    message: str = "OK"


class VersionResponse(BaseModel):
    version: str
    build_date: Optional[str] = None
    git_commit: Optional[str] = None


def _monitor(request: Request):
    return getattr(request.app.state, "monitor", None)


def _command_loop_state(monitor) -> str:
    """A loop is expected only when the monitor has a bot client."""
    if monitor is None or monitor.notifier.client is None:
        return "disabled"
    loop = get_command_loop()
    if loop is not None and loop.running:
        return "running"
    return "stopped"


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request):
    """Health check endpoint for Docker/monitoring.

    Degraded when checks are no longer scheduled, or when a bot token is
    configured but the command loop has stopped answering.
    """
    monitor = _monitor(request)
    scheduler = get_scheduler()
    scheduler_running = scheduler is not None and scheduler.running
    loop_state = _command_loop_state(monitor)

    problems = []
    if not scheduler_running:
        problems.append("Scheduler not running")
    if loop_state == "stopped":
        problems.append("Command loop not running")

    return HealthResponse(
        status="degraded" if problems else "healthy",
        scheduler_running=scheduler_running,
        command_loop=loop_state,
        observed=bool(monitor and monitor.snapshot().observed),
        version=APP_VERSION,
        message="; ".join(problems) or "OK",
    )


@router.get("/ready")
async def readiness_check(request: Request):
    """Ready once the target has been checked at least once."""
    monitor = _monitor(request)
    if monitor is None:
        return {"ready": False, "reason": "Monitor not started"}
    if not monitor.snapshot().observed:
        return {"ready": False, "reason": "No check completed yet"}
    return {"ready": True}


@router.get("/live")
async def liveness_check():
    return {"alive": True}


@router.get("/version", response_model=VersionResponse)
async def version():
    return VersionResponse(
        version=APP_VERSION,
        build_date=settings.app_build_date,
        git_commit=settings.app_git_commit,
    )


@router.get("/metrics")
async def prometheus_metrics():
    """Prometheus metrics endpoint."""
    return Response(
        content=generate_latest(),
        media_type=CONTENT_TYPE_LATEST,
    )

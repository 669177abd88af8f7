"""REST API routes."""

from typing import List, Optional

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from src.config import settings
from src.scheduler.job_scheduler import get_jobs_info

router = APIRouter()


# Response models
class StatusResponse(BaseModel):
    target: str
    status: str  # "up", "down" or "unknown"
    is_up: Optional[bool] = None
    last_change: Optional[str] = None
    last_check: Optional[str] = None
    report: str


class CheckResponse(BaseModel):
    changed: bool
    status: StatusResponse


class JobResponse(BaseModel):
    id: str
    name: str
    next_run: Optional[str] = None
    trigger: str


def _get_monitor(request: Request):
    monitor = getattr(request.app.state, "monitor", None)
    if monitor is None:
        raise HTTPException(status_code=503, detail="Monitor not started")
    return monitor


def _status_response(monitor) -> StatusResponse:
    snap = monitor.snapshot()
    if not snap.observed:
        status = "unknown"
    else:
        status = "up" if snap.is_up else "down"

    return StatusResponse(
        target=monitor.target,
        status=status,
        is_up=snap.is_up if snap.observed else None,
        last_change=snap.last_change.isoformat() if snap.last_change else None,
        last_check=snap.last_check.isoformat() if snap.last_check else None,
        report=monitor.status_report(),
    )


@router.get("/status", response_model=StatusResponse)
async def get_status(request: Request):
    """Get the current reachability status."""
    return _status_response(_get_monitor(request))


@router.post("/check", response_model=CheckResponse)
async def run_check(request: Request):
    """Run a check immediately and return the fresh status."""
    monitor = _get_monitor(request)
    event = await monitor.run_check()
    return CheckResponse(changed=event.occurred, status=_status_response(monitor))


@router.get("/jobs", response_model=List[JobResponse])
async def list_jobs():
    """List scheduled jobs."""
    return get_jobs_info()


@router.get("/config")
async def get_config():
    """Get current configuration (non-sensitive values only)."""
    return {
        "target": settings.target,
        "probe": "http" if settings.is_url_target else "icmp",
        "ping_interval": settings.ping_interval,
        "telegram_configured": settings.telegram_configured,
        "poll_timeout": settings.poll_timeout,
    }

"""FastAPI web application hosting the monitor."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.bot.command_loop import start_command_loop, stop_command_loop
from src.config import APP_VERSION, settings
from src.monitor.monitor import build_monitor
from src.scheduler.job_scheduler import start_scheduler, shutdown_scheduler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown events."""
    # Startup
    logger.info("Starting Network Monitor...")

    monitor = build_monitor(settings)
    app.state.monitor = monitor

    start_scheduler(monitor)
    logger.info("Scheduler started")

    app.state.command_loop = start_command_loop(monitor, settings)

    yield

    # Shutdown
    logger.info("Shutting down Network Monitor...")
    shutdown_scheduler()
    await stop_command_loop()
    await monitor.drain()
    if monitor.notifier.client is not None:
        await monitor.notifier.client.aclose()
    logger.info("Shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="Network Monitor",
    description="Reachability monitor with Telegram notifications",
    version=APP_VERSION,
    lifespan=lifespan,
)

# Import and include routers
from src.web.routes import api, health  # noqa: E402

app.include_router(api.router, prefix="/api", tags=["API"])
app.include_router(health.router, tags=["Health"])

"""Main entry point for the Network Monitor application."""

import importlib
import logging
import sys
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler

import uvicorn
from pydantic import ValidationError

from src.errors import ConfigError


def configure_logging(settings=None):
    """Configure logging based on settings.

    Logs go to stdout (for container logs) and, when LOG_FILE is set, to a
    rotating log file as well. Without settings (they failed to load) this
    falls back to INFO text logging on stdout.
    """
    level_name = settings.log_level if settings else "INFO"
    log_format = settings.log_format if settings else "text"
    log_file = settings.log_file if settings else None

    log_level = getattr(logging, level_name.upper())

    handlers = [logging.StreamHandler(sys.stdout)]
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(RotatingFileHandler(
            log_file,
            maxBytes=5 * 1024 * 1024,  # 5MB
            backupCount=3,
            encoding="utf-8",
        ))

    if log_format == "json":
        from pythonjsonlogger import jsonlogger

        class CustomJsonFormatter(jsonlogger.JsonFormatter):
            """Custom JSON formatter with additional fields."""

            def add_fields(self, log_record, record, message_dict):
                super().add_fields(log_record, record, message_dict)
                log_record["timestamp"] = datetime.now(timezone.utc).isoformat()
                log_record["level"] = record.levelname
                log_record["logger"] = record.name
                log_record["service"] = "net-monitor-bot"

        formatter = CustomJsonFormatter(
            "%(timestamp)s %(level)s %(name)s %(message)s"
        )
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
        )

    for handler in handlers:
        handler.setFormatter(formatter)

    # Configure root logger
    logging.root.handlers = []
    for handler in handlers:
        logging.root.addHandler(handler)
    logging.root.setLevel(log_level)

    # Reduce noise from third-party loggers
    logging.getLogger("apscheduler").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


logger = logging.getLogger(__name__)


def load_settings():
    """Load the global settings.

    Raises:
        ConfigError: The config file is missing or holds invalid values.
    """
    try:
        config = importlib.import_module("src.config")
    except ValidationError as e:
        raise ConfigError(f"invalid configuration: {e}") from None

    config.check_config_file()
    return config.settings


def main():
    """Run the application."""
    try:
        settings = load_settings()
    except ConfigError as e:
        configure_logging()
        logger.critical("Failed to load config: %s", e)
        sys.exit(1)

    configure_logging(settings)

    from src.config import APP_VERSION

    logger.info("Starting Network Monitor v%s", APP_VERSION)
    logger.info("Target: %s (%s)", settings.target, "http" if settings.is_url_target else "icmp")
    logger.info("Check interval: %d seconds", settings.ping_interval)
    logger.info("Telegram configured: %s", settings.telegram_configured)
    logger.info("Log format: %s", settings.log_format)

    # Import app here to ensure logging is configured first
    from src.web.app import app

    uvicorn.run(
        app,
        host=settings.web_host,
        port=settings.web_port,
        log_level=settings.log_level.lower(),
    )


if __name__ == "__main__":
    main()

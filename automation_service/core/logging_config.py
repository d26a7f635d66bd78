"""
Logging configuration for the Test Automation Service.

Console output is always on; outside CI a rotating log file is added. CI
gets one JSON object per line so runs can be traced by ``run_id`` and
``suite_id`` in log aggregation.
"""

import json
import logging
import logging.handlers
import sys
from datetime import datetime, timezone
from typing import Any, Dict, List

from .config import Config


CONTEXT_FIELDS = ["suite_id", "run_id", "step", "environment", "status", "duration"]

# Libraries whose INFO output drowns run logs
NOISY_LOGGERS = ["aiohttp.access", "aiohttp.client", "asyncio"]

LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
LOG_FILE_BACKUPS = 5


def _record_context(record: logging.LogRecord) -> Dict[str, Any]:
    return {
        name: getattr(record, name)
        for name in CONTEXT_FIELDS
        if getattr(record, name, None) is not None
    }


class StructuredFormatter(logging.Formatter):
    """One JSON object per record, with run context flattened in."""

    def __init__(self, instance_id: str):
        super().__init__()
        self.instance_id = instance_id

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "component": record.name,
            "instance_id": self.instance_id,
            "message": record.getMessage(),
        }
        entry.update(_record_context(record))

        metadata = getattr(record, "metadata", None)
        if metadata:
            entry["metadata"] = metadata
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, ensure_ascii=False, default=str)


class TextFormatter(logging.Formatter):
    """Single-line human-readable output for local runs."""

    def __init__(self, instance_id: str):
        super().__init__()
        self.instance_id = instance_id

    def format(self, record: logging.LogRecord) -> str:
        timestamp = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")
        parts = [
            f"[{timestamp}] {record.levelname:8} {record.name:20} | {record.getMessage()}"
        ]

        run_id = getattr(record, "run_id", None)
        if run_id:
            parts.append(f" (run: {str(run_id)[:8]})")

        metadata = getattr(record, "metadata", None)
        if metadata:
            parts.append(" | " + " | ".join(f"{k}={v}" for k, v in metadata.items()))

        if record.exc_info:
            parts.append("\n" + self.formatException(record.exc_info))

        return "".join(parts)


class ContextAdapter(logging.LoggerAdapter):
    """Adds fixed run context (run_id, suite_id, ...) to every record."""

    def process(self, msg, kwargs):
        extra = kwargs.setdefault("extra", {})
        extra.update(self.extra)
        return msg, kwargs


def _build_handlers(config: Config, formatter: logging.Formatter) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]

    if not config.is_ci_mode:
        handlers.append(
            logging.handlers.RotatingFileHandler(
                config.get_log_file_path(),
                maxBytes=LOG_FILE_MAX_BYTES,
                backupCount=LOG_FILE_BACKUPS,
                encoding="utf-8",
            )
        )

    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def setup_logging(config: Config, instance_id: str) -> logging.Logger:
    """
    Configure the root logger for this process.

    Args:
        config: Configuration object with logging settings
        instance_id: Identifier of this service process for log correlation

    Returns:
        Configured root logger
    """
    level = getattr(logging, config.log_level)
    formatter: logging.Formatter
    if config.log_format == "json":
        formatter = StructuredFormatter(instance_id)
    else:
        formatter = TextFormatter(instance_id)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(level)
    for handler in _build_handlers(config, formatter):
        handler.setLevel(level)
        root_logger.addHandler(handler)

    if not config.debug_enabled:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    logging.getLogger("automation_service.logging").info(
        "Logging configured",
        extra={
            "metadata": {
                "instance_id": instance_id,
                "log_level": config.log_level,
                "log_format": config.log_format,
                "ci_mode": config.is_ci_mode,
            }
        },
    )
    return root_logger


def get_logger(name: str, **context) -> logging.Logger:
    """
    Get a logger, bound to run context when any is given.

    ``get_logger(__name__, run_id=run.id, suite_id=suite.id)`` tags every
    record with the run it belongs to.
    """
    logger = logging.getLogger(name)
    if context:
        return ContextAdapter(logger, context)
    return logger


def log_performance(
    logger: logging.Logger, operation: str, duration: float, **metadata
):
    """Record how long an operation took, in seconds."""
    logger.info(
        f"Performance: {operation} completed in {duration:.2f}s",
        extra={"metadata": {"operation": operation, "duration": duration, **metadata}},
    )


def log_delivery(
    logger: logging.Logger,
    channel: str,
    url: str,
    duration: float,
    success: bool,
    **metadata,
):
    """
    Record one outbound delivery to the notification or monitoring service.

    Successful deliveries log at DEBUG, failures at WARNING.

    Args:
        logger: Logger instance
        channel: Delivery channel name (notification, monitoring)
        url: Destination URL
        duration: Call duration in seconds
        success: Whether the call succeeded
        **metadata: Additional metadata such as the error
    """
    status = "delivered" if success else "failed"
    logger.log(
        logging.DEBUG if success else logging.WARNING,
        f"Delivery: {channel} {status} in {duration:.3f}s",
        extra={
            "metadata": {
                "channel": channel,
                "url": url,
                "duration": duration,
                "success": success,
                **metadata,
            }
        },
    )

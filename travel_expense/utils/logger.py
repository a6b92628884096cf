"""
Logging Configuration
Loguru sinks for the console, the application and error files and the
audit trail. Every record carries the request id and principal bound by
the logging middleware ("-" outside a request).
"""

from loguru import logger
import sys
from pathlib import Path

from travel_expense.config.settings import settings

CONTEXT_DEFAULTS = {"request_id": "-", "principal": "-"}

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<magenta>{extra[request_id]}</magenta> user={extra[principal]} | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[request_id]} user={extra[principal]} | "
    "{name}:{function}:{line} - {message}"
)
AUDIT_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {extra[request_id]} | {message}"

_configured = False


def _is_audit(record) -> bool:
    return "AUDIT" in record["extra"]


def setup_logger():
    """
    Configure the shared loguru logger once per process

    Later calls return the already configured logger, so modules can call
    this at import time.

    Returns:
        logger: Configured logger instance
    """
    global _configured
    if _configured:
        return logger

    log_dir = Path(settings.LOG_DIRECTORY)
    log_dir.mkdir(parents=True, exist_ok=True)

    logger.configure(
        handlers=[
            {
                "sink": sys.stdout,
                "format": CONSOLE_FORMAT,
                "level": settings.LOG_LEVEL,
                "colorize": True,
                "filter": lambda record: not _is_audit(record),
            },
            {
                "sink": settings.LOG_FILE,
                "format": FILE_FORMAT,
                "level": settings.LOG_LEVEL,
                "rotation": "10 MB",
                "retention": "30 days",
                "compression": "zip",
            },
            {
                "sink": str(log_dir / "error.log"),
                "format": FILE_FORMAT,
                "level": "ERROR",
                "rotation": "10 MB",
                "retention": "90 days",
                "compression": "zip",
            },
            {
                "sink": str(log_dir / "audit.log"),
                "format": AUDIT_FORMAT,
                "filter": _is_audit,
                "rotation": "10 MB",
                "retention": "365 days",
                "compression": "zip",
            },
        ],
        extra=CONTEXT_DEFAULTS,
    )

    _configured = True
    return logger


def log_audit(user_id: int, action: str, details: str):
    """
    Write one line to the audit trail

    Args:
        user_id: User who performed the action
        action: Action performed, e.g. "TravelRequest Approved"
        details: Action details
    """
    logger.bind(AUDIT=True).info(f"USER_ID={user_id} | ACTION={action} | DETAILS={details}")

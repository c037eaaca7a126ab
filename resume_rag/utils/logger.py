"""
Logging infrastructure for Resume RAG.

Loguru sinks for the console, a rotating application log and a separate
audit trail. Audit records carry an ``audit_type`` extra (ACCESS,
DECISION, SYSTEM) and have candidate contact fields masked before they
are written.
"""

import sys
from typing import Any, Optional

from loguru import logger

from resume_rag.utils.config import AppSettings, LoggingSettings, get_settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)

AUDIT_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | {extra[audit_type]} | {message}"

MASK = "***REDACTED***"

# Audit values longer than this (usually query text) are shortened
MAX_AUDIT_VALUE_CHARS = 200

_SENSITIVE_KEYS = frozenset({
    "password", "secret", "token", "api_key", "apikey", "credential",
    "private_key", "ssn", "email", "phone", "address", "date_of_birth",
    "personal_info",
})


def _is_audit_record(record: dict[str, Any]) -> bool:
    return "audit_type" in record["extra"]


def _add_file_sinks(log_settings: LoggingSettings, diagnose: bool) -> None:
    log_file = log_settings.file_path
    log_file.parent.mkdir(parents=True, exist_ok=True)

    logger.add(
        log_file,
        format=log_settings.format,
        level=log_settings.level,
        rotation=log_settings.rotation,
        retention=log_settings.retention,
        compression="zip",
        backtrace=True,
        diagnose=diagnose,
        enqueue=True,
    )
    logger.add(
        log_file.parent / "audit.log",
        format=AUDIT_FORMAT,
        level="INFO",
        filter=_is_audit_record,
        rotation="1 week",
        retention="1 year",
        compression="zip",
        enqueue=True,
    )


def setup_logging(settings: Optional[AppSettings] = None) -> None:
    """
    Configure application-wide logging.

    The console sink is always installed when enabled. File and audit
    sinks are skipped in the testing environment so test runs leave no
    files behind.

    Args:
        settings: Settings to configure from; the global settings by default.
    """
    settings = settings or get_settings()
    log_settings = settings.logging

    # Variable values in tracebacks could expose query text and resume content
    diagnose = settings.debug and settings.environment == "development"

    logger.remove()

    if log_settings.console_output:
        logger.add(
            sys.stderr,
            format=CONSOLE_FORMAT,
            level=log_settings.level,
            colorize=True,
            backtrace=True,
            diagnose=diagnose,
        )

    if settings.environment != "testing":
        _add_file_sinks(log_settings, diagnose)

    logger.debug(f"Logging initialized ({log_settings.level}, {settings.environment})")


def get_logger(name: str) -> Any:
    """Return the shared logger bound to a component name."""
    return logger.bind(name=name)


def sanitize_audit_details(data: Any) -> Any:
    """
    Mask contact and credential fields and shorten long values.

    Keys are matched by substring, so ``candidate_email`` is masked as well
    as ``email``.
    """
    if isinstance(data, dict):
        return {
            key: MASK if any(s in str(key).lower() for s in _SENSITIVE_KEYS)
            else sanitize_audit_details(value)
            for key, value in data.items()
        }
    if isinstance(data, (list, tuple)):
        return [sanitize_audit_details(item) for item in data]
    if isinstance(data, str) and len(data) > MAX_AUDIT_VALUE_CHARS:
        return data[:MAX_AUDIT_VALUE_CHARS] + "..."
    return data


def audit_log(
    action: str,
    details: dict[str, Any],
    audit_type: str = "DECISION",
) -> None:
    """
    Write an audit record.

    Args:
        action: Audited action, e.g. "search_performed" or "candidates_matched"
        details: Context for the record; sensitive keys are masked
        audit_type: ACCESS for reads, DECISION for rankings, SYSTEM for configuration
    """
    logger.bind(audit_type=audit_type).info(f"{action} | {sanitize_audit_details(details)}")


class LoggerMixin:
    """Gives a class a ``logger`` bound to its class name."""

    @property
    def logger(self) -> Any:
        if not hasattr(self, "_logger"):
            self._logger = get_logger(self.__class__.__name__)
        return self._logger


log = logger


try:
    setup_logging()
except OSError as e:
    # Unwritable log directory: console logging still works
    logger.warning(f"File logging disabled: {e}")

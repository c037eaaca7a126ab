"""
Utility modules for Resume RAG.

This package contains shared utilities used across the application:
- config: Configuration management
- logger: Logging infrastructure
- constants: Scoring policy, retrieval limits and enums
"""

from resume_rag.utils.config import (
    AppSettings,
    get_settings,
    reload_settings,
    settings,
    ROOT_DIR,
    PACKAGE_DIR,
    DATA_DIR,
)
from resume_rag.utils.constants import (
    APP_NAME,
    VERSION,
    AIProviderName,
    AuditAction,
    ExperienceLevel,
    JobStatus,
    MatchScoreLevel,
    ProcessingStatus,
    UserRole,
)
from resume_rag.utils.logger import (
    setup_logging,
    get_logger,
    audit_log,
    LoggerMixin,
    log,
)

__all__ = [
    # Config
    "AppSettings",
    "get_settings",
    "reload_settings",
    "settings",
    "ROOT_DIR",
    "PACKAGE_DIR",
    "DATA_DIR",
    # Constants
    "APP_NAME",
    "VERSION",
    "AIProviderName",
    "AuditAction",
    "ExperienceLevel",
    "JobStatus",
    "MatchScoreLevel",
    "ProcessingStatus",
    "UserRole",
    # Logger
    "setup_logging",
    "get_logger",
    "audit_log",
    "LoggerMixin",
    "log",
]

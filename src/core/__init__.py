"""
Core utilities for the profile harvester.

This module contains shared utilities used across all components:
- Configuration management
- Structured logging
- Error taxonomy, error records and error logging
"""

from src.core.logging import get_logger, setup_logging
from src.core.config import get_config, validate_config, Config
from src.core.error_logger import get_error_logger, ErrorLogger
from src.core.error_models import (
    ErrorComponent,
    ErrorSeverity,
    ErrorType,
    ErrorStage,
    ErrorRecord,
)
from src.core.errors import (
    HarvestError,
    RateLimitedError,
    QuotaExhaustedError,
    AccountRestrictedError,
    VerificationRequiredError,
    NetworkError,
    SessionConfigError,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "get_config",
    "validate_config",
    "Config",
    "get_error_logger",
    "ErrorLogger",
    "ErrorComponent",
    "ErrorSeverity",
    "ErrorType",
    "ErrorStage",
    "ErrorRecord",
    "HarvestError",
    "RateLimitedError",
    "QuotaExhaustedError",
    "AccountRestrictedError",
    "VerificationRequiredError",
    "NetworkError",
    "SessionConfigError",
]

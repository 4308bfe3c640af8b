"""
Centralized error logging with Supabase and a local JSONL fallback.

Records are written to the ERROR_LOG_TABLE table when Supabase credentials
are configured, otherwise (or when the insert fails) appended to
logs/errors/errors_YYYYMMDD.jsonl. Logging an error never raises.
"""

import json
from pathlib import Path
from typing import Optional, Any
from datetime import datetime, timezone

from supabase import create_client

from src.core.config import Config, get_config
from src.core.logging import get_logger
from src.core.error_models import (
    ErrorRecord,
    ErrorComponent,
    ErrorSeverity,
    ErrorType,
)

logger = get_logger(__name__)

# Singleton instance
_error_logger: Optional["ErrorLogger"] = None


class ErrorLogger:
    """
    Error logger with database and file fallback.

    Usage:
        >>> error_logger = get_error_logger()
        >>> error_logger.log_error(
        ...     component=ErrorComponent.SESSION,
        ...     stage=ErrorStage.NAVIGATE,
        ...     error_type=ErrorType.TIMEOUT,
        ...     message="Navigation timeout after 45s",
        ...     company="Acme Corp",
        ...     url="https://www.linkedin.com/search/results/people/?keywords=...",
        ... )
    """

    def __init__(
        self,
        fallback_dir: Path = Path("logs/errors"),
        table: str = "error_logs",
        supabase_url: Optional[str] = None,
        supabase_key: Optional[str] = None,
        client: Any = None,
    ):
        self._table = table
        self._client = client
        self._fallback_dir = Path(fallback_dir)
        self._fallback_dir.mkdir(exist_ok=True, parents=True)

        if self._client is None and supabase_url and supabase_key:
            self._init_database(supabase_url, supabase_key)

    @classmethod
    def from_config(cls, config: Config) -> "ErrorLogger":
        enabled = config.supabase_enabled
        return cls(
            fallback_dir=config.log_dir / "errors",
            table=config.error_log_table,
            supabase_url=config.supabase_url if enabled else None,
            supabase_key=config.supabase_service_role_key if enabled else None,
        )

    def _init_database(self, url: str, key: str) -> None:
        try:
            self._client = create_client(url, key)
            logger.info("Error logging initialized with Supabase")
        except Exception as e:
            logger.warning(f"Error logging: Database init failed ({e}), using file fallback")
            self._client = None

    @property
    def db_available(self) -> bool:
        return self._client is not None

    def log_error(
        self,
        component: ErrorComponent,
        stage: str,
        error_type: ErrorType,
        message: str,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        **context: Any,
    ) -> bool:
        """
        Log an error record.

        Args:
            component: System component
            stage: Processing stage (see ErrorStage)
            error_type: Error category
            message: Human-readable error message
            severity: Error severity (default: ERROR)
            **context: run_id, company, role, url, metadata

        Returns:
            True if logged successfully, False otherwise
        """
        try:
            record = ErrorRecord(
                component=component,
                stage=stage,
                error_type=error_type,
                severity=severity,
                message=message,
                **context,
            )
            return self._write(record)
        except Exception as e:
            logger.error(f"Error logger failed: {e} - Original error: {message}")
            return False

    def log_exception(
        self,
        exc: Exception,
        component: ErrorComponent,
        stage: str,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        error_type: Optional[ErrorType] = None,
        **context: Any,
    ) -> bool:
        """
        Log an exception with automatic classification.

        Returns:
            True if logged successfully, False otherwise
        """
        try:
            record = ErrorRecord.from_exception(
                exc,
                component=component,
                stage=stage,
                severity=severity,
                error_type=error_type,
                **context,
            )
            return self._write(record)
        except Exception as e:
            logger.error(f"Error logger failed: {e} - Original exception: {type(exc).__name__}")
            return False

    def _write(self, record: ErrorRecord) -> bool:
        if self._client is not None:
            return self._write_to_database(record)
        return self._write_to_file(record)

    def _write_to_database(self, record: ErrorRecord) -> bool:
        try:
            self._client.table(self._table).insert(record.model_dump()).execute()
            return True
        except Exception as e:
            logger.warning(f"Database error write failed: {e}, falling back to file")
            return self._write_to_file(record)

    def _write_to_file(self, record: ErrorRecord) -> bool:
        try:
            date_str = datetime.now(timezone.utc).strftime("%Y%m%d")
            file_path = self._fallback_dir / f"errors_{date_str}.jsonl"
            with open(file_path, "a", encoding="utf-8") as f:
                json.dump(record.model_dump(), f, ensure_ascii=False)
                f.write("\n")
            return True
        except Exception as e:
            logger.error(f"File error write failed: {e}")
            return False


def get_error_logger() -> ErrorLogger:
    """
    Get the global ErrorLogger instance.

    Returns:
        Global ErrorLogger singleton built from the global config
    """
    global _error_logger
    if _error_logger is None:
        _error_logger = ErrorLogger.from_config(get_config())
    return _error_logger


def set_error_logger(error_logger: Optional[ErrorLogger]) -> None:
    """Replace the global ErrorLogger (None resets it)."""
    global _error_logger
    _error_logger = error_logger

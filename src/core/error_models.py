"""
Pydantic models for structured error logging.

Every halt, navigation failure and sink failure is captured as an
ErrorRecord so that a run can be audited after the fact.
"""

import json
import traceback
from datetime import datetime, timezone
from enum import Enum
from typing import Optional, Dict, Any
from pydantic import BaseModel, Field, field_validator, ConfigDict

from src.core.errors import HarvestError


class ErrorComponent(str, Enum):
    """System components that can generate errors."""
    LEDGER = "ledger"
    SESSION = "session"
    EXTRACTION = "extraction"
    FILTER = "filter"
    ORCHESTRATOR = "orchestrator"
    SINK = "sink"
    SOURCE = "source"
    CONFIG = "config"
    UNKNOWN = "unknown"


class ErrorSeverity(str, Enum):
    """Error severity levels matching logging standards."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorType(str, Enum):
    """Categorized error types for classification."""
    # Target-site conditions
    RATE_LIMITED = "rate_limited"
    QUOTA_EXHAUSTED = "quota_exhausted"
    ACCOUNT_RESTRICTED = "account_restricted"
    VERIFICATION_REQUIRED = "verification_required"
    CAPTCHA_REQUIRED = "captcha_required"
    SESSION_INVALID = "session_invalid"

    # Network/browser errors
    TIMEOUT = "timeout"
    NETWORK = "network"
    BROWSER_ERROR = "browser_error"

    # Parsing errors
    PARSE_ERROR = "parse_error"
    JSON_ERROR = "json_error"

    # Hand-off errors
    SINK_ERROR = "sink_error"
    CHECKPOINT_ERROR = "checkpoint_error"

    # File system / configuration
    FILE_ERROR = "file_error"
    CONFIG_ERROR = "config_error"

    UNKNOWN = "unknown"


class ErrorStage:
    """Standardized stage names for error logging."""
    # Session stages
    LAUNCH_BROWSER = "launch_browser"
    VALIDATE_SESSION = "validate_session"
    LIVENESS_PROBE = "liveness_probe"
    NAVIGATE = "navigate"
    DETOUR = "detour"
    SUBMIT_CODE = "submit_code"

    # Ledger stages
    LOAD_LEDGER = "load_ledger"
    SAVE_LEDGER = "save_ledger"

    # Pipeline stages
    EXTRACT = "extract"
    FILTER = "filter"

    # Hand-off stages
    SINK_EXISTS = "sink_exists"
    SINK_CREATE = "sink_create"
    MARK_SCRAPED = "mark_scraped"

    # Orchestrator stages
    ADMISSION = "admission"
    HALT = "halt"

    # Config stages
    LOAD_CONFIG = "load_config"
    VALIDATE_CONFIG = "validate_config"


class ErrorRecord(BaseModel):
    """
    Structured error record for database insertion.

    Validation never rejects a record for cosmetic reasons; empty stages and
    messages are replaced with placeholders instead.
    """
    # Required fields
    component: ErrorComponent = Field(..., description="System component")
    stage: str = Field(..., min_length=1, max_length=100, description="Processing stage")
    error_type: ErrorType = Field(..., description="Error category")
    severity: ErrorSeverity = Field(default=ErrorSeverity.ERROR, description="Severity level")
    message: str = Field(..., min_length=1, description="Human-readable error message")

    # Search context
    run_id: Optional[str] = Field(None, max_length=64, description="Run identifier")
    company: Optional[str] = Field(None, max_length=255, description="Target company of the unit")
    role: Optional[str] = Field(None, max_length=255, description="Target role of the unit")
    url: Optional[str] = Field(None, max_length=2048, description="Specific URL if applicable")

    exception_type: Optional[str] = Field(None, max_length=255, description="Exception class name")
    stack_trace: Optional[str] = Field(None, description="Stack trace for unexpected errors")

    metadata: Dict[str, Any] = Field(default_factory=dict, description="Additional context")

    created_at: str = Field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat(),
        description="Error timestamp"
    )

    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True,
        use_enum_values=True,
    )

    @field_validator("stage", mode="before")
    @classmethod
    def validate_stage(cls, v: str) -> str:
        """Normalize stage names to snake_case."""
        if not v or not str(v).strip():
            return "unknown"
        return str(v).strip().lower().replace(" ", "_")

    @field_validator("message", mode="before")
    @classmethod
    def validate_message(cls, v: str) -> str:
        """Ensure message is not empty and not huge."""
        if not v or not str(v).strip():
            return "No error message provided"
        return str(v).strip()[:5000]

    @field_validator("metadata")
    @classmethod
    def sanitize_metadata(cls, v: Dict[str, Any]) -> Dict[str, Any]:
        """Convert values that are not JSON-serializable to strings."""
        sanitized = {}
        for key, value in v.items():
            try:
                json.dumps(value)
                sanitized[key] = value
            except (TypeError, ValueError):
                sanitized[key] = str(value)
        return sanitized

    @classmethod
    def from_exception(
        cls,
        exc: Exception,
        component: ErrorComponent,
        stage: str,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        error_type: Optional[ErrorType] = None,
        include_stack_trace: Optional[bool] = None,
        **context: Any,
    ) -> "ErrorRecord":
        """
        Create ErrorRecord from an exception with automatic classification.

        Args:
            exc: The exception that occurred
            component: System component where error occurred
            stage: Processing stage
            severity: Error severity (default: ERROR)
            error_type: Optional explicit error type (auto-detected if None)
            include_stack_trace: Whether to include full stack trace (auto if None)
            **context: run_id, company, role, url and metadata

        Returns:
            ErrorRecord instance ready for logging
        """
        if error_type is None:
            error_type = cls._classify_exception(exc)

        message = str(exc) or f"{type(exc).__name__} occurred"
        exception_type = f"{type(exc).__module__}.{type(exc).__name__}"

        if include_stack_trace is None:
            include_stack_trace = cls._should_include_stack(exc, severity)

        stack_trace = None
        if include_stack_trace:
            stack_trace = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
            if len(stack_trace) > 10000:
                stack_trace = stack_trace[:10000] + "\n... (truncated)"

        metadata = dict(context.pop("metadata", None) or {})
        if isinstance(exc, HarvestError):
            metadata.update(exc.metadata)
            context.setdefault("url", exc.url)

        return cls(
            component=component,
            stage=stage,
            error_type=error_type,
            severity=severity,
            message=message,
            exception_type=exception_type,
            stack_trace=stack_trace,
            metadata=metadata,
            **context,
        )

    @staticmethod
    def _classify_exception(exc: Exception) -> ErrorType:
        """Classify an exception into an ErrorType."""
        if isinstance(exc, HarvestError):
            try:
                return ErrorType(exc.kind)
            except ValueError:
                return ErrorType.UNKNOWN

        exc_name = type(exc).__name__.lower()

        if "timeout" in exc_name:
            return ErrorType.TIMEOUT
        if "connection" in exc_name:
            return ErrorType.NETWORK
        if "json" in exc_name:
            return ErrorType.JSON_ERROR
        if "parse" in exc_name or "validation" in exc_name:
            return ErrorType.PARSE_ERROR
        if "playwright" in type(exc).__module__ or "browser" in exc_name:
            return ErrorType.BROWSER_ERROR
        if isinstance(exc, OSError):
            return ErrorType.FILE_ERROR
        return ErrorType.UNKNOWN

    @staticmethod
    def _should_include_stack(exc: Exception, severity: ErrorSeverity) -> bool:
        """Stack traces only for unexpected errors."""
        if severity == ErrorSeverity.CRITICAL:
            return True
        if severity in (ErrorSeverity.WARNING, ErrorSeverity.INFO, ErrorSeverity.DEBUG):
            return False
        if isinstance(exc, HarvestError):
            return False
        return type(exc).__name__ not in ("ValidationError", "FileNotFoundError", "ValueError", "TimeoutError")

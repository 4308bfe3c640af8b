"""
Pydantic models for the persisted rate-limit ledger.

The on-disk shape uses camelCase keys (date, requestCount, backoffUntil,
errorCounters, lastReset); Python code uses the snake_case attributes.
"""

from datetime import datetime, timedelta
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class FailureKind(str, Enum):
    """Failure classes tracked by the ledger."""
    FORBIDDEN = "forbidden"
    RATE_LIMITED = "rate-limited"
    NETWORK = "network"


class DenyReason(str, Enum):
    """Why an admission check said no."""
    BACKOFF = "backoff"
    DAILY_LIMIT = "daily_limit"


def _empty_counters() -> Dict[str, int]:
    return {kind.value: 0 for kind in FailureKind}


class RateLimitState(BaseModel):
    """Quota and backoff state for one UTC day."""

    date: str = Field(..., description="Quota day, ISO date (UTC)")
    request_count: int = Field(0, ge=0, alias="requestCount")
    backoff_until: Optional[datetime] = Field(None, alias="backoffUntil")
    error_counters: Dict[str, int] = Field(default_factory=_empty_counters, alias="errorCounters")
    last_reset: Optional[datetime] = Field(None, alias="lastReset")

    model_config = ConfigDict(populate_by_name=True, validate_assignment=True)

    @field_validator("error_counters")
    @classmethod
    def fill_counters(cls, v: Dict[str, int]) -> Dict[str, int]:
        """Every known failure kind gets a counter; unknown keys are kept."""
        counters = _empty_counters()
        for key, value in (v or {}).items():
            counters[key] = max(0, int(value))
        return counters

    def counter(self, kind: FailureKind) -> int:
        return self.error_counters.get(kind.value, 0)

    def to_json_dict(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class AdmissionDecision(BaseModel):
    """Result of RateLimitLedger.check_admission()."""

    allowed: bool
    reason: Optional[DenyReason] = None
    retry_after: Optional[timedelta] = None
    message: str = ""

    @property
    def retry_after_seconds(self) -> Optional[float]:
        if self.retry_after is None:
            return None
        return max(0.0, self.retry_after.total_seconds())

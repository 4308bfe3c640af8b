"""
Exception taxonomy for the harvest core.

The Rate-Limit and Session layers classify failures into these types and
attach structured metadata (kind, backoff duration, URL). The orchestrator
decides halt-vs-continue from the type alone.

An empty extraction result is not an error and has no class here.
"""

from typing import Any, Dict, Optional


class HarvestError(Exception):
    """Base class for classified harvest failures."""

    kind = "harvest_error"
    requires_human_action = False

    def __init__(self, message: str, url: Optional[str] = None, **metadata: Any):
        super().__init__(message)
        self.message = message
        self.url = url
        self.metadata: Dict[str, Any] = metadata

    def to_dict(self) -> Dict[str, Any]:
        data = {"kind": self.kind, "message": self.message}
        if self.url:
            data["url"] = self.url
        data.update(self.metadata)
        return data


class RateLimitedError(HarvestError):
    """The target answered with a 429-class response. Recoverable via backoff."""

    kind = "rate_limited"


class QuotaExhaustedError(HarvestError):
    """The daily request quota is used up. Recoverable tomorrow."""

    kind = "quota_exhausted"


class AccountRestrictedError(HarvestError):
    """Forbidden or block page. Fatal, never retried automatically."""

    kind = "account_restricted"
    requires_human_action = True


class VerificationRequiredError(HarvestError):
    """The target demands a one-time code or a CAPTCHA solve."""

    kind = "verification_required"
    requires_human_action = True

    def __init__(self, message: str, url: Optional[str] = None, captcha: bool = False, **metadata: Any):
        super().__init__(message, url=url, captcha=captcha, **metadata)
        self.captcha = captcha
        if captcha:
            self.kind = "captcha_required"


class NetworkError(HarvestError):
    """Transient navigation failure (timeout, connection reset)."""

    kind = "network"


class SessionConfigError(HarvestError):
    """The configured credential is missing or rejected. A fresh one must be supplied."""

    kind = "session_invalid"
    requires_human_action = True

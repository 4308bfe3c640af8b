"""
Rate-limit ledger: persisted daily quota and exponential backoff.
"""

from src.ledger.models import AdmissionDecision, DenyReason, FailureKind, RateLimitState
from src.ledger.ledger import RateLimitLedger

__all__ = [
    "AdmissionDecision",
    "DenyReason",
    "FailureKind",
    "RateLimitState",
    "RateLimitLedger",
]

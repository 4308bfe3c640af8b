"""
Run-level data models: search units, their states and the run report.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class SearchUnit:
    """
    One (company, role) pair to search.

    Identity is the pair; the ids are carried for hand-off and
    checkpointing only and do not take part in equality.
    """

    company: str
    role: str
    company_id: Optional[str] = field(default=None, compare=False)
    role_id: Optional[str] = field(default=None, compare=False)

    @property
    def company_key(self) -> str:
        return self.company_id or self.company

    def __str__(self) -> str:
        return f"{self.role} @ {self.company}"


class UnitState(str, Enum):
    PENDING = "pending"
    IN_FLIGHT = "in_flight"
    COMPLETED = "completed"
    SKIPPED = "skipped"
    FAILED = "failed"
    HALTED = "halted"


TERMINAL_STATES = (UnitState.COMPLETED, UnitState.SKIPPED, UnitState.FAILED, UnitState.HALTED)


class RunStatus(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    COMPLETED = "completed"
    STOPPED = "stopped"
    QUOTA_EXHAUSTED = "quota_exhausted"
    ACCOUNT_RESTRICTED = "account_restricted"
    VERIFICATION_REQUIRED = "verification_required"
    CAPTCHA_REQUIRED = "captcha_required"
    SESSION_INVALID = "session_invalid"


# Statuses that need a person to act before the next run can succeed
HUMAN_ACTION_STATUSES = (
    RunStatus.ACCOUNT_RESTRICTED,
    RunStatus.VERIFICATION_REQUIRED,
    RunStatus.CAPTCHA_REQUIRED,
    RunStatus.SESSION_INVALID,
)

RESUMABLE_STATUSES = (
    RunStatus.STOPPED,
    RunStatus.VERIFICATION_REQUIRED,
    RunStatus.CAPTCHA_REQUIRED,
)


@dataclass
class UnitOutcome:
    unit: SearchUnit
    state: UnitState = UnitState.PENDING
    extracted: int = 0
    matched: int = 0
    created: int = 0
    already_present: int = 0
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "company": self.unit.company,
            "role": self.unit.role,
            "state": self.state.value,
            "extracted": self.extracted,
            "matched": self.matched,
            "created": self.created,
            "already_present": self.already_present,
            "error": self.error,
        }


@dataclass
class RunReport:
    run_id: str
    status: RunStatus
    outcomes: List[UnitOutcome] = field(default_factory=list)
    pending: List[SearchUnit] = field(default_factory=list)
    message: str = ""
    current_unit: Optional[SearchUnit] = None

    @property
    def requires_human_action(self) -> bool:
        return self.status in HUMAN_ACTION_STATUSES

    @property
    def resumable(self) -> bool:
        return self.status in RESUMABLE_STATUSES and bool(self.pending)

    def count(self, state: UnitState) -> int:
        return sum(1 for outcome in self.outcomes if outcome.state is state)

    @property
    def failed_units(self) -> List[SearchUnit]:
        return [o.unit for o in self.outcomes if o.state is UnitState.FAILED]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "run_id": self.run_id,
            "status": self.status.value,
            "message": self.message,
            "requires_human_action": self.requires_human_action,
            "current_unit": str(self.current_unit) if self.current_unit else None,
            "completed": self.count(UnitState.COMPLETED),
            "skipped": self.count(UnitState.SKIPPED),
            "failed": self.count(UnitState.FAILED),
            "pending": len(self.pending),
            "outcomes": [o.to_dict() for o in self.outcomes],
        }

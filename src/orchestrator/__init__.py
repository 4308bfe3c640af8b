"""
Harvest orchestration: search units, run context and the outer loop.

Module Structure:
- models: SearchUnit, UnitState, RunStatus, UnitOutcome, RunReport
- interfaces: CandidateSink / SearchUnitSource protocols, HandoffContext
- context: HarvestContext (explicit collaborators for one run)
- orchestrator: Orchestrator (admission, navigation, extraction, hand-off)
"""

from src.orchestrator.models import (
    SearchUnit,
    UnitState,
    RunStatus,
    UnitOutcome,
    RunReport,
    TERMINAL_STATES,
    HUMAN_ACTION_STATUSES,
    RESUMABLE_STATUSES,
)
from src.orchestrator.interfaces import CandidateSink, SearchUnitSource, HandoffContext
from src.orchestrator.context import HarvestContext
from src.orchestrator.orchestrator import Orchestrator

__all__ = [
    "SearchUnit",
    "UnitState",
    "RunStatus",
    "UnitOutcome",
    "RunReport",
    "TERMINAL_STATES",
    "HUMAN_ACTION_STATUSES",
    "RESUMABLE_STATUSES",
    "CandidateSink",
    "SearchUnitSource",
    "HandoffContext",
    "HarvestContext",
    "Orchestrator",
]

"""
Collaborator interfaces the orchestrator depends on.

Candidate sinks and search-unit sources live outside the harvest core;
anything with these methods can be plugged in.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Protocol, runtime_checkable

from src.extraction.models import Candidate
from src.orchestrator.models import SearchUnit


@dataclass(frozen=True)
class HandoffContext:
    """Where a candidate came from."""

    unit: SearchUnit
    run_id: str
    search_url: str


@runtime_checkable
class CandidateSink(Protocol):
    """Duplicate check and create. Both calls are idempotent for the caller."""

    def exists(self, profile_url: str) -> bool:
        ...

    def create(self, candidate: Candidate, context: HandoffContext) -> None:
        ...


@runtime_checkable
class SearchUnitSource(Protocol):
    """Supplies the work list and owns company checkpoints."""

    def search_units(self) -> List[SearchUnit]:
        ...

    def should_search(self, company_id: str) -> bool:
        ...

    def mark_scraped(self, company_id: str, timestamp: datetime) -> None:
        ...

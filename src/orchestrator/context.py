"""
Explicit run context: every collaborator the orchestrator talks to.

Nothing in the harvest core reaches for a global; the context is built once
(usually from Config) and passed to the Orchestrator.
"""

from dataclasses import dataclass
from typing import Any, Optional

from src.core.config import Config
from src.core.error_logger import ErrorLogger
from src.core.logging import get_logger
from src.extraction.pipeline import ExtractionPipeline
from src.filtering.relevance import FilterSettings, RelevanceFilter
from src.ledger.ledger import RateLimitLedger
from src.orchestrator.interfaces import CandidateSink, SearchUnitSource
from src.session.manager import SessionManager

logger = get_logger(__name__)


@dataclass
class HarvestContext:
    config: Config
    ledger: RateLimitLedger
    sessions: SessionManager
    pipeline: ExtractionPipeline
    relevance: RelevanceFilter
    sink: CandidateSink
    source: SearchUnitSource
    error_logger: ErrorLogger

    @classmethod
    def from_config(
        cls,
        config: Config,
        launcher: Optional[Any] = None,
        sink: Optional[CandidateSink] = None,
        source: Optional[SearchUnitSource] = None,
    ) -> "HarvestContext":
        """Wire the default collaborators from configuration."""
        # Deferred: sinks and sources import the orchestrator models
        from src.sinks import build_sink
        from src.sources import FileSearchUnitSource

        if source is None:
            source = FileSearchUnitSource(
                config.companies_file,
                config.roles_file,
                config.checkpoint_file,
                stale_after_months=config.stale_after_months,
            )

        return cls(
            config=config,
            ledger=RateLimitLedger.from_config(config),
            sessions=SessionManager(config, launcher=launcher),
            pipeline=ExtractionPipeline(merge=config.extraction_merge),
            relevance=RelevanceFilter(FilterSettings.from_config(config)),
            sink=sink if sink is not None else build_sink(config),
            source=source,
            error_logger=ErrorLogger.from_config(config),
        )

    async def close(self) -> None:
        await self.sessions.close()

    async def __aenter__(self) -> "HarvestContext":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

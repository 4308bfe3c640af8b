"""
Supabase-backed candidate sink.

Rows are upserted on profile_url, so creating the same candidate twice is
harmless. Errors propagate; the orchestrator logs them and moves on.
"""

from typing import Any

from supabase import create_client

from src.core.config import Config
from src.core.logging import get_logger
from src.extraction.models import Candidate
from src.orchestrator.interfaces import HandoffContext
from src.sinks.rows import candidate_row

logger = get_logger(__name__)


class SupabaseCandidateSink:
    """Candidate sink writing to a Supabase table."""

    def __init__(self, client: Any, table: str = "candidates"):
        self.client = client
        self.table = table

    @classmethod
    def from_config(cls, config: Config) -> "SupabaseCandidateSink":
        """
        Build a sink from configuration.

        Raises:
            ValueError: If Supabase is disabled or credentials are missing
        """
        if not config.supabase_enabled:
            raise ValueError("Supabase sink requested but SUPABASE_ENABLED is off")
        if not config.supabase_url or not config.supabase_service_role_key:
            raise ValueError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY are required for the Supabase sink")

        client = create_client(config.supabase_url, config.supabase_service_role_key)
        logger.info(f"[Sink] Supabase client initialized for {config.supabase_url}")
        return cls(client, table=config.supabase_candidates_table)

    def exists(self, profile_url: str) -> bool:
        result = (
            self.client.table(self.table)
            .select("profile_url")
            .eq("profile_url", profile_url)
            .limit(1)
            .execute()
        )
        return bool(result.data)

    def create(self, candidate: Candidate, context: HandoffContext) -> None:
        row = candidate_row(candidate, context)
        self.client.table(self.table).upsert([row], on_conflict="profile_url").execute()
        logger.debug(f"[Sink] Upserted {candidate.profile_url} into '{self.table}'")

"""
Candidate sinks: where qualifying candidates are handed off.
"""

from src.core.config import Config
from src.sinks.jsonl_sink import JsonlCandidateSink
from src.sinks.supabase_sink import SupabaseCandidateSink


def build_sink(config: Config):
    """Sink selected by CANDIDATE_SINK."""
    if config.candidate_sink == "supabase":
        return SupabaseCandidateSink.from_config(config)
    return JsonlCandidateSink(config.candidates_file)


__all__ = [
    "JsonlCandidateSink",
    "SupabaseCandidateSink",
    "build_sink",
]

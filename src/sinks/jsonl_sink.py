"""
Append-only JSON-lines candidate sink for local runs.
"""

import json
from pathlib import Path
from typing import Set

from src.core.logging import get_logger
from src.extraction.models import Candidate
from src.orchestrator.interfaces import HandoffContext
from src.sinks.rows import candidate_row

logger = get_logger(__name__)


class JsonlCandidateSink:
    """
    One JSON object per line, keyed by profile_url.

    Known profile URLs are loaded once at construction and kept in memory.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self._known: Set[str] = self._load_known()

    def _load_known(self) -> Set[str]:
        known: Set[str] = set()
        if not self.path.exists():
            return known
        for lineno, line in enumerate(self.path.read_text("utf-8").splitlines(), start=1):
            if not line.strip():
                continue
            try:
                url = json.loads(line).get("profile_url")
            except (ValueError, AttributeError):
                logger.warning(f"[Sink] Ignoring unreadable line {lineno} in {self.path}")
                continue
            if url:
                known.add(url)
        return known

    def exists(self, profile_url: str) -> bool:
        return profile_url in self._known

    def create(self, candidate: Candidate, context: HandoffContext) -> None:
        if candidate.profile_url in self._known:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(json.dumps(candidate_row(candidate, context), ensure_ascii=False))
            f.write("\n")
        self._known.add(candidate.profile_url)

    def __len__(self) -> int:
        return len(self._known)

"""
Search units from plain text files, checkpoints in a JSON file.

companies.txt and roles.txt hold one entry per line, optionally as
"id | name". Lines starting with # are comments. checkpoints.json maps a
company id to the ISO timestamp of its last completed harvest.
"""

import json
import os
import re
from datetime import datetime
from pathlib import Path
from typing import Callable, Dict, List, Optional, Tuple

from src.core.logging import get_logger
from src.orchestrator.models import SearchUnit
from src.utils.date_utils import ensure_utc, is_older_than_months, parse_timestamp, utc_now

logger = get_logger(__name__)


def slugify(text: str) -> str:
    """
    Stable id for entries listed without one.

    Example:
        >>> slugify("Acme Corp, S.A.")
        'acme-corp-s-a'
    """
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")


def read_entries(path: Path) -> List[Tuple[str, str]]:
    """
    Read (id, name) pairs from a text file, one per line.

    Filters out comments and duplicate ids, preserving order.
    """
    entries: List[Tuple[str, str]] = []
    seen = set()
    for line in Path(path).read_text("utf-8").splitlines():
        s = line.strip()
        if not s or s.startswith("#"):
            continue
        if "|" in s:
            entry_id, name = (part.strip() for part in s.split("|", 1))
        else:
            entry_id, name = slugify(s), s
        if not name or entry_id in seen:
            continue
        seen.add(entry_id)
        entries.append((entry_id or slugify(name), name))
    return entries


class FileSearchUnitSource:
    """Cartesian product of companies and roles, with per-company staleness."""

    def __init__(
        self,
        companies_file: Path,
        roles_file: Path,
        checkpoint_file: Path,
        stale_after_months: int = 3,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.companies_file = Path(companies_file)
        self.roles_file = Path(roles_file)
        self.checkpoint_file = Path(checkpoint_file)
        self.stale_after_months = stale_after_months
        self._clock = clock or utc_now

    def search_units(self) -> List[SearchUnit]:
        companies = read_entries(self.companies_file)
        roles = read_entries(self.roles_file)
        logger.info(f"[Source] {len(companies)} companies x {len(roles)} roles")
        return [
            SearchUnit(company=name, role=role, company_id=company_id, role_id=role_id)
            for company_id, name in companies
            for role_id, role in roles
        ]

    # -- checkpoints ------------------------------------------------------

    def _load_checkpoints(self) -> Dict[str, str]:
        if not self.checkpoint_file.exists():
            return {}
        try:
            data = json.loads(self.checkpoint_file.read_text("utf-8"))
        except ValueError as e:
            logger.error(f"[Source] Could not parse {self.checkpoint_file}: {e}")
            return {}
        return data if isinstance(data, dict) else {}

    def _save_checkpoints(self, checkpoints: Dict[str, str]) -> None:
        self.checkpoint_file.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.checkpoint_file.with_name(self.checkpoint_file.name + ".tmp")
        tmp_path.write_text(json.dumps(checkpoints, indent=2, sort_keys=True), encoding="utf-8")
        os.replace(tmp_path, self.checkpoint_file)

    def last_scraped(self, company_id: str) -> Optional[datetime]:
        return parse_timestamp(self._load_checkpoints().get(company_id))

    def should_search(self, company_id: str) -> bool:
        return is_older_than_months(self.last_scraped(company_id), self.stale_after_months, now=self._clock())

    def mark_scraped(self, company_id: str, timestamp: datetime) -> None:
        checkpoints = self._load_checkpoints()
        checkpoints[company_id] = ensure_utc(timestamp).isoformat()
        self._save_checkpoints(checkpoints)
        logger.info(f"[Source] Checkpoint saved for {company_id}")

    def reset(self, company_id: Optional[str] = None) -> int:
        """Forget one company's checkpoint, or all of them. Returns how many were removed."""
        checkpoints = self._load_checkpoints()
        if company_id is None:
            removed = len(checkpoints)
            checkpoints = {}
        else:
            removed = 1 if checkpoints.pop(company_id, None) is not None else 0
        self._save_checkpoints(checkpoints)
        return removed

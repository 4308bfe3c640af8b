"""
Relevance filter: keep candidates that plausibly hold the target role at
the target company.

The ratios were tuned by hand against live result pages, so they are
settings rather than constants.
"""

import math
import re
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from src.core.config import Config
from src.core.logging import get_logger
from src.extraction.keywords import LOCATION_KEYWORDS
from src.extraction.models import Candidate
from src.filtering.text import COMPANY_STOP_WORDS, contains_either, normalize, significant_words
from src.utils.url_utils import is_profile_url

logger = get_logger(__name__)


@dataclass
class FilterSettings:
    company_word_ratio: float = 0.5
    role_word_ratio: float = 0.5
    location_gate_enabled: bool = False
    location_gate_strict: bool = True
    location_keywords: Sequence[str] = field(default_factory=lambda: list(LOCATION_KEYWORDS))

    def __post_init__(self):
        for name in ("company_word_ratio", "role_word_ratio"):
            value = getattr(self, name)
            if not 0 < value <= 1:
                raise ValueError(f"{name} must be in (0, 1], got {value}")

    @classmethod
    def from_config(cls, config: Config) -> "FilterSettings":
        return cls(
            company_word_ratio=config.company_match_ratio,
            role_word_ratio=config.role_match_ratio,
            location_gate_enabled=config.location_gate_enabled,
            location_gate_strict=config.location_gate_strict,
            location_keywords=config.location_keywords or list(LOCATION_KEYWORDS),
        )


class RelevanceFilter:
    """
    Decide which extracted candidates are worth handing off.

    Example:
        >>> relevance = RelevanceFilter()
        >>> kept = relevance.filter(candidates, "Acme Corp", "Marketing Manager")
    """

    def __init__(self, settings: Optional[FilterSettings] = None):
        self.settings = settings or FilterSettings()
        self._location_patterns = [
            re.compile(r"\b" + re.escape(normalize(k)) + r"\b")
            for k in self.settings.location_keywords
            if normalize(k)
        ]

    # -- individual rules -------------------------------------------------

    def location_matches(self, location: Optional[str]) -> bool:
        text = normalize(location)
        if not text:
            return not self.settings.location_gate_strict
        return any(pattern.search(text) for pattern in self._location_patterns)

    def company_matches(self, employer: Optional[str], target_company: str) -> bool:
        """
        Employer vs. target company.

        No employer text at all counts as a match: the search query already
        constrained results by company.
        """
        employer_norm = normalize(employer)
        target_norm = normalize(target_company)
        if not employer_norm or not target_norm:
            return True

        if contains_either(employer_norm, target_norm):
            return True

        words = significant_words(target_company, COMPANY_STOP_WORDS)
        if not words:
            return False
        employer_words = set(employer_norm.split())
        hits = sum(1 for word in words if word in employer_words)
        return hits >= len(words) * self.settings.company_word_ratio

    def role_matches(self, title: Optional[str], target_role: str) -> bool:
        title_norm = normalize(title)
        role_norm = normalize(target_role)
        if not role_norm:
            return True
        if not title_norm:
            return False

        if contains_either(title_norm, role_norm):
            return True

        words = significant_words(target_role)
        if not words:
            return False

        title_words = title_norm.split()
        hits = sum(1 for word in words if self._word_in_title(word, title_words))
        required = max(1, math.ceil(self.settings.role_word_ratio * len(words)))
        return hits >= required

    @staticmethod
    def _word_in_title(word: str, title_words: List[str]) -> bool:
        for token in title_words:
            if token == word or token.startswith(word):
                return True
            if len(token) >= 4 and word.startswith(token):
                return True
        return False

    # -- decision ---------------------------------------------------------

    def evaluate(self, candidate: Candidate, target_company: str, target_role: str) -> Tuple[bool, str]:
        """Return (keep, reason) for one candidate."""
        if not is_profile_url(candidate.profile_url):
            return False, "no usable profile URL"

        if self.settings.location_gate_enabled and not self.location_matches(candidate.location):
            return False, f"location {candidate.location!r} outside target locales"

        if not self.company_matches(candidate.company, target_company):
            return False, f"employer {candidate.company!r} does not match {target_company!r}"

        if not normalize(candidate.title):
            if candidate.company:
                return True, "no title, employer matches"
            return False, "no title and no employer"

        if not self.role_matches(candidate.title, target_role):
            return False, f"title {candidate.title!r} does not match {target_role!r}"

        return True, "match"

    def filter(self, candidates: Sequence[Candidate], target_company: str, target_role: str) -> List[Candidate]:
        kept: List[Candidate] = []
        for candidate in candidates:
            keep, reason = self.evaluate(candidate, target_company, target_role)
            if keep:
                kept.append(candidate)
            else:
                logger.debug(f"[Filter] Dropped {candidate.name} ({candidate.profile_url}): {reason}")
        logger.info(f"[Filter] {len(kept)}/{len(candidates)} candidate(s) kept for {target_role} @ {target_company}")
        return kept

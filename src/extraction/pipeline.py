"""
Extraction pipeline driver.

Strategies are tried in order and the first one that yields candidates
wins; with merge=True every strategy runs and their results are combined.
Either way candidates are deduplicated by canonical profile URL, first
occurrence wins. extract() never raises.
"""

from typing import Iterable, List, Optional, Sequence, Union

from src.core.logging import get_logger
from src.extraction.models import Candidate, RenderedPage
from src.extraction.strategies import ExtractionStrategy, default_strategies

logger = get_logger(__name__)


def dedupe_candidates(candidates: Iterable[Candidate]) -> List[Candidate]:
    seen = set()
    unique: List[Candidate] = []
    for candidate in candidates:
        if candidate.profile_url in seen:
            continue
        seen.add(candidate.profile_url)
        unique.append(candidate)
    return unique


class ExtractionPipeline:
    """
    Ordered fallback over extraction strategies.

    Example:
        >>> pipeline = ExtractionPipeline()
        >>> candidates = pipeline.extract(RenderedPage(html=html, url=page_url))
    """

    def __init__(self, strategies: Optional[Sequence[ExtractionStrategy]] = None, merge: bool = False):
        self.strategies: List[ExtractionStrategy] = list(strategies) if strategies is not None else default_strategies()
        self.merge = merge

    def _run(self, strategy: ExtractionStrategy, page: RenderedPage) -> List[Candidate]:
        try:
            return strategy.extract(page)
        except Exception as e:
            logger.warning(f"[Extract] Strategy {strategy.name} failed: {e}")
            return []

    def extract(self, page: Union[RenderedPage, str]) -> List[Candidate]:
        if isinstance(page, str):
            page = RenderedPage(html=page)

        collected: List[Candidate] = []
        for strategy in self.strategies:
            found = dedupe_candidates(self._run(strategy, page))
            logger.debug(f"[Extract] {strategy.name}: {len(found)} candidate(s)")
            if not found:
                continue
            if not self.merge:
                logger.info(f"[Extract] {len(found)} candidate(s) via {strategy.name}")
                return found
            collected.extend(found)

        merged = dedupe_candidates(collected)
        if self.merge:
            logger.info(f"[Extract] {len(merged)} candidate(s) after merging strategies")
        else:
            logger.info("[Extract] No candidates found on page")
        return merged

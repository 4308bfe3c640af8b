"""
Candidate extraction from rendered search-result pages.

Module Structure:
- models: Candidate, RenderedPage, ExtractionSource
- keywords: English/Spanish keyword lists for free-text classification
- text_rules: ordered rules assigning card text to title/company/location
- dom: BeautifulSoup helpers (containers, leaf blocks, anchor names)
- strategies: structured-data, structural-heuristic and DOM-scan strategies
- pipeline: ExtractionPipeline (ordered fallback, dedup by profile URL)
"""

from src.extraction.models import Candidate, ExtractionSource, RenderedPage, REDACTED_NAME
from src.extraction.strategies import (
    ExtractionStrategy,
    StructuredDataStrategy,
    StructuralHeuristicStrategy,
    DomScanStrategy,
    default_strategies,
)
from src.extraction.pipeline import ExtractionPipeline, dedupe_candidates

__all__ = [
    "Candidate",
    "ExtractionSource",
    "RenderedPage",
    "REDACTED_NAME",
    "ExtractionStrategy",
    "StructuredDataStrategy",
    "StructuralHeuristicStrategy",
    "DomScanStrategy",
    "default_strategies",
    "ExtractionPipeline",
    "dedupe_candidates",
]

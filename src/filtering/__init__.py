"""
Relevance filtering of extracted candidates.
"""

from src.filtering.text import normalize, significant_words, STOP_WORDS
from src.filtering.relevance import RelevanceFilter, FilterSettings

__all__ = [
    "normalize",
    "significant_words",
    "STOP_WORDS",
    "RelevanceFilter",
    "FilterSettings",
]

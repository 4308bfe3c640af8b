"""
Text normalization shared by the relevance rules.
"""

import re
import unicodedata
from typing import Iterable, List, Optional

STOP_WORDS = frozenset({
    # Spanish
    "de", "del", "la", "el", "en", "y", "o", "a", "al", "los", "las", "un", "una", "para", "con", "por",
    # English
    "the", "of", "and", "for", "at", "in", "to", "an", "or", "with", "on",
})

# Legal-form suffixes that say nothing about which company it is
COMPANY_STOP_WORDS = STOP_WORDS | frozenset({
    "inc", "corp", "llc", "ltd", "sas", "srl", "sapi", "gmbh", "plc", "company", "group", "grupo",
})

_PUNCT_RE = re.compile(r"[^\w\s]|_")


def strip_accents(text: str) -> str:
    decomposed = unicodedata.normalize("NFKD", text)
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


def normalize(text: Optional[str]) -> str:
    """
    Lowercase, drop accents and punctuation, collapse whitespace.

    Examples:
        >>> normalize("  Acme, Corp. ")
        'acme corp'

        >>> normalize("Gerente de Tecnología")
        'gerente de tecnologia'
    """
    if not text:
        return ""
    lowered = strip_accents(text).lower()
    return " ".join(_PUNCT_RE.sub(" ", lowered).split())


def significant_words(text: Optional[str], stop_words: Iterable[str] = STOP_WORDS) -> List[str]:
    """
    Distinct words longer than two characters that are not stop words, in order.

    Example:
        >>> significant_words("Director de Marketing y Ventas")
        ['director', 'marketing', 'ventas']
    """
    stop = set(stop_words)
    words: List[str] = []
    for word in normalize(text).split():
        if len(word) > 2 and word not in stop and word not in words:
            words.append(word)
    return words


def contains_either(a: str, b: str) -> bool:
    """True when one normalized string contains the other."""
    if not a or not b:
        return False
    return a in b or b in a

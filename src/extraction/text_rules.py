"""
Ordered text-pattern rules for result-card text blocks.

A result card has no stable structural markers for its fields, only a
handful of free-text blocks in a roughly fixed order (name, headline,
location, "Current: ..." summary) mixed with connection-degree badges,
follower counts and button labels. These rules drop the noise and
assign the remaining blocks to title, employer and location.
"""

import re
from typing import Iterable, Optional, Tuple

from src.extraction.keywords import (
    ACTION_LABELS,
    CONNECTION_DEGREE_RE,
    CURRENT_PREFIX_RE,
    EMPLOYER_SEPARATOR_RE,
    HEADLINE_SEGMENT_RE,
    LOCATION_KEYWORDS,
    LOCATION_QUALIFIERS,
    NAME_SUFFIX_RE,
    NOISE_RE,
    PAST_PREFIX_RE,
    REDACTED_NAME_RE,
    ROLE_KEYWORDS,
)
from src.extraction.models import REDACTED_NAME

_WORD_RE = re.compile(r"[\wáéíóúñü+-]+", re.I)

_LOCATION_START_RE = re.compile(
    r"^(?:" + "|".join(re.escape(k) for k in sorted(LOCATION_KEYWORDS, key=len, reverse=True)) + r")\b",
    re.I,
)

# "Monterrey, Nuevo León" / "Austin, Texas, United States"
_CITY_REGION_RE = re.compile(r"^[A-ZÁÉÍÓÚÑ][^,\d]{1,40}(?:,\s*[A-ZÁÉÍÓÚÑ][^,\d]{1,40}){1,2}$")

_VIEW_PROFILE_RE = re.compile(r"\bview\s+.+?['’]s?\s+profile\b|\bver el perfil de\b.*$", re.I)


def squash(text: Optional[str]) -> str:
    return " ".join((text or "").split())


def clean_name(text: Optional[str]) -> str:
    """
    Strip degree badges and screen-reader suffixes from a name.

    Examples:
        >>> clean_name("Jane Doe • 2nd")
        'Jane Doe'

        >>> clean_name("LinkedIn Member")
        'LinkedIn Member'
    """
    name = squash(text)
    name = _VIEW_PROFILE_RE.sub("", name)
    name = NAME_SUFFIX_RE.sub("", name).strip()
    if REDACTED_NAME_RE.match(name):
        return REDACTED_NAME
    return name


def name_from_slug(slug: str) -> str:
    """
    Best-effort display name from a profile slug.

    Example:
        >>> name_from_slug("jane-doe-1a2b3c")
        'Jane Doe'
    """
    parts = [p for p in slug.split("-") if p]
    while parts and any(ch.isdigit() for ch in parts[-1]):
        parts.pop()
    if not parts or slug.lower().startswith("acoa"):
        return REDACTED_NAME
    return " ".join(p.capitalize() for p in parts)


def _words(text: str) -> Iterable[str]:
    return (w.lower() for w in _WORD_RE.findall(text))


def has_role_keyword(text: str) -> bool:
    lowered = text.lower()
    words = set(_words(text))
    for keyword in ROLE_KEYWORDS:
        if " " in keyword or "-" in keyword:
            if keyword in lowered:
                return True
        elif keyword in words:
            return True
    return False


def is_noise(text: str) -> bool:
    """Connection badges, button labels, follower counts, past roles."""
    if len(text) < 2:
        return True
    if text.lower() in ACTION_LABELS:
        return True
    if CONNECTION_DEGREE_RE.match(text):
        return True
    if PAST_PREFIX_RE.match(text):
        return True
    return bool(NOISE_RE.search(text))


def looks_like_location(text: str) -> bool:
    if len(text) > 80 or has_role_keyword(text):
        return False
    if _LOCATION_START_RE.match(text):
        return True
    if LOCATION_QUALIFIERS.search(text) and len(text) <= 60:
        return True
    return bool(_CITY_REGION_RE.match(text))


def split_headline(text: str) -> Tuple[str, Optional[str]]:
    """
    Split a headline into (role, employer).

    Only the first "|" segment is considered and the last "at"/"en"/"@"
    separator inside it is used, so "Especialista en Marketing en Acme"
    keeps its role intact.

    Examples:
        >>> split_headline("Senior Marketing Manager at Acme Corporation")
        ('Senior Marketing Manager', 'Acme Corporation')

        >>> split_headline("Gerente de Ventas en Acme | Speaker")
        ('Gerente de Ventas', 'Acme')

        >>> split_headline("Growth hacker")
        ('Growth hacker', None)
    """
    text = squash(text)
    segment = HEADLINE_SEGMENT_RE.split(text)[0]
    matches = list(EMPLOYER_SEPARATOR_RE.finditer(segment))
    if not matches:
        return segment, None
    last = matches[-1]
    role = segment[:last.start()].strip(" ,-")
    employer = segment[last.end():].strip(" ,-")
    if not role or not employer:
        return segment, None
    return role, employer


def classify_blocks(
    blocks: Iterable[str],
    name: Optional[str] = None,
) -> Tuple[Optional[str], Optional[str], Optional[str]]:
    """
    Assign card text blocks to (title, company, location).

    Rules, in order, for each block:
      1. skip the name itself and noise blocks
      2. "Current: X at Y" sets the current role and employer
      3. the first location-shaped block is the location
      4. the first remaining block longer than 3 characters is the headline
    A "Current:" line wins over the headline.
    """
    headline_title = headline_company = None
    current_title = current_company = None
    location = None
    name_key = squash(name).lower() if name else None

    for raw in blocks:
        block = squash(raw)
        if not block or (name_key and clean_name(block).lower() == name_key) or is_noise(block):
            continue

        current = CURRENT_PREFIX_RE.match(block)
        if current:
            role, employer = split_headline(block[current.end():])
            current_title = current_title or role
            current_company = current_company or employer
            continue

        if location is None and looks_like_location(block):
            location = block
            continue

        if headline_title is None and len(block) > 3:
            headline_title, headline_company = split_headline(block)

    return (
        current_title or headline_title,
        current_company or headline_company,
        location,
    )

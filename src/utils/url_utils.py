"""
URL utility functions for the profile harvester.

This module provides profile URL canonicalization, search URL construction
and general URL validation.
"""

import re
from typing import Optional
from urllib.parse import quote, urljoin, urlparse, unquote

from src.core.logging import get_logger

logger = get_logger(__name__)

LINKEDIN_BASE = "https://www.linkedin.com"
MEMBER_ID_PREFIX = "ACoA"
PEOPLE_SEARCH_URL = f"{LINKEDIN_BASE}/search/results/people/"

_PROFILE_PATH_RE = re.compile(r"^/in/([^/?#]+)/?")


def validate_url(url: str) -> bool:
    """
    Check if URL is valid and complete.

    Args:
        url: URL to validate

    Returns:
        True if URL has scheme and netloc, False otherwise

    Examples:
        >>> validate_url("https://www.linkedin.com/in/jane-doe")
        True

        >>> validate_url("/in/jane-doe")
        False
    """
    if not url:
        return False

    try:
        parsed = urlparse(url)
        return bool(parsed.scheme in ("http", "https") and parsed.netloc)
    except Exception:
        return False


def is_linkedin_host(host: str) -> bool:
    host = (host or "").lower().split(":")[0]
    return host == "linkedin.com" or host.endswith(".linkedin.com")


def normalize_profile_url(href: str, base_url: str = LINKEDIN_BASE) -> Optional[str]:
    """
    Canonicalize a profile link into the deduplication key.

    Relative links are resolved against base_url, country subdomains are
    folded into www, query strings and fragments are dropped, and vanity slugs
    are lowercased without a trailing slash. Opaque member ids (ACoA...)
    keep their case.

    Args:
        href: Raw href from the page (absolute or relative)
        base_url: URL of the page the link was found on

    Returns:
        Canonical https://www.linkedin.com/in/<slug> URL, or None if href
        does not point at a profile

    Examples:
        >>> normalize_profile_url("/in/Jane-Doe-123/?miniProfileUrn=abc")
        'https://www.linkedin.com/in/jane-doe-123'

        >>> normalize_profile_url("https://mx.linkedin.com/in/juan-perez/")
        'https://www.linkedin.com/in/juan-perez'

        >>> normalize_profile_url("/in/ACoAABcDeFg/")
        'https://www.linkedin.com/in/ACoAABcDeFg'

        >>> normalize_profile_url("/company/acme") is None
        True
    """
    if not href:
        return None

    href = href.strip()
    try:
        absolute = urljoin(base_url or LINKEDIN_BASE, href)
        parsed = urlparse(absolute)
    except Exception as e:
        logger.debug(f"Unparseable profile href {href!r}: {e}")
        return None

    if parsed.scheme not in ("http", "https") or not is_linkedin_host(parsed.netloc):
        return None

    match = _PROFILE_PATH_RE.match(parsed.path)
    if not match:
        return None

    slug = unquote(match.group(1)).strip()
    if not slug:
        return None
    # Opaque member ids are case-sensitive; only vanity slugs fold case
    if not slug.startswith(MEMBER_ID_PREFIX):
        slug = slug.lower()

    return f"{LINKEDIN_BASE}/in/{quote(slug, safe='-_.~')}"


def is_profile_url(url: Optional[str]) -> bool:
    """True when url is an absolute link to a member profile."""
    if not url or not validate_url(url):
        return False
    parsed = urlparse(url)
    return is_linkedin_host(parsed.netloc) and bool(_PROFILE_PATH_RE.match(parsed.path))


def slug_of(profile_url: str) -> str:
    """Return the profile slug (the part after /in/)."""
    match = _PROFILE_PATH_RE.match(urlparse(profile_url).path)
    return match.group(1) if match else ""


def build_search_url(company: str, role: str) -> str:
    """
    Build the people-search URL for one (company, role) pair.

    Both terms are quoted so the site treats them as phrases.

    Example:
        >>> build_search_url("Acme Corp", "Marketing Manager")
        'https://www.linkedin.com/search/results/people/?keywords=%22Acme%20Corp%22%20%22Marketing%20Manager%22'
    """
    keywords = f'"{company.strip()}" "{role.strip()}"'
    return f"{PEOPLE_SEARCH_URL}?keywords={quote(keywords, safe='')}"


def is_login_url(url: Optional[str]) -> bool:
    """True when url is one of the sign-in pages the site redirects to."""
    if not url:
        return False
    path = urlparse(url).path.lower()
    return (
        path.startswith("/login")
        or path.startswith("/uas/login")
        or path.startswith("/authwall")
        or path.startswith("/signup")
    )


def is_checkpoint_url(url: Optional[str]) -> bool:
    """True when url is a security checkpoint or challenge page."""
    if not url:
        return False
    path = urlparse(url).path.lower()
    return path.startswith("/checkpoint") or "/challenge" in path

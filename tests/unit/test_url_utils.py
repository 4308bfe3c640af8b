"""
Unit tests for URL utility functions.
"""

import pytest
from urllib.parse import unquote

from src.utils.url_utils import (
    validate_url,
    normalize_profile_url,
    is_profile_url,
    slug_of,
    build_search_url,
    is_login_url,
    is_checkpoint_url,
)


class TestNormalizeProfileUrl:
    """Tests for normalize_profile_url function."""

    @pytest.mark.parametrize("href,expected", [
        ("https://www.linkedin.com/in/jane-doe-1a2b3c/", "https://www.linkedin.com/in/jane-doe-1a2b3c"),
        ("https://www.linkedin.com/in/Jane-Doe-1a2b3c?trk=abc#x", "https://www.linkedin.com/in/jane-doe-1a2b3c"),
        ("https://mx.linkedin.com/in/juan-perez/", "https://www.linkedin.com/in/juan-perez"),
        ("http://linkedin.com/in/juan-perez", "https://www.linkedin.com/in/juan-perez"),
        ("/in/carlos-ruiz/?miniProfileUrn=urn", "https://www.linkedin.com/in/carlos-ruiz"),
        ("https://www.linkedin.com/in/jane-doe/recent-activity/", "https://www.linkedin.com/in/jane-doe"),
    ])
    def test_canonical_forms(self, href, expected):
        """Test that variants of one profile collapse to one key."""
        assert normalize_profile_url(href) == expected

    @pytest.mark.parametrize("href", [
        None,
        "",
        "/company/acme/",
        "/search/results/people/?keywords=x",
        "https://example.com/in/jane-doe",
        "mailto:jane@example.com",
    ])
    def test_non_profiles(self, href):
        """Test that non-profile links return None."""
        assert normalize_profile_url(href) is None

    def test_relative_to_page(self):
        """Test resolution against the page URL."""
        base = "https://www.linkedin.com/search/results/people/?keywords=acme"
        assert normalize_profile_url("/in/jane/", base) == "https://www.linkedin.com/in/jane"

    def test_member_ids_keep_case(self):
        """Test that opaque member ids are not lowercased."""
        assert normalize_profile_url("https://www.linkedin.com/in/ACoAABcDeFgHiJk?x") == (
            "https://www.linkedin.com/in/ACoAABcDeFgHiJk"
        )
        assert normalize_profile_url("/in/ACoAAAbc/") != normalize_profile_url("/in/ACoAAABC/")


class TestProfileHelpers:
    """Tests for is_profile_url, slug_of and validate_url."""

    def test_is_profile_url(self):
        """Test absolute profile detection."""
        assert is_profile_url("https://www.linkedin.com/in/jane") is True
        assert is_profile_url("/in/jane") is False
        assert is_profile_url("https://www.linkedin.com/company/acme") is False

    def test_slug_of(self):
        """Test slug extraction."""
        assert slug_of("https://www.linkedin.com/in/jane-doe-1a2b3c") == "jane-doe-1a2b3c"
        assert slug_of("https://www.linkedin.com/feed/") == ""

    def test_validate_url(self):
        """Test URL completeness check."""
        assert validate_url("https://www.linkedin.com/feed/") is True
        assert validate_url("www.linkedin.com") is False
        assert validate_url("") is False


class TestSearchUrl:
    """Tests for build_search_url function."""

    def test_quotes_both_terms(self):
        """Test that company and role are quoted phrases."""
        url = build_search_url("Acme Corp", "Marketing Manager")
        assert url.startswith("https://www.linkedin.com/search/results/people/?keywords=")
        assert unquote(url.split("keywords=", 1)[1]) == '"Acme Corp" "Marketing Manager"'

    def test_escapes_special_characters(self):
        """Test that ampersands and accents do not break the query."""
        url = build_search_url("Procter & Gamble", "Gerente de Producción")
        query = url.split("keywords=", 1)[1]
        assert "&" not in query
        assert " " not in query
        assert unquote(query) == '"Procter & Gamble" "Gerente de Producción"'

    def test_strips_whitespace(self):
        """Test that surrounding whitespace is dropped."""
        assert build_search_url(" Acme ", " CTO ") == build_search_url("Acme", "CTO")


class TestRedirectDetection:
    """Tests for is_login_url and is_checkpoint_url."""

    @pytest.mark.parametrize("url", [
        "https://www.linkedin.com/login?session_redirect=%2Ffeed%2F",
        "https://www.linkedin.com/uas/login",
        "https://www.linkedin.com/authwall?trk=abc",
        "https://www.linkedin.com/signup/cold-join",
    ])
    def test_login_urls(self, url):
        """Test sign-in pages."""
        assert is_login_url(url) is True

    def test_feed_is_not_login(self):
        """Test that ordinary pages are not sign-in pages."""
        assert is_login_url("https://www.linkedin.com/feed/") is False
        assert is_login_url(None) is False

    def test_checkpoint_urls(self):
        """Test challenge pages."""
        assert is_checkpoint_url("https://www.linkedin.com/checkpoint/challenge/AgG1") is True
        assert is_checkpoint_url("https://www.linkedin.com/feed/") is False

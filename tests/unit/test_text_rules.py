"""
Unit tests for result-card text rules.
"""

import pytest

from src.extraction.models import REDACTED_NAME
from src.extraction.text_rules import (
    classify_blocks,
    clean_name,
    has_role_keyword,
    is_noise,
    looks_like_location,
    name_from_slug,
    split_headline,
)


class TestNames:
    """Tests for clean_name and name_from_slug."""

    @pytest.mark.parametrize("raw,expected", [
        ("Jane Doe • 2nd", "Jane Doe"),
        ("  Jane   Doe ", "Jane Doe"),
        ("View Jane Doe’s profile", ""),
        ("Miembro de LinkedIn", REDACTED_NAME),
        ("linkedin member", REDACTED_NAME),
    ])
    def test_clean_name(self, raw, expected):
        assert clean_name(raw) == expected

    @pytest.mark.parametrize("slug,expected", [
        ("jane-doe-1a2b3c", "Jane Doe"),
        ("carlos-ruiz", "Carlos Ruiz"),
        ("acoaabcdefg", REDACTED_NAME),
        ("12345", REDACTED_NAME),
    ])
    def test_name_from_slug(self, slug, expected):
        assert name_from_slug(slug) == expected


class TestBlockClassifiers:
    """Tests for is_noise, has_role_keyword and looks_like_location."""

    @pytest.mark.parametrize("text", [
        "• 2nd", "3rd+", "Contacto de 2.º grado", "Connect", "Enviar mensaje",
        "500+ followers", "12 shared connections", "Past: Analyst at Globex",
    ])
    def test_noise(self, text):
        assert is_noise(text) is True

    @pytest.mark.parametrize("text", ["Marketing Manager", "Mexico City", "Jane Doe"])
    def test_not_noise(self, text):
        assert is_noise(text) is False

    def test_role_keywords_both_languages(self):
        assert has_role_keyword("Gerente de Ventas") is True
        assert has_role_keyword("Vice President, Sales") is True
        assert has_role_keyword("Guadalajara, Jalisco") is False

    @pytest.mark.parametrize("text", [
        "Mexico City",
        "Ciudad de México, México",
        "Greater Madrid Metropolitan Area",
        "Área metropolitana de Monterrey",
        "Austin, Texas, United States",
    ])
    def test_locations(self, text):
        assert looks_like_location(text) is True

    @pytest.mark.parametrize("text", [
        "Marketing Manager at Acme",
        "Head of Growth, LATAM",
        "Helping brands grow",
    ])
    def test_not_locations(self, text):
        assert looks_like_location(text) is False


class TestSplitHeadline:
    """Tests for split_headline function."""

    @pytest.mark.parametrize("text,expected", [
        ("Senior Marketing Manager at Acme Corporation", ("Senior Marketing Manager", "Acme Corporation")),
        ("Gerente de Ventas en Acme | Speaker", ("Gerente de Ventas", "Acme")),
        ("Especialista en Marketing en Acme", ("Especialista en Marketing", "Acme")),
        ("CTO @ Globex", ("CTO", "Globex")),
        ("Growth hacker", ("Growth hacker", None)),
        ("Marketing Manager | Brand strategy", ("Marketing Manager", None)),
    ])
    def test_split(self, text, expected):
        assert split_headline(text) == expected


class TestClassifyBlocks:
    """Tests for classify_blocks function."""

    def test_typical_card(self):
        """Test name, badge, headline and location."""
        blocks = ["Jane Doe", "• 2nd", "Senior Marketing Manager at Acme Corporation", "Mexico City", "Connect"]
        assert classify_blocks(blocks, "Jane Doe") == (
            "Senior Marketing Manager", "Acme Corporation", "Mexico City",
        )

    def test_name_with_badge_is_skipped(self):
        """Test that 'Name • 2nd' is not taken as the headline."""
        blocks = ["Jane Doe • 2nd", "Brand Manager at Acme"]
        assert classify_blocks(blocks, "Jane Doe")[0] == "Brand Manager"

    def test_current_line_wins(self):
        """Test that 'Current:' overrides a vague headline."""
        blocks = [
            "Helping brands grow | Speaker",
            "Monterrey, Nuevo León",
            "Current: Marketing Manager at Acme Corp",
        ]
        assert classify_blocks(blocks) == ("Marketing Manager", "Acme Corp", "Monterrey, Nuevo León")

    def test_past_line_ignored(self):
        """Test that past roles never become the title."""
        blocks = ["Past: Marketing Manager at Acme", "Freelance consultant"]
        assert classify_blocks(blocks) == ("Freelance consultant", None, None)

    def test_nothing_usable(self):
        """Test a card with only noise."""
        assert classify_blocks(["3rd+", "Follow"]) == (None, None, None)

"""
Unit tests for navigation classification.
"""

import pytest

from src.session.signals import (
    NavigationResult,
    NavigationSignal,
    classify_navigation,
    invalid_code_message,
)
from tests.fakes import BLOCK_HTML, CAPTCHA_HTML, CHECKPOINT_HTML, CHECKPOINT_URL, FEED_HTML, LOGIN_URL

SEARCH_URL = "https://www.linkedin.com/search/results/people/?keywords=%22Acme%22"


class TestClassifyNavigation:
    """Tests for classify_navigation function."""

    def test_ok(self):
        """Test an ordinary page."""
        assert classify_navigation(200, SEARCH_URL, FEED_HTML) is NavigationSignal.OK

    def test_rate_limited(self):
        """Test that 429 wins over everything else."""
        assert classify_navigation(429, CHECKPOINT_URL, CAPTCHA_HTML) is NavigationSignal.RATE_LIMITED

    def test_forbidden(self):
        """Test that 403 is its own signal."""
        assert classify_navigation(403, SEARCH_URL, "") is NavigationSignal.FORBIDDEN

    def test_login_redirect_is_cookie_expired(self):
        """Test that landing on the sign-in page means the cookie died."""
        assert classify_navigation(200, LOGIN_URL, "") is NavigationSignal.COOKIE_EXPIRED

    def test_checkpoint_with_code_form(self):
        """Test the one-time code flow."""
        assert classify_navigation(200, CHECKPOINT_URL, CHECKPOINT_HTML) is NavigationSignal.VERIFICATION_REQUIRED

    def test_checkpoint_with_captcha(self):
        """Test a checkpoint page carrying a CAPTCHA iframe."""
        assert classify_navigation(200, CHECKPOINT_URL, CAPTCHA_HTML) is NavigationSignal.CAPTCHA_REQUIRED

    @pytest.mark.parametrize("html", [
        '<div class="g-recaptcha" data-sitekey="6Lc"></div>',
        "<p>Please verify you are a human</p>",
    ])
    def test_captcha_markers_anywhere(self, html):
        """Test CAPTCHA markers on a non-checkpoint URL."""
        assert classify_navigation(200, SEARCH_URL, html) is NavigationSignal.CAPTCHA_REQUIRED

    def test_block_page(self):
        """Test a restriction notice."""
        assert classify_navigation(200, SEARCH_URL, BLOCK_HTML) is NavigationSignal.BLOCKED

    def test_verification_markers_without_checkpoint_url(self):
        """Test a code form served in place of results."""
        html = "<p>Introduce el código que te enviamos</p>"
        assert classify_navigation(200, SEARCH_URL, html) is NavigationSignal.VERIFICATION_REQUIRED

    def test_server_error_is_network(self):
        """Test that 5xx without markers is transient."""
        assert classify_navigation(502, SEARCH_URL, "Bad gateway") is NavigationSignal.NETWORK_ERROR

    def test_missing_status(self):
        """Test re-classification without a response (after submitting a code)."""
        assert classify_navigation(None, "https://www.linkedin.com/feed/", FEED_HTML) is NavigationSignal.OK


class TestNavigationResult:
    """Tests for NavigationResult helpers."""

    def test_challenge_flags(self):
        """Test ok and is_challenge."""
        result = NavigationResult(signal=NavigationSignal.CAPTCHA_REQUIRED, requested_url=SEARCH_URL)
        assert result.ok is False
        assert result.is_challenge is True
        assert result.issued is True

    def test_describe(self):
        """Test the structured description."""
        result = NavigationResult(
            signal=NavigationSignal.NETWORK_ERROR,
            requested_url=SEARCH_URL,
            url=SEARCH_URL,
            error="Navigation timeout after 45000 ms",
            metadata={"detour": True},
        )
        data = result.describe()
        assert data["signal"] == "network_error"
        assert data["error"].startswith("Navigation timeout")
        assert data["detour"] is True


class TestInvalidCodeMessage:
    """Tests for invalid_code_message function."""

    def test_english(self):
        assert invalid_code_message("The code you entered is incorrect") == "Invalid verification code"

    def test_spanish(self):
        assert invalid_code_message("El código es inválido") == "Invalid verification code"

    def test_plain_checkpoint(self):
        assert invalid_code_message(CHECKPOINT_HTML) is None

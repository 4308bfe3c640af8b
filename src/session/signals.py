"""
Typed navigation outcomes.

Every navigation is classified exactly once, here, from the response
status, the final URL and the page content. Callers branch on the
NavigationSignal and never re-inspect page text.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional

from src.utils.url_utils import is_checkpoint_url, is_login_url


class NavigationSignal(str, Enum):
    OK = "ok"
    COOKIE_EXPIRED = "cookie_expired"
    VERIFICATION_REQUIRED = "verification_required"
    CAPTCHA_REQUIRED = "captcha_required"
    BLOCKED = "blocked"
    FORBIDDEN = "forbidden"
    RATE_LIMITED = "rate_limited"
    NETWORK_ERROR = "network_error"


CHALLENGE_SIGNALS = (NavigationSignal.VERIFICATION_REQUIRED, NavigationSignal.CAPTCHA_REQUIRED)

CAPTCHA_MARKERS = (
    re.compile(r"<iframe[^>]+src=[\"'][^\"']*(?:captcha|recaptcha|hcaptcha|arkoselabs|funcaptcha)", re.I),
    re.compile(r"class=[\"'][^\"']*g-recaptcha", re.I),
    re.compile(r"\bdata-sitekey=", re.I),
    re.compile(r"id=[\"']captcha", re.I),
    re.compile(r"verify you are (?:a )?human", re.I),
)

BLOCK_MARKERS = (
    re.compile(r"cf-browser-verification", re.I),
    re.compile(r"challenge-platform", re.I),
    re.compile(r"cf-turnstile|challenges\.cloudflare\.com/turnstile", re.I),
    re.compile(r"your account has been restricted", re.I),
    re.compile(r"this account is restricted", re.I),
    re.compile(r"tu cuenta ha sido restringida", re.I),
)

VERIFICATION_MARKERS = (
    re.compile(r"<input[^>]+name=[\"'](?:pin|verificationCode)[\"']", re.I),
    re.compile(r"enter the (?:6|six)-digit code", re.I),
    re.compile(r"introduce el c[oó]digo", re.I),
)


@dataclass
class NavigationResult:
    """What a navigation produced, plus its classification."""

    signal: NavigationSignal
    requested_url: str
    url: str = ""
    status: Optional[int] = None
    content: str = ""
    issued: bool = True
    error: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.signal is NavigationSignal.OK

    @property
    def is_challenge(self) -> bool:
        return self.signal in CHALLENGE_SIGNALS

    def describe(self) -> Dict[str, Any]:
        data = {
            "signal": self.signal.value,
            "requested_url": self.requested_url,
            "url": self.url,
            "status": self.status,
        }
        if self.error:
            data["error"] = self.error
        data.update(self.metadata)
        return data


def _has_marker(content: str, markers) -> bool:
    return any(marker.search(content) for marker in markers)


def classify_navigation(status: Optional[int], url: str, content: str) -> NavigationSignal:
    """
    Classify a finished navigation.

    Order matters: HTTP status first, then redirects to sign-in or
    checkpoint pages, then CAPTCHA and block-page markers in the content.

    Examples:
        >>> classify_navigation(429, "https://www.linkedin.com/search/results/people/", "")
        <NavigationSignal.RATE_LIMITED: 'rate_limited'>

        >>> classify_navigation(200, "https://www.linkedin.com/checkpoint/challenge/abc", "")
        <NavigationSignal.VERIFICATION_REQUIRED: 'verification_required'>
    """
    content = content or ""

    if status == 429:
        return NavigationSignal.RATE_LIMITED
    if status == 403:
        return NavigationSignal.FORBIDDEN

    if is_login_url(url):
        return NavigationSignal.COOKIE_EXPIRED

    if is_checkpoint_url(url):
        if _has_marker(content, CAPTCHA_MARKERS):
            return NavigationSignal.CAPTCHA_REQUIRED
        return NavigationSignal.VERIFICATION_REQUIRED

    if _has_marker(content, CAPTCHA_MARKERS):
        return NavigationSignal.CAPTCHA_REQUIRED
    if _has_marker(content, BLOCK_MARKERS):
        return NavigationSignal.BLOCKED
    if _has_marker(content, VERIFICATION_MARKERS):
        return NavigationSignal.VERIFICATION_REQUIRED

    if status is not None and status >= 500:
        return NavigationSignal.NETWORK_ERROR

    return NavigationSignal.OK


def invalid_code_message(content: str) -> Optional[str]:
    """Error text when a checkpoint page rejected the submitted code."""
    if re.search(r"\b(?:incorrect|invalid|incorrecto|inv[aá]lido)\b", content or "", re.I):
        return "Invalid verification code"
    return None

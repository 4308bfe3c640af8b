"""
Browser session management.

Module Structure:
- signals: NavigationSignal, NavigationResult and classify_navigation
- stealth: fingerprint pools, launch args and the stealth init script
- proxy: Playwright proxy settings
- launcher: persistent Chromium context launcher (requires playwright)
- page_actions: result-page settling helpers (requires playwright)
- manager: SessionManager (requires playwright)
"""

# Export classification and fingerprinting directly (no playwright dependency)
from src.session.signals import (
    NavigationSignal,
    NavigationResult,
    classify_navigation,
)
from src.session.stealth import Fingerprint, random_fingerprint
from src.session.proxy import build_proxy_settings


# Lazy loading for playwright-dependent classes
def __getattr__(name):
    """Lazy loading for playwright-dependent classes."""
    if name in (
        "SessionManager",
        "BrowserSession",
        "VerificationChallenge",
        "VerificationResult",
    ):
        from src.session import manager
        return getattr(manager, name)

    if name == "PlaywrightLauncher":
        from src.session.launcher import PlaywrightLauncher
        return PlaywrightLauncher

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    "NavigationSignal",
    "NavigationResult",
    "classify_navigation",
    "Fingerprint",
    "random_fingerprint",
    "build_proxy_settings",
    "SessionManager",
    "BrowserSession",
    "VerificationChallenge",
    "VerificationResult",
    "PlaywrightLauncher",
]

"""
Playwright launcher for the persistent browser profile.

The profile directory keeps cookies and local storage between process
restarts, so the site sees one returning device rather than a new one per run.
"""

from pathlib import Path
from typing import Dict, Optional

from playwright.async_api import BrowserContext, Playwright, async_playwright

from src.core.logging import get_logger
from src.session.stealth import LAUNCH_ARGS, Fingerprint

logger = get_logger(__name__)


class PlaywrightLauncher:
    """Starts Playwright once and opens persistent Chromium contexts."""

    def __init__(self, headless: bool = True):
        self.headless = headless
        self._playwright: Optional[Playwright] = None

    async def launch(
        self,
        profile_dir: Path,
        fingerprint: Fingerprint,
        proxy: Optional[Dict[str, str]] = None,
    ) -> BrowserContext:
        if self._playwright is None:
            self._playwright = await async_playwright().start()

        Path(profile_dir).mkdir(parents=True, exist_ok=True)

        kwargs = {
            "headless": self.headless,
            "args": LAUNCH_ARGS,
            "user_agent": fingerprint.user_agent,
            "viewport": fingerprint.viewport,
            "locale": fingerprint.locale,
            "timezone_id": fingerprint.timezone_id,
            "extra_http_headers": fingerprint.extra_headers,
            "ignore_https_errors": True,
            "java_script_enabled": True,
        }
        if proxy:
            kwargs["proxy"] = proxy

        logger.info(
            f"[Session] Launching Chromium (headless={self.headless}, "
            f"locale={fingerprint.locale}, tz={fingerprint.timezone_id})"
        )
        return await self._playwright.chromium.launch_persistent_context(str(profile_dir), **kwargs)

    async def stop(self) -> None:
        if self._playwright is not None:
            try:
                await self._playwright.stop()
            finally:
                self._playwright = None

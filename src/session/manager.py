"""
Session Manager: one authenticated browser identity per process.

The manager owns the persistent Chromium context, injects the li_at
authentication cookie, applies the stealth fingerprint once at construction,
probes liveness before reuse, and classifies every navigation into a
NavigationSignal. Challenges (one-time code, CAPTCHA, block page) are never
retried here; they are returned to the caller. A one-time code challenge
keeps its paused page so submit_verification_code() can resume it.
"""

import random
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Optional, Sequence

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import Page
from playwright.async_api import TimeoutError as PlaywrightTimeoutError

from src.core.config import Config
from src.core.errors import (
    AccountRestrictedError,
    NetworkError,
    RateLimitedError,
    SessionConfigError,
    VerificationRequiredError,
)
from src.core.logging import get_logger
from src.session.launcher import PlaywrightLauncher
from src.session.page_actions import settle_results_page
from src.session.proxy import build_proxy_settings, new_session_id
from src.session.signals import (
    CHALLENGE_SIGNALS,
    NavigationResult,
    NavigationSignal,
    classify_navigation,
    invalid_code_message,
)
from src.session.stealth import Fingerprint, random_fingerprint
from src.utils.date_utils import utc_now
from src.utils.url_utils import is_login_url

logger = get_logger(__name__)

AUTH_COOKIE_NAME = "li_at"
AUTH_COOKIE_DOMAIN = ".linkedin.com"
MIN_TOKEN_LENGTH = 10

CODE_INPUT_SELECTORS = (
    'input[name="pin"]',
    'input[name="verificationCode"]',
    'input[type="text"][placeholder*="code"]',
    'input[id*="pin"]',
    'input[id*="code"]',
    'input[type="tel"]',
    'input[type="text"]',
)

SUBMIT_SELECTORS = (
    'button[type="submit"]',
    'button:has-text("Verify")',
    'button:has-text("Verificar")',
    'input[type="submit"]',
)


@dataclass
class BrowserSession:
    """A live authenticated identity."""

    context: Any
    page: Page
    profile_dir: Path
    fingerprint: Fingerprint
    proxy_session_id: Optional[str] = None
    search_count: int = 0
    created_at: datetime = field(default_factory=utc_now)


@dataclass
class VerificationChallenge:
    """The site is waiting for a human; page is the paused browser page."""

    signal: NavigationSignal
    page: Page
    url: str
    detected_at: datetime = field(default_factory=utc_now)

    @property
    def captcha(self) -> bool:
        return self.signal is NavigationSignal.CAPTCHA_REQUIRED


@dataclass
class VerificationResult:
    success: bool
    error: Optional[str] = None
    signal: Optional[NavigationSignal] = None


class SessionManager:
    """
    Owns the single browser identity for this process.

    Example:
        >>> sessions = SessionManager(get_config())
        >>> session = await sessions.get_session()
        >>> result = await sessions.navigate(session, build_search_url("Acme", "CTO"))
        >>> if result.ok:
        ...     html = result.content
    """

    def __init__(self, config: Config, launcher: Optional[Any] = None):
        self.config = config
        self.launcher = launcher or PlaywrightLauncher(headless=config.headless)
        self._session: Optional[BrowserSession] = None
        self._challenge: Optional[VerificationChallenge] = None

    @property
    def session(self) -> Optional[BrowserSession]:
        return self._session

    @property
    def challenge(self) -> Optional[VerificationChallenge]:
        return self._challenge

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def get_session(self) -> BrowserSession:
        """
        Return the live session, creating it on first use.

        A session whose page was redirected to a sign-in page (or died) is
        treated as COOKIE_EXPIRED: it is closed and rebuilt transparently.

        Raises:
            SessionConfigError: credential missing or rejected
            VerificationRequiredError: validation landed on a challenge
            AccountRestrictedError: validation landed on a block page
            NetworkError: browser launch or validation navigation failed
        """
        if self._session is not None:
            if await self._is_alive(self._session):
                return self._session
            logger.warning(f"[Session] Liveness probe failed ({NavigationSignal.COOKIE_EXPIRED.value}), recreating session")
            await self.invalidate_session()

        self._session = await self._create_session()
        return self._session

    async def invalidate_session(self) -> None:
        """Close the current session (if any) and forget any pending challenge."""
        session, self._session = self._session, None
        self._challenge = None
        if session is None:
            return
        try:
            await session.context.close()
            logger.info("[Session] Browser session closed")
        except Exception as e:
            logger.warning(f"[Session] Error while closing browser context: {e}")

    async def close(self) -> None:
        await self.invalidate_session()
        await self.launcher.stop()

    async def _is_alive(self, session: BrowserSession) -> bool:
        page = session.page
        try:
            if page.is_closed():
                return False
            await page.evaluate("() => true")
        except Exception as e:
            logger.debug(f"[Session] Liveness evaluate failed: {e}")
            return False
        return not is_login_url(page.url)

    async def _create_session(self) -> BrowserSession:
        token = self.config.li_at
        if not token or len(token) < MIN_TOKEN_LENGTH:
            raise SessionConfigError("LINKEDIN_LI_AT is missing or too short; supply a fresh cookie value")

        fingerprint = random_fingerprint(self.config.viewport_width, self.config.viewport_height)
        proxy_session_id = new_session_id()
        try:
            proxy = build_proxy_settings(self.config, proxy_session_id)
        except ValueError as e:
            raise SessionConfigError(str(e))

        try:
            context = await self.launcher.launch(self.config.browser_profile_dir, fingerprint, proxy)
        except PlaywrightError as e:
            raise NetworkError(f"Browser launch failed: {e}")

        try:
            await context.add_init_script(fingerprint.init_script())
            await context.add_cookies([{
                "name": AUTH_COOKIE_NAME,
                "value": token,
                "domain": AUTH_COOKIE_DOMAIN,
                "path": "/",
                "httpOnly": True,
                "secure": True,
                "sameSite": "None",
            }])
            page = context.pages[0] if context.pages else await context.new_page()
        except Exception:
            await context.close()
            raise

        session = BrowserSession(
            context=context,
            page=page,
            profile_dir=Path(self.config.browser_profile_dir),
            fingerprint=fingerprint,
            proxy_session_id=proxy_session_id if proxy else None,
        )

        logger.info(f"[Session] Validating cookie via {self.config.validation_url}")
        result = await self._goto(session, self.config.validation_url)

        if result.ok:
            await page.wait_for_timeout(random.randint(2_000, 4_000))
            logger.info("[Session] Session ready")
            return session

        if result.is_challenge:
            # Keep the page open: the challenge is resumed on it
            self._session = session
            self._challenge = VerificationChallenge(signal=result.signal, page=page, url=result.url)
            logger.warning(f"[Session] Validation hit {result.signal.value} at {result.url}")
            raise VerificationRequiredError(
                "Site requires verification before the session can be used",
                url=result.url,
                captcha=result.signal is NavigationSignal.CAPTCHA_REQUIRED,
            )

        try:
            await context.close()
        except Exception as e:
            logger.debug(f"[Session] Error closing rejected context: {e}")

        if result.signal is NavigationSignal.COOKIE_EXPIRED:
            raise SessionConfigError(
                "Authentication cookie was rejected (redirected to sign-in)", url=result.url
            )
        if result.signal in (NavigationSignal.FORBIDDEN, NavigationSignal.BLOCKED):
            raise AccountRestrictedError(
                f"Validation returned {result.signal.value}",
                url=result.url,
                status=result.status,
                signal=result.signal.value,
            )
        if result.signal is NavigationSignal.RATE_LIMITED:
            raise RateLimitedError("Validation was rate limited", url=result.url, status=result.status)
        raise NetworkError(result.error or "Validation navigation failed", url=result.url, status=result.status)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    async def _content(self, page: Page) -> str:
        try:
            return await page.content()
        except Exception as e:
            logger.debug(f"[Session] Could not read page content: {e}")
            return ""

    async def _goto(self, session: BrowserSession, url: str) -> NavigationResult:
        page = session.page
        timeout = self.config.nav_timeout_ms
        try:
            response = await page.goto(url, wait_until="domcontentloaded", timeout=timeout)
        except PlaywrightTimeoutError:
            return NavigationResult(
                signal=NavigationSignal.NETWORK_ERROR,
                requested_url=url,
                url=page.url,
                error=f"Navigation timeout after {timeout} ms",
            )
        except PlaywrightError as e:
            return NavigationResult(
                signal=NavigationSignal.NETWORK_ERROR,
                requested_url=url,
                url=page.url,
                error=str(e),
            )

        status = response.status if response is not None else None
        content = await self._content(page)
        return NavigationResult(
            signal=classify_navigation(status, page.url, content),
            requested_url=url,
            url=page.url,
            status=status,
            content=content,
        )

    async def _detour(self, session: BrowserSession) -> NavigationResult:
        logger.info(f"[Session] Detour via {self.config.detour_url} after {session.search_count - 1} searches")
        result = await self._goto(session, self.config.detour_url)
        result.metadata["detour"] = True
        if result.ok:
            await session.page.wait_for_timeout(random.randint(3_000, 6_000))
        return result

    async def navigate(self, session: BrowserSession, url: str, settle: bool = True) -> NavigationResult:
        """
        Navigate the session page to url and classify the outcome.

        Every DETOUR_EVERY-th call first visits a neutral page. If that detour
        fails, its result is returned with issued=False and the real request
        is not sent. Target-site conditions never raise.
        """
        if self._challenge is not None:
            return NavigationResult(
                signal=self._challenge.signal,
                requested_url=url,
                url=self._challenge.url,
                issued=False,
                error="Verification pending",
            )

        session.search_count += 1
        every = self.config.detour_every
        if every > 0 and session.search_count % every == 0:
            detour = await self._detour(session)
            if not detour.ok:
                detour.issued = False
                self._note_challenge(detour, session)
                return detour

        result = await self._goto(session, url)

        if result.ok and settle:
            await settle_results_page(session.page)
            result.content = await self._content(session.page)
            result.url = session.page.url
            result.signal = classify_navigation(result.status, result.url, result.content)

        self._note_challenge(result, session)
        logger.debug(f"[Session] {url} -> {result.signal.value} (status={result.status})")
        return result

    def _note_challenge(self, result: NavigationResult, session: BrowserSession) -> None:
        if result.signal in CHALLENGE_SIGNALS:
            self._challenge = VerificationChallenge(signal=result.signal, page=session.page, url=result.url)
            logger.warning(f"[Session] {result.signal.value} detected at {result.url}")

    # ------------------------------------------------------------------
    # Human-like input and verification
    # ------------------------------------------------------------------

    async def type_humanlike(self, session: BrowserSession, selector: str, text: str) -> None:
        """Type text into selector one key at a time with jittered pauses."""
        page = session.page
        await page.focus(selector)
        await page.wait_for_timeout(random.randint(200, 500))
        for char in text:
            await page.keyboard.type(char, delay=80)
            if random.random() < 0.1:
                await page.wait_for_timeout(random.randint(100, 300))

    async def _first_visible(self, page: Page, selectors: Sequence[str]) -> Optional[str]:
        for selector in selectors:
            try:
                element = await page.query_selector(selector)
                if element is not None and await element.is_visible():
                    return selector
            except PlaywrightError:
                continue
        return None

    async def submit_verification_code(self, code: str) -> VerificationResult:
        """
        Enter a one-time code on the paused checkpoint page and re-check it.

        Returns:
            VerificationResult(success=True) when the page no longer shows a
            challenge; otherwise success=False with an error message
        """
        challenge, session = self._challenge, self._session
        if challenge is None or session is None:
            return VerificationResult(success=False, error="No verification is pending")

        code = (code or "").strip()
        if not code:
            return VerificationResult(success=False, error="Verification code is empty")

        page = challenge.page
        try:
            selector = await self._first_visible(page, CODE_INPUT_SELECTORS)
            if selector is None:
                return VerificationResult(success=False, error="Verification code input not found")

            await self.type_humanlike(session, selector, code)
            await page.wait_for_timeout(random.randint(500, 1_000))

            submit = await self._first_visible(page, SUBMIT_SELECTORS)
            if submit is not None:
                await page.click(submit)
            else:
                await page.keyboard.press("Enter")

            try:
                await page.wait_for_load_state("domcontentloaded", timeout=self.config.nav_timeout_ms)
            except PlaywrightError:
                pass
            await page.wait_for_timeout(5_000)
        except PlaywrightError as e:
            logger.error(f"[Session] Verification submit failed: {e}")
            return VerificationResult(success=False, error=f"Could not submit verification code: {e}")

        return await self._evaluate_challenge_page(challenge)

    async def recheck_challenge(self) -> VerificationResult:
        """
        Re-classify the paused page without typing anything.

        Used after a CAPTCHA was solved by hand in a headed browser.
        """
        challenge = self._challenge
        if challenge is None or self._session is None:
            return VerificationResult(success=True, signal=NavigationSignal.OK)
        return await self._evaluate_challenge_page(challenge)

    async def _evaluate_challenge_page(self, challenge: VerificationChallenge) -> VerificationResult:
        page = challenge.page
        content = await self._content(page)
        signal = classify_navigation(None, page.url, content)

        if signal is NavigationSignal.OK:
            self._challenge = None
            logger.info(f"[Session] Verification accepted, now at {page.url}")
            return VerificationResult(success=True, signal=signal)

        if signal in CHALLENGE_SIGNALS:
            challenge.signal = signal
            challenge.url = page.url
            error = invalid_code_message(content) or "Verification still required"
            logger.warning(f"[Session] Verification not accepted: {error}")
            return VerificationResult(success=False, error=error, signal=signal)

        logger.error(f"[Session] Unexpected page after verification: {signal.value}")
        return VerificationResult(success=False, error=f"Unexpected page after verification: {signal.value}", signal=signal)

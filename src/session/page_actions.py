"""
Page helpers that run after a search navigation.

The results list renders lazily, so the page is given a chance to settle
and is scrolled a little before its HTML is captured.
"""

import random
from typing import Sequence

from playwright.async_api import Page

from src.core.logging import get_logger

logger = get_logger(__name__)

RESULT_SELECTORS = (
    'a[href*="/in/"]',
    '[role="listitem"]',
    ".reusable-search__result-container",
    '[class*="search-result"]',
)


async def wait_for_any_selector(page: Page, selectors: Sequence[str], timeout_ms: int = 10_000) -> bool:
    """Wait until one of selectors is attached. Returns False on timeout."""
    combined = ", ".join(selectors)
    try:
        await page.wait_for_selector(combined, timeout=timeout_ms)
        return True
    except Exception:
        return False


async def settle_results_page(page: Page) -> None:
    """
    Let a search results page finish rendering.

    Waits for network idle, waits for a result element, then scrolls down
    and back so lazily rendered cards are attached to the DOM.
    """
    try:
        await page.wait_for_load_state("networkidle", timeout=15_000)
    except Exception:
        pass

    await page.wait_for_timeout(2_000)

    if not await wait_for_any_selector(page, RESULT_SELECTORS):
        logger.debug("[Session] No result selector appeared before timeout")

    for offset in (500, 300):
        try:
            await page.evaluate("(y) => window.scrollBy(0, y)", offset)
        except Exception:
            break
        await page.wait_for_timeout(random.randint(800, 1_500))

    try:
        await page.evaluate("() => window.scrollTo(0, 0)")
    except Exception:
        pass
    await page.wait_for_timeout(random.randint(400, 900))

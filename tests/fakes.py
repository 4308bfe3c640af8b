"""
In-memory stand-ins for the Playwright objects the session manager drives.

A FakePage answers goto() from a routing table: each requested URL maps to
one or more Route entries (consumed in order, the last one repeats). Pages
without a route for a URL serve the default route (an ordinary feed page).
"""

from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

FEED_URL = "https://www.linkedin.com/feed/"
CHECKPOINT_URL = "https://www.linkedin.com/checkpoint/challenge/AgG1x9"
LOGIN_URL = "https://www.linkedin.com/login?session_redirect=%2Ffeed%2F"

FEED_HTML = "<html><body><main><h1>Feed</h1><p>Welcome back</p></main></body></html>"

CHECKPOINT_HTML = """
<html><body>
  <h1>Let's do a quick security check</h1>
  <p>Enter the 6-digit code we sent to j***@example.com</p>
  <form><input name="pin" id="input__email_verification_pin" type="text">
  <button type="submit">Submit</button></form>
</body></html>
"""

WRONG_CODE_HTML = CHECKPOINT_HTML.replace(
    "<h1>", "<p class='error'>The verification code you entered is incorrect.</p><h1>"
)

CAPTCHA_HTML = """
<html><body><h1>Security verification</h1>
<iframe src="https://client-api.arkoselabs.com/fc/gc/?token=abc"></iframe>
</body></html>
"""

BLOCK_HTML = "<html><body><h1>Your account has been restricted</h1></body></html>"

CODE_PAGE_SELECTORS = {'input[name="pin"]', 'button[type="submit"]'}


@dataclass
class Route:
    status: Optional[int] = 200
    html: str = FEED_HTML
    url: Optional[str] = None
    error: Optional[Exception] = None


class FakeResponse:
    def __init__(self, status: Optional[int]):
        self.status = status


class FakeElement:
    def __init__(self, visible: bool = True):
        self.visible = visible

    async def is_visible(self) -> bool:
        return self.visible


class FakeKeyboard:
    def __init__(self, page: "FakePage"):
        self.page = page
        self.typed: List[str] = []
        self.pressed: List[str] = []

    async def type(self, text: str, delay: Optional[int] = None) -> None:
        self.typed.append(text)

    async def press(self, key: str) -> None:
        self.pressed.append(key)
        self.page._submitted()

    @property
    def text(self) -> str:
        return "".join(self.typed)


class FakePage:
    def __init__(self, routes: Optional[Dict[str, List[Route]]] = None, default: Optional[Route] = None):
        self.routes: Dict[str, List[Route]] = dict(routes or {})
        self.default = default or Route()
        self.url = "about:blank"
        self.html = ""
        self.visited: List[str] = []
        self.closed = False
        self.alive = True
        self.selectors = set()
        self.keyboard = FakeKeyboard(self)
        self.focused: Optional[str] = None
        self.clicked: List[str] = []
        self.on_submit: Optional[Callable[["FakePage"], None]] = None

    def route(self, url: str, *responses: Route) -> "FakePage":
        self.routes[url] = list(responses)
        return self

    def show(self, url: str, html: str) -> None:
        """Put the page on url with html, as if the site navigated it."""
        self.url = url
        self.html = html

    def _next_route(self, url: str) -> Route:
        queue = self.routes.get(url)
        if not queue:
            return self.default
        return queue.pop(0) if len(queue) > 1 else queue[0]

    def _submitted(self) -> None:
        if self.on_submit is not None:
            self.on_submit(self)

    async def goto(self, url: str, wait_until: Optional[str] = None, timeout: Optional[int] = None):
        self.visited.append(url)
        route = self._next_route(url)
        if route.error is not None:
            raise route.error
        self.url = route.url or url
        self.html = route.html
        return FakeResponse(route.status)

    async def content(self) -> str:
        return self.html

    async def wait_for_timeout(self, ms: int) -> None:
        return None

    async def wait_for_load_state(self, state: Optional[str] = None, timeout: Optional[int] = None) -> None:
        return None

    async def wait_for_selector(self, selector: str, timeout: Optional[int] = None) -> None:
        return None

    async def evaluate(self, script: str, arg=None):
        if not self.alive:
            raise RuntimeError("Target page, context or browser has been closed")
        return True

    def is_closed(self) -> bool:
        return self.closed

    async def query_selector(self, selector: str) -> Optional[FakeElement]:
        return FakeElement() if selector in self.selectors else None

    async def focus(self, selector: str) -> None:
        self.focused = selector

    async def click(self, selector: str) -> None:
        self.clicked.append(selector)
        self._submitted()


class FakeContext:
    def __init__(self, page: FakePage):
        self.page = page
        self.pages = [page]
        self.cookies: List[dict] = []
        self.init_scripts: List[str] = []
        self.closed = False

    async def add_init_script(self, script: str) -> None:
        self.init_scripts.append(script)

    async def add_cookies(self, cookies: List[dict]) -> None:
        self.cookies.extend(cookies)

    async def new_page(self) -> FakePage:
        return self.page

    async def close(self) -> None:
        self.closed = True
        self.page.closed = True


class FakeLauncher:
    """Hands out the given pages in order, then blank ones."""

    def __init__(self, *pages: FakePage):
        self._pages = list(pages)
        self.contexts: List[FakeContext] = []
        self.launch_args: List[dict] = []
        self.stopped = False

    @property
    def launches(self) -> int:
        return len(self.contexts)

    async def launch(self, profile_dir, fingerprint, proxy=None) -> FakeContext:
        page = self._pages.pop(0) if self._pages else FakePage()
        context = FakeContext(page)
        self.contexts.append(context)
        self.launch_args.append({"profile_dir": profile_dir, "fingerprint": fingerprint, "proxy": proxy})
        return context

    async def stop(self) -> None:
        self.stopped = True


class FakeSink:
    """Candidate sink that keeps rows in memory."""

    def __init__(self, existing=(), fail_on=()):
        self.existing = set(existing)
        self.fail_on = set(fail_on)
        self.created = []

    def exists(self, profile_url: str) -> bool:
        return profile_url in self.existing

    def create(self, candidate, context) -> None:
        if candidate.profile_url in self.fail_on:
            raise RuntimeError("sink unavailable")
        self.existing.add(candidate.profile_url)
        self.created.append((candidate, context))


class FakeSource:
    """Search-unit source with a fixed plan and in-memory checkpoints."""

    def __init__(self, units, stale=None, fail_mark=False):
        self.units = list(units)
        self.stale = stale
        self.fail_mark = fail_mark
        self.should_search_calls: List[str] = []
        self.marked: Dict[str, object] = {}

    def search_units(self):
        return list(self.units)

    def should_search(self, company_id: str) -> bool:
        self.should_search_calls.append(company_id)
        return True if self.stale is None else company_id in self.stale

    def mark_scraped(self, company_id: str, timestamp) -> None:
        if self.fail_mark:
            raise OSError("checkpoint store unavailable")
        self.marked[company_id] = timestamp

"""
Browser fingerprint randomization and automation-marker suppression.

A Fingerprint is drawn once per session and stays fixed for its lifetime;
the init script runs before any page script on every document.
"""

import random
from dataclasses import dataclass, field
from typing import Dict, List, Optional


UA_POOL = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/130.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 14_6) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/130.0.0.0 Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/131.0.0.0 Safari/537.36",
]

TIMEZONES = [
    "America/New_York",
    "America/Los_Angeles",
    "America/Chicago",
    "Europe/London",
    "Europe/Paris",
]

LOCALES = ["en-US", "en-GB", "en-CA"]

LAUNCH_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-blink-features=AutomationControlled",
    "--disable-infobars",
    "--disable-notifications",
]

STEALTH_INIT_SCRIPT = """
Object.defineProperty(navigator, 'webdriver', { get: () => undefined });

Object.defineProperty(navigator, 'plugins', {
  get: () => [
    { name: 'Chrome PDF Plugin', filename: 'internal-pdf-viewer', description: 'Portable Document Format' },
    { name: 'Chrome PDF Viewer', filename: 'mhjfbmdgcfjbbpaeojofohoefgiehjai', description: '' },
    { name: 'Native Client', filename: 'internal-nacl-plugin', description: '' }
  ]
});

Object.defineProperty(navigator, 'languages', { get: () => %(languages)s });

window.chrome = window.chrome || { runtime: {}, loadTimes: function () {}, csi: function () {}, app: {} };

const originalQuery = window.navigator.permissions && window.navigator.permissions.query;
if (originalQuery) {
  window.navigator.permissions.query = (parameters) => (
    parameters.name === 'notifications'
      ? Promise.resolve({ state: Notification.permission })
      : originalQuery(parameters)
  );
}

const getParameter = WebGLRenderingContext.prototype.getParameter;
WebGLRenderingContext.prototype.getParameter = function (parameter) {
  if (parameter === 37445) { return 'Intel Inc.'; }
  if (parameter === 37446) { return 'Intel Iris OpenGL Engine'; }
  return getParameter.call(this, parameter);
};

Object.defineProperty(navigator, 'userAgent', {
  get: () => %(user_agent)s
});
"""


@dataclass
class Fingerprint:
    """Device signals presented by one browser identity."""

    user_agent: str
    timezone_id: str
    locale: str
    viewport: Dict[str, int]
    extra_headers: Dict[str, str] = field(default_factory=dict)

    @property
    def languages(self) -> List[str]:
        base = self.locale.split("-")[0]
        return [self.locale, base] if base != self.locale else [self.locale]

    def init_script(self) -> str:
        user_agent = self.user_agent.replace("HeadlessChrome", "Chrome")
        languages = "[" + ", ".join(f"'{lang}'" for lang in self.languages) + "]"
        return STEALTH_INIT_SCRIPT % {
            "languages": languages,
            "user_agent": repr(user_agent),
        }


def random_fingerprint(
    viewport_width: int = 1920,
    viewport_height: int = 1080,
    rng: Optional[random.Random] = None,
) -> Fingerprint:
    """Draw a user-agent, timezone and locale; keep the configured viewport."""
    rng = rng or random.Random()
    locale = rng.choice(LOCALES)
    return Fingerprint(
        user_agent=rng.choice(UA_POOL),
        timezone_id=rng.choice(TIMEZONES),
        locale=locale,
        viewport={"width": viewport_width, "height": viewport_height},
        extra_headers={
            "Accept-Language": f"{locale},{locale.split('-')[0]};q=0.9",
            "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8",
            "Sec-Fetch-Dest": "document",
            "Sec-Fetch-Mode": "navigate",
            "Sec-Fetch-Site": "none",
            "Sec-Fetch-User": "?1",
            "Upgrade-Insecure-Requests": "1",
        },
    )

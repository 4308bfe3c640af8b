"""
Profile harvester test suite.

Structure:
- unit/: fast, isolated tests (no browser, no network)
- integration/: the harvest loop wired to in-memory Playwright fakes
- fixtures/: saved people-search result pages
- fakes.py: FakePage / FakeContext / FakeLauncher, sinks and sources
"""

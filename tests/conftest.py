"""
Pytest Configuration and Shared Fixtures

This file contains pytest configuration and fixtures that are available
to all tests in the test suite.
"""

import pytest
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable

from src.core.config import Config
from src.core.error_logger import ErrorLogger, set_error_logger
from src.extraction.models import Candidate, ExtractionSource
from src.ledger.ledger import RateLimitLedger

VALID_LI_AT = "AQEDAQ-test-cookie-value-0123456789"


# ============================================================================
# Paths and Directories
# ============================================================================

@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def read_fixture(fixtures_dir: Path) -> Callable[[str], str]:
    """Return a reader for HTML fixtures by file name."""
    def _read(name: str) -> str:
        return (fixtures_dir / name).read_text(encoding="utf-8")
    return _read


# ============================================================================
# Configuration
# ============================================================================

@pytest.fixture
def make_config(tmp_path: Path, monkeypatch) -> Callable[..., Config]:
    """
    Build a Config whose files all live under tmp_path.

    Values are set through monkeypatch so nothing leaks between tests;
    keyword overrides use the environment variable names.
    """
    def _make(**overrides: str) -> Config:
        env = {
            "LINKEDIN_LI_AT": VALID_LI_AT,
            "LEDGER_FILE": str(tmp_path / "data" / "rate_limit.json"),
            "BROWSER_PROFILE_DIR": str(tmp_path / "profile"),
            "CHECKPOINT_FILE": str(tmp_path / "data" / "checkpoints.json"),
            "COMPANIES_FILE": str(tmp_path / "companies.txt"),
            "ROLES_FILE": str(tmp_path / "roles.txt"),
            "CANDIDATES_FILE": str(tmp_path / "out" / "candidates.jsonl"),
            "LOG_DIR": str(tmp_path / "logs"),
            "SUPABASE_ENABLED": "0",
            "CANDIDATE_SINK": "jsonl",
            "PROXY_ENABLED": "0",
            "DAILY_LIMIT": "40",
            "MIN_DELAY_MS": "1000",
            "MAX_DELAY_MS": "2000",
            "DETOUR_EVERY": "5",
        }
        env.update(overrides)
        for key, value in env.items():
            monkeypatch.setenv(key, value)
        return Config(env_path=tmp_path / "no-such.env")

    return _make


@pytest.fixture
def config(make_config) -> Config:
    """Config with defaults suitable for tests."""
    return make_config()


# ============================================================================
# Clock and Ledger
# ============================================================================

class FakeClock:
    """Settable UTC clock."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    """Clock fixed at 2026-03-10 12:00 UTC."""
    return FakeClock(datetime(2026, 3, 10, 12, 0, tzinfo=timezone.utc))


@pytest.fixture
def ledger_path(tmp_path: Path) -> Path:
    return tmp_path / "data" / "rate_limit.json"


@pytest.fixture
def ledger(ledger_path: Path, clock: FakeClock) -> RateLimitLedger:
    """Ledger with a 40/day limit and 30 minute doubling backoff."""
    return RateLimitLedger(
        ledger_path,
        daily_limit=40,
        backoff_base=timedelta(minutes=30),
        backoff_multiplier=2.0,
        min_delay_s=1.0,
        max_delay_s=2.0,
        clock=clock,
    )


# ============================================================================
# Sample Data Fixtures
# ============================================================================

@pytest.fixture
def make_candidate() -> Callable[..., Candidate]:
    """Return a Candidate factory with sensible defaults."""
    def _make(**fields) -> Candidate:
        data = {
            "name": "Jane Doe",
            "profile_url": "https://www.linkedin.com/in/jane-doe-1a2b3c",
            "title": "Senior Marketing Manager",
            "company": "Acme Corporation",
            "location": "Mexico City",
            "extraction_source": ExtractionSource.STRUCTURED_DATA,
        }
        data.update(fields)
        return Candidate(**data)
    return _make


# ============================================================================
# Mock Fixtures
# ============================================================================

@pytest.fixture(autouse=True)
def file_error_logger(tmp_path: Path):
    """Route the global error logger to a temporary JSONL directory."""
    error_logger = ErrorLogger(fallback_dir=tmp_path / "errors")
    set_error_logger(error_logger)
    yield error_logger
    set_error_logger(None)


@pytest.fixture
def mock_supabase_client():
    """In-memory Supabase client supporting the calls the sinks make."""
    class Result:
        def __init__(self, data):
            self.data = data

    class MockQuery:
        def __init__(self, table):
            self.table = table
            self.filters = []
            self.row_limit = None
            self.pending = None

        def select(self, *args):
            return self

        def eq(self, field, value):
            self.filters.append((field, value))
            return self

        def limit(self, n):
            self.row_limit = n
            return self

        def upsert(self, rows, on_conflict=None):
            self.pending = ("upsert", rows, on_conflict)
            return self

        def insert(self, rows):
            self.pending = ("insert", rows if isinstance(rows, list) else [rows], None)
            return self

        def execute(self):
            if self.pending is not None:
                op, rows, key = self.pending
                self.table.calls.append(op)
                for row in rows:
                    if key:
                        self.table.rows = [r for r in self.table.rows if r.get(key) != row.get(key)]
                    self.table.rows.append(dict(row))
                return Result(rows)
            data = [r for r in self.table.rows if all(r.get(f) == v for f, v in self.filters)]
            if self.row_limit is not None:
                data = data[:self.row_limit]
            return Result(data)

    class MockTable:
        def __init__(self):
            self.rows = []
            self.calls = []

    class MockClient:
        def __init__(self):
            self.tables = {}

        def table(self, name: str):
            if name not in self.tables:
                self.tables[name] = MockTable()
            return MockQuery(self.tables[name])

    return MockClient()


# ============================================================================
# Test Markers
# ============================================================================

def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )

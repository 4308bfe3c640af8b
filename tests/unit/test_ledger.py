"""
Unit tests for the persisted rate-limit ledger.
"""

import json
from datetime import timedelta

import pytest

from src.ledger import DenyReason, FailureKind, RateLimitLedger, RateLimitState


class TestAdmission:
    """Tests for check_admission()."""

    def test_fresh_ledger_admits(self, ledger):
        """A new ledger allows requests and creates its file."""
        decision = ledger.check_admission()
        assert decision.allowed is True
        assert decision.reason is None
        assert ledger.path.exists()

    def test_daily_limit_denies(self, ledger):
        """requestCount >= dailyLimit with no backoff denies with daily_limit."""
        for _ in range(40):
            ledger.record_request()

        decision = ledger.check_admission()
        assert decision.allowed is False
        assert decision.reason is DenyReason.DAILY_LIMIT

    def test_daily_limit_retry_after_is_next_midnight(self, ledger):
        """Quota denial retries at the next UTC midnight."""
        for _ in range(40):
            ledger.record_request()

        decision = ledger.check_admission()
        # Clock is 12:00 UTC
        assert decision.retry_after == timedelta(hours=12)

    def test_below_limit_admits(self, ledger):
        """One request under the limit is still admitted."""
        for _ in range(39):
            ledger.record_request()
        assert ledger.check_admission().allowed is True
        assert ledger.remaining() == 1

    def test_backoff_denies_with_exact_remaining(self, ledger, clock):
        """retry_after equals the time left until backoffUntil."""
        ledger.record_failure(FailureKind.RATE_LIMITED)
        clock.advance(minutes=10)

        decision = ledger.check_admission()
        assert decision.allowed is False
        assert decision.reason is DenyReason.BACKOFF
        assert decision.retry_after == timedelta(minutes=20)
        assert decision.retry_after_seconds == 1200

    def test_backoff_clears_once_passed(self, ledger, clock):
        """After backoffUntil passes, admission succeeds and the window is cleared."""
        ledger.record_failure(FailureKind.RATE_LIMITED)
        clock.advance(minutes=30, seconds=1)

        decision = ledger.check_admission()
        assert decision.allowed is True
        assert ledger.load().backoff_until is None

        on_disk = json.loads(ledger.path.read_text())
        assert on_disk["backoffUntil"] is None

    def test_backoff_checked_before_quota(self, ledger):
        """An active backoff is reported even when the quota is also spent."""
        for _ in range(40):
            ledger.record_request()
        ledger.record_failure(FailureKind.RATE_LIMITED)

        assert ledger.check_admission().reason is DenyReason.BACKOFF


class TestFailures:
    """Tests for record_failure() and record_success()."""

    def test_backoff_strictly_increases(self, ledger):
        """N consecutive rate-limit failures give base * multiplier^(N-1)."""
        windows = [ledger.record_failure(FailureKind.RATE_LIMITED) for _ in range(4)]
        assert windows == [
            timedelta(minutes=30),
            timedelta(minutes=60),
            timedelta(minutes=120),
            timedelta(minutes=240),
        ]
        assert all(a < b for a, b in zip(windows, windows[1:]))

    def test_backoff_until_is_set_from_now(self, ledger, clock):
        """backoffUntil is now plus the computed window."""
        ledger.record_failure(FailureKind.RATE_LIMITED)
        ledger.record_failure(FailureKind.RATE_LIMITED)
        assert ledger.load().backoff_until == clock.now + timedelta(minutes=60)

    def test_counters_are_per_kind(self, ledger):
        """A network failure never advances the rate-limited counter."""
        ledger.record_failure(FailureKind.RATE_LIMITED)
        ledger.record_failure(FailureKind.NETWORK)
        ledger.record_failure(FailureKind.NETWORK)

        state = ledger.load()
        assert state.counter(FailureKind.RATE_LIMITED) == 1
        assert state.counter(FailureKind.NETWORK) == 2
        assert state.counter(FailureKind.FORBIDDEN) == 0

        # The next rate-limit failure continues its own streak
        assert ledger.record_failure(FailureKind.RATE_LIMITED) == timedelta(minutes=60)

    def test_forbidden_sets_no_backoff(self, ledger):
        """Forbidden failures are counted but do not open a window."""
        assert ledger.record_failure(FailureKind.FORBIDDEN) is None
        state = ledger.load()
        assert state.backoff_until is None
        assert state.counter(FailureKind.FORBIDDEN) == 1
        assert ledger.check_admission().allowed is True

    def test_network_sets_no_backoff(self, ledger):
        """Network failures are counted but do not open a window."""
        assert ledger.record_failure("network") is None
        assert ledger.check_admission().allowed is True

    def test_unknown_kind_rejected(self, ledger):
        """Failure kinds outside the taxonomy raise."""
        with pytest.raises(ValueError):
            ledger.record_failure("teapot")

    def test_success_resets_streaks(self, ledger):
        """A clean response resets consecutive counters."""
        ledger.record_failure(FailureKind.RATE_LIMITED)
        ledger.record_failure(FailureKind.NETWORK)
        ledger.record_success()

        state = ledger.load()
        assert state.counter(FailureKind.RATE_LIMITED) == 0
        assert state.counter(FailureKind.NETWORK) == 0


class TestPersistence:
    """Tests for write-through persistence and day rollover."""

    def test_state_survives_new_instance(self, ledger, ledger_path, clock):
        """A second ledger on the same file sees the count and backoff."""
        ledger.record_request()
        ledger.record_request()
        ledger.record_failure(FailureKind.RATE_LIMITED)

        reopened = RateLimitLedger(ledger_path, daily_limit=40, clock=clock)
        state = reopened.load()
        assert state.request_count == 2
        assert state.backoff_until is not None
        assert reopened.check_admission().reason is DenyReason.BACKOFF

    def test_file_uses_camel_case_keys(self, ledger):
        """The ledger file carries date, requestCount, backoffUntil, errorCounters."""
        ledger.record_request()
        data = json.loads(ledger.path.read_text())
        assert data["date"] == "2026-03-10"
        assert data["requestCount"] == 1
        assert "backoffUntil" in data
        assert data["errorCounters"] == {"forbidden": 0, "rate-limited": 0, "network": 0}

    def test_rollover_resets_count(self, ledger, clock):
        """A new UTC day starts from zero."""
        for _ in range(40):
            ledger.record_request()
        clock.advance(hours=13)

        assert ledger.check_admission().allowed is True
        state = ledger.load()
        assert state.date == "2026-03-11"
        assert state.request_count == 0

    def test_rollover_keeps_active_backoff(self, ledger, clock):
        """A backoff window that crosses midnight still applies."""
        for _ in range(6):
            ledger.record_failure(FailureKind.RATE_LIMITED)  # 16 hour window
        clock.advance(hours=12, minutes=30)

        decision = ledger.check_admission()
        assert decision.reason is DenyReason.BACKOFF
        assert ledger.load().request_count == 0

    def test_corrupt_file_starts_fresh(self, ledger_path, clock):
        """An unreadable file is replaced instead of crashing."""
        ledger_path.parent.mkdir(parents=True)
        ledger_path.write_text("{not json")

        ledger = RateLimitLedger(ledger_path, clock=clock)
        assert ledger.check_admission().allowed is True
        assert json.loads(ledger_path.read_text())["requestCount"] == 0

    def test_reads_state_written_elsewhere(self, ledger, ledger_path):
        """Admission re-reads the file each time."""
        ledger.check_admission()
        state = RateLimitState(date="2026-03-10", request_count=40)
        ledger_path.write_text(json.dumps(state.to_json_dict()))

        assert ledger.check_admission().reason is DenyReason.DAILY_LIMIT


class TestMaintenance:
    """Tests for reset(), status() and random_delay()."""

    def test_reset_clears_everything(self, ledger):
        """reset() zeroes the count, backoff and counters."""
        ledger.record_request()
        ledger.record_failure(FailureKind.RATE_LIMITED)
        ledger.reset()

        state = ledger.load()
        assert state.request_count == 0
        assert state.backoff_until is None
        assert ledger.check_admission().allowed is True

    def test_status_shape(self, ledger):
        """status() reports the quota in camelCase."""
        ledger.record_request()
        status = ledger.status()
        assert status["requestCount"] == 1
        assert status["dailyLimit"] == 40
        assert status["remaining"] == 39
        assert status["backoffUntil"] is None

    def test_random_delay_bounds(self, ledger):
        """Delays stay within the configured window, scaled by factor."""
        for _ in range(50):
            assert 1.0 <= ledger.random_delay() <= 2.0
            assert 2.0 <= ledger.random_delay(2.0) <= 4.0

    def test_from_config(self, config):
        """Ledger settings come from Config."""
        ledger = RateLimitLedger.from_config(config)
        assert ledger.daily_limit == 40
        assert ledger.backoff_base == timedelta(minutes=30)
        assert ledger.min_delay_s == 1.0
        assert ledger.max_delay_s == 2.0

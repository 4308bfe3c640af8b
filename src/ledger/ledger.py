"""
Persisted rate-limit ledger.

The ledger decides whether an outbound search request may be issued right
now. State lives in a small JSON file that is re-read at the start of every
admission check and rewritten after every mutation, so quota and backoff
survive process restarts. A single writer at a time is assumed.
"""

import json
import os
import random
from datetime import datetime, timedelta
from pathlib import Path
from typing import Callable, Optional, Union

from src.core.config import Config
from src.core.logging import get_logger
from src.ledger.models import AdmissionDecision, DenyReason, FailureKind, RateLimitState
from src.utils.date_utils import ensure_utc, next_utc_midnight, utc_day, utc_now

logger = get_logger(__name__)

LOW_QUOTA_WARNING = 5


class RateLimitLedger:
    """
    Daily quota plus exponential backoff, persisted write-through.

    Example:
        >>> ledger = RateLimitLedger(Path("data/rate_limit.json"), daily_limit=40)
        >>> decision = ledger.check_admission()
        >>> if decision.allowed:
        ...     ledger.record_request()
    """

    def __init__(
        self,
        path: Path,
        daily_limit: int = 40,
        backoff_base: timedelta = timedelta(minutes=30),
        backoff_multiplier: float = 2.0,
        min_delay_s: float = 3.0,
        max_delay_s: float = 8.0,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.path = Path(path)
        self.daily_limit = daily_limit
        self.backoff_base = backoff_base
        self.backoff_multiplier = backoff_multiplier
        self.min_delay_s = min_delay_s
        self.max_delay_s = max_delay_s
        self._clock = clock or utc_now
        self._state: Optional[RateLimitState] = None

    @classmethod
    def from_config(cls, config: Config, clock: Optional[Callable[[], datetime]] = None) -> "RateLimitLedger":
        return cls(
            path=config.ledger_file,
            daily_limit=config.daily_limit,
            backoff_base=timedelta(minutes=config.backoff_base_minutes),
            backoff_multiplier=config.backoff_multiplier,
            min_delay_s=config.min_delay_s,
            max_delay_s=config.max_delay_s,
            clock=clock,
        )

    def _now(self) -> datetime:
        return ensure_utc(self._clock())

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _fresh_state(self, now: datetime, carry_backoff: Optional[datetime] = None) -> RateLimitState:
        return RateLimitState(date=utc_day(now), backoff_until=carry_backoff, last_reset=now)

    def load(self) -> RateLimitState:
        """
        Read the ledger file, rolling over to a fresh day when the date changed.

        A missing file is created. An unreadable file is logged and replaced
        with the last state this process saw (or a fresh day).
        """
        now = self._now()
        today = utc_day(now)
        state: Optional[RateLimitState] = None

        if self.path.exists():
            try:
                raw = json.loads(self.path.read_text(encoding="utf-8"))
                state = RateLimitState.model_validate(raw)
            except (OSError, ValueError) as e:
                logger.error(f"[Ledger] Could not read {self.path}: {e}")
                state = self._state

        if state is None:
            state = self._fresh_state(now)
            logger.info(f"[Ledger] Created new ledger for {today}")
            self._save(state)
        elif state.date != today:
            # An active backoff window outlives the day boundary
            carry = None
            if state.backoff_until is not None and ensure_utc(state.backoff_until) > now:
                carry = state.backoff_until
            logger.info(
                f"[Ledger] New day {today}, resetting counters "
                f"(previous day {state.date}: {state.request_count} requests)"
            )
            state = self._fresh_state(now, carry_backoff=carry)
            self._save(state)

        self._state = state
        return state

    def _save(self, state: RateLimitState) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            tmp_path.write_text(json.dumps(state.to_json_dict(), indent=2), encoding="utf-8")
            os.replace(tmp_path, self.path)
        except OSError as e:
            logger.error(f"[Ledger] Failed to persist {self.path}: {e}")
            raise
        self._state = state

    # ------------------------------------------------------------------
    # Contract
    # ------------------------------------------------------------------

    def check_admission(self) -> AdmissionDecision:
        """
        Decide whether a request may be issued now.

        Backoff is checked first; an expired backoff window is cleared and
        persisted. The daily limit applies independently of backoff.
        """
        state = self.load()
        now = self._now()

        if state.backoff_until is not None:
            until = ensure_utc(state.backoff_until)
            if now < until:
                remaining = until - now
                minutes = int(remaining.total_seconds() // 60) + 1
                return AdmissionDecision(
                    allowed=False,
                    reason=DenyReason.BACKOFF,
                    retry_after=remaining,
                    message=f"In backoff period, {minutes} minute(s) remaining",
                )
            state.backoff_until = None
            self._save(state)
            logger.info("[Ledger] Backoff period ended")

        if state.request_count >= self.daily_limit:
            return AdmissionDecision(
                allowed=False,
                reason=DenyReason.DAILY_LIMIT,
                retry_after=next_utc_midnight(now) - now,
                message=f"Daily limit of {self.daily_limit} requests reached",
            )

        return AdmissionDecision(allowed=True)

    def record_request(self) -> int:
        """Count one issued request against today's quota. Returns the new count."""
        state = self.load()
        state.request_count += 1
        self._save(state)

        remaining = self.daily_limit - state.request_count
        logger.info(f"[Ledger] Request {state.request_count}/{self.daily_limit} recorded")
        if remaining <= LOW_QUOTA_WARNING:
            logger.warning(f"[Ledger] Only {max(remaining, 0)} request(s) remaining today")
        return state.request_count

    def record_failure(self, kind: Union[FailureKind, str]) -> Optional[timedelta]:
        """
        Register a classified failure.

        Each kind has its own consecutive counter. Only rate-limited failures
        open a backoff window, of length base * multiplier^(counter - 1).

        Returns:
            The backoff duration that was applied, or None
        """
        kind = FailureKind(kind)
        state = self.load()
        now = self._now()

        counters = dict(state.error_counters)
        counters[kind.value] = counters.get(kind.value, 0) + 1
        state.error_counters = counters
        count = counters[kind.value]

        backoff = None
        if kind is FailureKind.RATE_LIMITED:
            backoff = self.backoff_duration(count)
            state.backoff_until = now + backoff
            logger.warning(
                f"[Ledger] Rate limited ({count} in a row), backing off for "
                f"{backoff.total_seconds() / 60:.1f} minutes"
            )
        elif kind is FailureKind.FORBIDDEN:
            logger.critical(f"[Ledger] Forbidden response recorded ({count} in a row)")
        else:
            logger.warning(f"[Ledger] Network failure recorded ({count} in a row)")

        self._save(state)
        return backoff

    def record_success(self) -> None:
        """A clean response ends every consecutive-failure streak."""
        state = self.load()
        if any(state.error_counters.values()):
            state.error_counters = {}
            self._save(state)

    def backoff_duration(self, consecutive: int) -> timedelta:
        exponent = max(consecutive, 1) - 1
        return self.backoff_base * (self.backoff_multiplier ** exponent)

    # ------------------------------------------------------------------
    # Maintenance
    # ------------------------------------------------------------------

    def reset(self) -> RateLimitState:
        """Clear today's count, backoff and failure counters."""
        state = self._fresh_state(self._now())
        self._save(state)
        logger.info("[Ledger] Daily limit manually reset")
        return state

    def remaining(self) -> int:
        return max(0, self.daily_limit - self.load().request_count)

    def status(self) -> dict:
        state = self.load()
        return {
            "date": state.date,
            "requestCount": state.request_count,
            "dailyLimit": self.daily_limit,
            "remaining": max(0, self.daily_limit - state.request_count),
            "backoffUntil": state.backoff_until.isoformat() if state.backoff_until else None,
            "errorCounters": dict(state.error_counters),
            "lastReset": state.last_reset.isoformat() if state.last_reset else None,
        }

    def random_delay(self, factor: float = 1.0) -> float:
        """Seconds to wait before the next request, scaled by factor."""
        low = self.min_delay_s * factor
        high = max(self.max_delay_s * factor, low)
        return random.uniform(low, high)

"""
Outer harvest loop.

One SearchUnit is in flight at a time:

    admission -> session -> navigate -> record -> extract -> filter -> hand-off

Navigation outcomes arrive as a NavigationSignal and are turned into the
HarvestError taxonomy here; the loop decides halt-vs-continue from the
exception class alone.

Halts:
    - VERIFICATION_REQUIRED / CAPTCHA_REQUIRED: the unit goes back to the
      front of the queue; resume() continues once the challenge clears
    - ACCOUNT_RESTRICTED (403 or block page) and SESSION_INVALID: fatal
    - QUOTA_EXHAUSTED: admission denied for the rest of the UTC day

A 429 records a rate-limited failure and re-queues the unit; the next
admission check sleeps through the backoff window. A network error fails
the unit and the run moves on.
"""

import asyncio
import uuid
from collections import deque
from datetime import datetime
from typing import Awaitable, Callable, Deque, Dict, List, Optional

from src.core.error_models import ErrorComponent, ErrorSeverity, ErrorStage, ErrorType
from src.core.errors import (
    AccountRestrictedError,
    NetworkError,
    QuotaExhaustedError,
    RateLimitedError,
    SessionConfigError,
    VerificationRequiredError,
)
from src.core.logging import get_logger
from src.extraction.models import Candidate, RenderedPage
from src.ledger.models import DenyReason, FailureKind
from src.orchestrator.context import HarvestContext
from src.orchestrator.interfaces import HandoffContext
from src.orchestrator.models import (
    RESUMABLE_STATUSES,
    RunReport,
    RunStatus,
    SearchUnit,
    UnitOutcome,
    UnitState,
)
from src.session.manager import VerificationResult
from src.session.signals import NavigationResult, NavigationSignal
from src.utils.date_utils import utc_now
from src.utils.url_utils import build_search_url

logger = get_logger(__name__)

SleepFn = Callable[[float], Awaitable[None]]

# Longest single sleep; stop requests are noticed between slices
SLEEP_SLICE_S = 1.0


class Orchestrator:
    """
    Drives SearchUnits through the harvest pipeline.

    Example:
        >>> async with HarvestContext.from_config(get_config()) as ctx:
        ...     orchestrator = Orchestrator(ctx)
        ...     report = await orchestrator.run()
        ...     if report.status is RunStatus.VERIFICATION_REQUIRED:
        ...         result = await orchestrator.submit_verification_code("123456")
        ...         if result.success:
        ...             report = await orchestrator.resume()
    """

    def __init__(
        self,
        ctx: HarvestContext,
        sleep: Optional[SleepFn] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.ctx = ctx
        self._sleep = sleep or asyncio.sleep
        self._clock = clock or utc_now
        self._stop_requested = False

        self.run_id: Optional[str] = None
        self.status = RunStatus.IDLE
        self._queue: Deque[SearchUnit] = deque()
        self._outcomes: List[UnitOutcome] = []
        self._planned: Dict[str, List[SearchUnit]] = {}
        self._marked: set = set()
        self._current: Optional[SearchUnit] = None
        self._last_company: Optional[str] = None
        self._message = ""

    # ------------------------------------------------------------------
    # Public surface
    # ------------------------------------------------------------------

    def request_stop(self) -> None:
        """Ask the loop to stop at the next unit boundary."""
        if not self._stop_requested:
            logger.info("[Run] Stop requested")
        self._stop_requested = True

    async def run(self) -> RunReport:
        """Plan a fresh run from the source and drive it until done or halted."""
        if self.status is RunStatus.RUNNING:
            raise RuntimeError("A run is already in progress")

        self.run_id = uuid.uuid4().hex[:12]
        self._stop_requested = False
        self._queue.clear()
        self._outcomes = []
        self._planned = {}
        self._marked = set()
        self._current = None
        self._last_company = None
        self._message = ""

        self._plan(self.ctx.source.search_units())
        logger.info(f"[Run] {self.run_id} started with {len(self._queue)} unit(s) queued")
        return await self._drive()

    async def resume(self) -> RunReport:
        """
        Continue a stopped or challenge-paused run.

        A pending challenge is re-checked first (a CAPTCHA may have been
        solved by hand); if it has not cleared the run stays paused.
        """
        if self.status not in RESUMABLE_STATUSES or not self._queue:
            raise RuntimeError(f"Run cannot be resumed from status '{self.status.value}'")

        if self.ctx.sessions.challenge is not None:
            check = await self.ctx.sessions.recheck_challenge()
            if not check.success:
                self._message = check.error or "Verification still required"
                logger.warning(f"[Run] Resume refused: {self._message}")
                return self._report()

        self._stop_requested = False
        logger.info(f"[Run] {self.run_id} resuming with {len(self._queue)} unit(s) pending")
        return await self._drive()

    async def submit_verification_code(self, code: str) -> VerificationResult:
        """Pass a one-time code to the paused page. Call resume() on success."""
        result = await self.ctx.sessions.submit_verification_code(code)
        if result.success:
            logger.info("[Run] Verification code accepted")
        else:
            logger.warning(f"[Run] Verification code rejected: {result.error}")
            self.ctx.error_logger.log_error(
                component=ErrorComponent.SESSION,
                stage=ErrorStage.SUBMIT_CODE,
                error_type=ErrorType.VERIFICATION_REQUIRED,
                message=result.error or "Verification failed",
                severity=ErrorSeverity.WARNING,
                run_id=self.run_id,
            )
        return result

    # ------------------------------------------------------------------
    # Planning
    # ------------------------------------------------------------------

    def _plan(self, units: List[SearchUnit]) -> None:
        seen = set()
        by_company: Dict[str, List[SearchUnit]] = {}
        for unit in units:
            if unit in seen:
                self._outcomes.append(UnitOutcome(unit, UnitState.SKIPPED, error="duplicate search unit"))
                continue
            seen.add(unit)
            by_company.setdefault(unit.company_key, []).append(unit)

        for company_key, company_units in by_company.items():
            if not self.ctx.source.should_search(company_key):
                logger.info(f"[Run] Skipping {company_key}: scraped recently")
                for unit in company_units:
                    self._outcomes.append(UnitOutcome(unit, UnitState.SKIPPED, error="recently scraped"))
                continue
            self._planned[company_key] = company_units
            self._queue.extend(company_units)

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    async def _drive(self) -> RunReport:
        self.status = RunStatus.RUNNING
        self._current = None

        while self._queue:
            if self._stop_requested:
                self._halt(RunStatus.STOPPED, "Stopped on request")
                break

            unit = self._queue[0]
            await self._pace(unit)
            if self._stop_requested:
                continue

            try:
                await self._admit()
            except QuotaExhaustedError as e:
                self._halt(RunStatus.QUOTA_EXHAUSTED, str(e))
                self._log_exception(e, ErrorComponent.LEDGER, ErrorStage.ADMISSION, unit, ErrorSeverity.WARNING)
                break
            if self._stop_requested:
                continue

            self._queue.popleft()
            self._current = unit
            outcome = UnitOutcome(unit, UnitState.IN_FLIGHT)
            logger.info(f"[Run] {unit} in flight")

            try:
                await self._process(unit, outcome)
            except RateLimitedError as e:
                logger.warning(f"[Run] {unit} rate limited, re-queued")
                self._queue.appendleft(unit)
                self._log_exception(e, ErrorComponent.SESSION, ErrorStage.NAVIGATE, unit, ErrorSeverity.WARNING)
                continue
            except VerificationRequiredError as e:
                self._queue.appendleft(unit)
                status = RunStatus.CAPTCHA_REQUIRED if e.captcha else RunStatus.VERIFICATION_REQUIRED
                self._halt(status, str(e))
                self._log_exception(e, ErrorComponent.SESSION, ErrorStage.NAVIGATE, unit, ErrorSeverity.CRITICAL)
                break
            except AccountRestrictedError as e:
                self._finish(outcome, UnitState.HALTED, str(e))
                await self.ctx.sessions.invalidate_session()
                self._halt(RunStatus.ACCOUNT_RESTRICTED, str(e))
                self._log_exception(e, ErrorComponent.SESSION, ErrorStage.HALT, unit, ErrorSeverity.CRITICAL)
                break
            except SessionConfigError as e:
                self._finish(outcome, UnitState.HALTED, str(e))
                await self.ctx.sessions.invalidate_session()
                self._halt(RunStatus.SESSION_INVALID, str(e))
                self._log_exception(e, ErrorComponent.SESSION, ErrorStage.HALT, unit, ErrorSeverity.CRITICAL)
                break
            except NetworkError as e:
                logger.error(f"[Run] {unit} failed: {e}")
                self._finish(outcome, UnitState.FAILED, str(e))
                self._log_exception(e, ErrorComponent.SESSION, ErrorStage.NAVIGATE, unit)
            except Exception as e:
                logger.exception(f"[Run] {unit} failed unexpectedly: {e}")
                self._finish(outcome, UnitState.FAILED, f"{type(e).__name__}: {e}")
                self._log_exception(e, ErrorComponent.ORCHESTRATOR, ErrorStage.EXTRACT, unit)
            else:
                self._finish(outcome, UnitState.COMPLETED)

            self._current = None
            self._maybe_mark_scraped(unit.company_key)

        if self.status is RunStatus.RUNNING:
            self.status = RunStatus.COMPLETED
            self._message = "All search units processed"

        report = self._report()
        logger.info(
            f"[Run] {self.run_id} {report.status.value}: "
            f"{report.count(UnitState.COMPLETED)} completed, "
            f"{report.count(UnitState.SKIPPED)} skipped, "
            f"{report.count(UnitState.FAILED)} failed, "
            f"{len(report.pending)} pending"
        )
        return report

    async def _pace(self, unit: SearchUnit) -> None:
        """Randomized delay before every unit but the first; longer across companies."""
        previous, self._last_company = self._last_company, unit.company_key
        if previous is None:
            return
        factor = 1.0 if previous == unit.company_key else self.ctx.config.company_delay_factor
        delay = self.ctx.ledger.random_delay(factor)
        logger.debug(f"[Run] Waiting {delay:.1f}s before {unit}")
        await self._pause(delay)

    async def _admit(self) -> None:
        """
        Block until the ledger admits a request.

        Raises:
            QuotaExhaustedError: the daily limit is reached
        """
        while not self._stop_requested:
            decision = self.ctx.ledger.check_admission()
            if decision.allowed:
                return
            if decision.reason is DenyReason.DAILY_LIMIT:
                raise QuotaExhaustedError(
                    decision.message or "Daily limit reached",
                    retry_after_seconds=decision.retry_after_seconds,
                )
            logger.info(f"[Run] {decision.message}; sleeping")
            await self._pause(decision.retry_after_seconds or SLEEP_SLICE_S)

    async def _pause(self, seconds: float) -> None:
        remaining = seconds
        while remaining > 0 and not self._stop_requested:
            step = min(remaining, SLEEP_SLICE_S)
            await self._sleep(step)
            remaining -= step

    # ------------------------------------------------------------------
    # One unit
    # ------------------------------------------------------------------

    async def _process(self, unit: SearchUnit, outcome: UnitOutcome) -> None:
        sessions = self.ctx.sessions
        try:
            session = await sessions.get_session()
        except RateLimitedError:
            self.ctx.ledger.record_failure(FailureKind.RATE_LIMITED)
            raise
        except AccountRestrictedError as e:
            if e.metadata.get("signal") == NavigationSignal.FORBIDDEN.value:
                self.ctx.ledger.record_failure(FailureKind.FORBIDDEN)
            raise

        url = build_search_url(unit.company, unit.role)
        result = await sessions.navigate(session, url)
        if result.issued:
            self.ctx.ledger.record_request()

        self._raise_for_signal(result)
        self.ctx.ledger.record_success()

        candidates = self.ctx.pipeline.extract(RenderedPage(html=result.content, url=result.url))
        outcome.extracted = len(candidates)

        matched = self.ctx.relevance.filter(candidates, unit.company, unit.role)
        outcome.matched = len(matched)
        logger.info(f"[Run] {unit}: {len(candidates)} extracted, {len(matched)} matched")

        handoff = HandoffContext(unit=unit, run_id=self.run_id, search_url=url)
        for candidate in matched:
            self._hand_off(candidate, handoff, outcome)

    def _raise_for_signal(self, result: NavigationResult) -> None:
        signal = result.signal
        if signal is NavigationSignal.OK:
            return

        ledger = self.ctx.ledger
        if signal is NavigationSignal.RATE_LIMITED:
            backoff = ledger.record_failure(FailureKind.RATE_LIMITED)
            raise RateLimitedError(
                "Search was rate limited",
                url=result.url,
                status=result.status,
                backoff_seconds=backoff.total_seconds() if backoff else None,
            )
        if signal is NavigationSignal.FORBIDDEN:
            ledger.record_failure(FailureKind.FORBIDDEN)
            raise AccountRestrictedError("Search returned 403 Forbidden", url=result.url, status=result.status)
        if signal is NavigationSignal.BLOCKED:
            raise AccountRestrictedError("Block page served instead of results", url=result.url)
        if signal is NavigationSignal.COOKIE_EXPIRED:
            raise SessionConfigError("Session redirected to sign-in mid-run", url=result.url)
        if result.is_challenge:
            raise VerificationRequiredError(
                "Site requires human verification",
                url=result.url,
                captcha=signal is NavigationSignal.CAPTCHA_REQUIRED,
            )

        ledger.record_failure(FailureKind.NETWORK)
        raise NetworkError(result.error or result.describe(), url=result.url, status=result.status)

    def _hand_off(self, candidate: Candidate, handoff: HandoffContext, outcome: UnitOutcome) -> None:
        sink = self.ctx.sink
        stage = ErrorStage.SINK_EXISTS
        try:
            if sink.exists(candidate.profile_url):
                outcome.already_present += 1
                return
            stage = ErrorStage.SINK_CREATE
            sink.create(candidate, handoff)
            outcome.created += 1
        except Exception as e:
            logger.error(f"[Run] Hand-off failed for {candidate.profile_url}: {e}")
            self.ctx.error_logger.log_exception(
                e,
                component=ErrorComponent.SINK,
                stage=stage,
                error_type=ErrorType.SINK_ERROR,
                run_id=self.run_id,
                company=handoff.unit.company,
                role=handoff.unit.role,
                url=candidate.profile_url,
            )

    # ------------------------------------------------------------------
    # Bookkeeping
    # ------------------------------------------------------------------

    def _finish(self, outcome: UnitOutcome, state: UnitState, error: Optional[str] = None) -> None:
        outcome.state = state
        outcome.error = error
        self._outcomes.append(outcome)

    def _halt(self, status: RunStatus, message: str) -> None:
        self.status = status
        self._message = message
        logger.warning(f"[Run] Halted: {status.value} ({message})")

    def _maybe_mark_scraped(self, company_key: str) -> None:
        """Advance a company's checkpoint once every unit of it completed or was skipped."""
        if company_key in self._marked or company_key not in self._planned:
            return
        if any(u.company_key == company_key for u in self._queue):
            return

        states = [o.state for o in self._outcomes if o.unit.company_key == company_key]
        if UnitState.COMPLETED not in states:
            return
        if any(s not in (UnitState.COMPLETED, UnitState.SKIPPED) for s in states):
            return

        try:
            self.ctx.source.mark_scraped(company_key, self._clock())
            self._marked.add(company_key)
        except Exception as e:
            logger.error(f"[Run] Could not write checkpoint for {company_key}: {e}")
            self.ctx.error_logger.log_exception(
                e,
                component=ErrorComponent.SOURCE,
                stage=ErrorStage.MARK_SCRAPED,
                error_type=ErrorType.CHECKPOINT_ERROR,
                run_id=self.run_id,
                company=company_key,
            )

    def _log_exception(
        self,
        exc: Exception,
        component: ErrorComponent,
        stage: str,
        unit: SearchUnit,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
    ) -> None:
        self.ctx.error_logger.log_exception(
            exc,
            component=component,
            stage=stage,
            severity=severity,
            run_id=self.run_id,
            company=unit.company,
            role=unit.role,
        )

    def _report(self) -> RunReport:
        current = self._current or (self._queue[0] if self.status in RESUMABLE_STATUSES and self._queue else None)
        return RunReport(
            run_id=self.run_id or "",
            status=self.status,
            outcomes=list(self._outcomes),
            pending=list(self._queue),
            message=self._message,
            current_unit=current,
        )

"""
Command line entry point.

    python -m src.cli run [--interactive-verify] [--headed] [--verbose]
    python -m src.cli status
    python -m src.cli reset-ledger
    python -m src.cli validate-session [--headed]
    python -m src.cli reset-checkpoints [--company ID]

Exit codes: 0 finished (including quota exhausted or stopped), 1 error,
2 a person has to act (verification, restriction, bad cookie).
"""

import argparse
import asyncio
import json
import signal
import sys
import traceback
from typing import Optional

from src.core.config import Config, get_config
from src.core.errors import HarvestError
from src.core.logging import get_logger, init_harvest_logging
from src.ledger import RateLimitLedger
from src.orchestrator import HarvestContext, Orchestrator, RunReport, RunStatus
from src.session import SessionManager
from src.sources import FileSearchUnitSource

logger = get_logger(__name__)

MAX_VERIFY_ATTEMPTS = 3


def _load_config(args: argparse.Namespace, validate: bool = True) -> Config:
    config = get_config()
    if getattr(args, "headed", False):
        config.headless = False
    if validate:
        config.validate()
    return config


def _print_report(report: RunReport) -> None:
    print(json.dumps(report.to_dict(), indent=2, ensure_ascii=False))
    if report.requires_human_action:
        print(f"\n[action required] {report.status.value}: {report.message}", file=sys.stderr)


async def _prompt(text: str) -> str:
    loop = asyncio.get_running_loop()
    return await loop.run_in_executor(None, input, text)


async def _verify_interactively(orchestrator: Orchestrator, report: RunReport, headed: bool) -> RunReport:
    """Ask on stdin for codes (or a manual CAPTCHA solve) until the run moves on."""
    for attempt in range(1, MAX_VERIFY_ATTEMPTS + 1):
        if report.status is RunStatus.CAPTCHA_REQUIRED:
            if not headed:
                print("[captcha] CAPTCHA shown; rerun with --headed to solve it by hand", file=sys.stderr)
                return report
            await _prompt("[captcha] Solve the CAPTCHA in the browser window, then press Enter: ")
            report = await orchestrator.resume()
        elif report.status is RunStatus.VERIFICATION_REQUIRED:
            code = (await _prompt(f"[verify] Enter the verification code ({attempt}/{MAX_VERIFY_ATTEMPTS}): ")).strip()
            result = await orchestrator.submit_verification_code(code)
            if not result.success:
                print(f"[verify] {result.error}", file=sys.stderr)
                continue
            report = await orchestrator.resume()
        else:
            return report
    return report


async def _run(args: argparse.Namespace) -> int:
    config = _load_config(args)
    async with HarvestContext.from_config(config) as ctx:
        orchestrator = Orchestrator(ctx)

        loop = asyncio.get_running_loop()
        try:
            loop.add_signal_handler(signal.SIGINT, orchestrator.request_stop)
            loop.add_signal_handler(signal.SIGTERM, orchestrator.request_stop)
        except NotImplementedError:
            pass

        report = await orchestrator.run()
        if args.interactive_verify:
            report = await _verify_interactively(orchestrator, report, headed=not config.headless)

    _print_report(report)
    return 2 if report.requires_human_action else 0


async def _validate_session(args: argparse.Namespace) -> int:
    config = _load_config(args)
    sessions = SessionManager(config)
    try:
        session = await sessions.get_session()
        print(f"[ok] Session valid, landed on {session.page.url}")
        return 0
    except HarvestError as e:
        print(f"[{e.kind}] {e}", file=sys.stderr)
        return 2 if e.requires_human_action else 1
    finally:
        await sessions.close()


def _status(args: argparse.Namespace) -> int:
    ledger = RateLimitLedger.from_config(_load_config(args, validate=False))
    print(json.dumps(ledger.status(), indent=2))
    return 0


def _reset_ledger(args: argparse.Namespace) -> int:
    ledger = RateLimitLedger.from_config(_load_config(args, validate=False))
    ledger.reset()
    print(json.dumps(ledger.status(), indent=2))
    return 0


def _reset_checkpoints(args: argparse.Namespace) -> int:
    config = _load_config(args, validate=False)
    source = FileSearchUnitSource(
        config.companies_file,
        config.roles_file,
        config.checkpoint_file,
        stale_after_months=config.stale_after_months,
    )
    removed = source.reset(args.company)
    print(f"Removed {removed} checkpoint(s)")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="profile-harvester",
        description="Harvest candidate profiles from people-search results.",
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Search every stale (company, role) pair")
    run.add_argument("--interactive-verify", action="store_true",
                     help="Prompt for verification codes instead of halting")
    run.add_argument("--headed", action="store_true", help="Show the browser window")

    sub.add_parser("status", help="Show today's quota and backoff")
    sub.add_parser("reset-ledger", help="Clear today's count, backoff and failure counters")

    validate = sub.add_parser("validate-session", help="Launch the browser and check the cookie")
    validate.add_argument("--headed", action="store_true", help="Show the browser window")

    reset = sub.add_parser("reset-checkpoints", help="Forget when companies were last scraped")
    reset.add_argument("--company", help="Only this company id")

    return parser


def main(argv: Optional[list] = None) -> int:
    args = build_parser().parse_args(argv)
    config = get_config()
    init_harvest_logging(verbose=args.verbose, log_dir=config.log_dir, level=config.log_level)

    try:
        if args.command == "run":
            return asyncio.run(_run(args))
        if args.command == "validate-session":
            return asyncio.run(_validate_session(args))
        if args.command == "status":
            return _status(args)
        if args.command == "reset-ledger":
            return _reset_ledger(args)
        if args.command == "reset-checkpoints":
            return _reset_checkpoints(args)
    except ValueError as e:
        print(f"[config] {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("\n[abort] KeyboardInterrupt - stopping.")
        return 1
    except Exception as e:
        print(f"[fatal] uncaught error: {e}")
        traceback.print_exc()
        return 1
    return 1


if __name__ == "__main__":
    sys.exit(main())

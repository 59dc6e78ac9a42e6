#!/usr/bin/env python
# backend/salle2sport/commands/bookings.py
"""
Booking maintenance commands for Salle2Sport.

Usage:
    python -m salle2sport.commands.bookings sweep                # Run the no-show sweep now
    python -m salle2sport.commands.bookings sweep --at 2024-01-15T14:30:00Z
    python -m salle2sport.commands.bookings sweep --async        # Queue it on Celery
    python -m salle2sport.commands.bookings status               # Last sweep run
    python -m salle2sport.commands.bookings billing USER_ID      # Monthly charge as JSON
    python -m salle2sport.commands.bookings init-db              # Create missing tables
"""

import argparse
from datetime import datetime, timezone
import json
import logging
import sys
from typing import Any, Dict, List, Optional

from redis import Redis

from salle2sport.core.clock import FixedClock, SystemClock, parse_instant
from salle2sport.core.config import settings
from salle2sport.core.exceptions import DomainException
from salle2sport.core.logging_config import configure_logging
from salle2sport.database import init_db, session_scope
from salle2sport.services.billing_service import BillingService
from salle2sport.services.no_show_sweeper import NoShowSweeper

logger = logging.getLogger(__name__)

LAST_RUN_KEY = "salle2sport:no_show_sweep:last_run"
LAST_RUN_TTL_SECONDS = 86400 * 7


class BookingCommand:
    """Booking maintenance command handler."""

    def __init__(self, redis_client: Optional[Redis] = None) -> None:
        self.redis_client = redis_client or Redis.from_url(settings.redis_url)

    def run_sweep(self, at: Optional[str] = None, async_mode: bool = False) -> Dict[str, Any]:
        """
        Run the no-show sweep.

        Args:
            at: Optional ISO-8601 cut-off; defaults to now
            async_mode: Queue the Celery task instead of running inline
        """
        if async_mode:
            from salle2sport.tasks.booking_tasks import sweep_no_shows

            result = sweep_no_shows.delay(at)
            info = {
                "task_id": result.id,
                "started_at": datetime.now(timezone.utc).isoformat(),
                "mode": "async",
                "status": "submitted",
            }
            self._store_last_run_info(info)
            return info

        cutoff = parse_instant(at)
        clock = FixedClock(cutoff) if cutoff else SystemClock()
        started_at = datetime.now(timezone.utc)
        try:
            with session_scope() as db:
                count = NoShowSweeper(db, clock).sweep()
        except Exception as e:
            logger.error(f"No-show sweep failed: {e}", exc_info=True)
            self._store_last_run_info(
                {
                    "started_at": started_at.isoformat(),
                    "failed_at": datetime.now(timezone.utc).isoformat(),
                    "error": str(e),
                    "mode": "sync",
                    "status": "failed",
                }
            )
            raise

        info = {
            "started_at": started_at.isoformat(),
            "completed_at": datetime.now(timezone.utc).isoformat(),
            "cutoff": clock.now().isoformat(),
            "count": count,
            "mode": "sync",
            "status": "success",
        }
        self._store_last_run_info(info)
        return info

    def check_status(self) -> Dict[str, Any]:
        last_run = self.redis_client.get(LAST_RUN_KEY)
        if not last_run:
            return {"status": "no_data", "message": "No sweep run information found."}
        return json.loads(last_run)

    def billing(self, user_id: str) -> Dict[str, Any]:
        with session_scope() as db:
            result = BillingService(db).calculate_monthly_billing(user_id)
        return result.model_dump(mode="json")

    def create_tables(self) -> Dict[str, Any]:
        init_db()
        return {"status": "success", "message": "Database tables created."}

    def _store_last_run_info(self, info: Dict[str, Any]) -> None:
        self.redis_client.set(LAST_RUN_KEY, json.dumps(info), ex=LAST_RUN_TTL_SECONDS)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Salle2Sport booking maintenance",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m salle2sport.commands.bookings sweep
  python -m salle2sport.commands.bookings sweep --async
  python -m salle2sport.commands.bookings status
  python -m salle2sport.commands.bookings billing 01HQ...
        """,
    )
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    sweep_parser = subparsers.add_parser("sweep", help="Mark overdue bookings as no-show")
    sweep_parser.add_argument("--at", default=None, help="ISO-8601 cut-off (default: now)")
    sweep_parser.add_argument(
        "--async", action="store_true", dest="async_mode", help="Run via Celery"
    )

    subparsers.add_parser("status", help="Show the last sweep run")

    billing_parser = subparsers.add_parser("billing", help="Compute a member's monthly charge")
    billing_parser.add_argument("user_id", help="Member id")

    subparsers.add_parser("init-db", help="Create database tables")

    return parser


def main(argv: Optional[List[str]] = None, command: Optional[BookingCommand] = None) -> int:
    """Main entry point; returns the process exit code."""
    configure_logging()
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    cmd = command or BookingCommand()
    try:
        if args.command == "sweep":
            result = cmd.run_sweep(at=args.at, async_mode=args.async_mode)
        elif args.command == "status":
            result = cmd.check_status()
        elif args.command == "billing":
            result = cmd.billing(args.user_id)
        else:
            result = cmd.create_tables()
    except DomainException as e:
        print(json.dumps(e.to_dict(), indent=2))
        return 2
    except ValueError as e:
        print(f"Invalid argument: {e}")
        return 2

    print(json.dumps(result, indent=2, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())

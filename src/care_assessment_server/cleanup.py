"""Draft TTL CLI — ``care-assessment-cleanup``.

Deletes server-side drafts that have not been written for a number of
days.  Submitted assessments are never touched.  Intended for cron jobs.

Examples::

    # Purge drafts untouched for $DRAFT_TTL_DAYS days (default 30)
    care-assessment-cleanup

    # Purge drafts older than 7 days
    care-assessment-cleanup --days 7

    # Purge every draft
    care-assessment-cleanup --days 0
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from care_assessment_server.config import DEFAULT_CLEANUP_DAYS, load_settings

logger = logging.getLogger(__name__)


async def run_cleanup(*, days: int = DEFAULT_CLEANUP_DAYS) -> int:
    """Purge stale drafts and return the number of rows removed.

    Opens its own database session and commits.
    """
    # Lazy imports so --help works without DB machinery
    from care_assessment_db.engine import dispose_engine, get_session_factory
    from care_assessment_db.repository import DraftRepository

    repo = DraftRepository()
    factory = get_session_factory()

    try:
        async with factory() as db:
            affected = await repo.purge_stale_drafts(db, older_than_days=days)
            await db.commit()

        logger.info("Draft cleanup complete: affected_rows=%d, days=%d", affected, days)
        return affected
    finally:
        await dispose_engine()


def cli() -> None:
    """Console-script entry point: ``care-assessment-cleanup``."""
    parser = argparse.ArgumentParser(
        prog="care-assessment-cleanup",
        description="Delete stale assessment drafts from the database.",
    )
    parser.add_argument(
        "--days",
        type=int,
        default=load_settings().draft_ttl_days,
        help=(
            "Age threshold in days (default: $DRAFT_TTL_DAYS, or 30). "
            "0 deletes every draft."
        ),
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
    )
    args = parser.parse_args()

    if args.days < 0:
        parser.error("--days must be >= 0")

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )

    affected = asyncio.run(run_cleanup(days=args.days))
    print(f"Deleted drafts: {affected}")
    sys.exit(0)

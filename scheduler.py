"""
Runs the leaderboard aggregation every Friday at 12:00.

    python scheduler.py          # start the weekly schedule (blocks)
    python scheduler.py --once   # run the job now and exit
"""

import argparse
import logging
import os
import sys
from typing import Optional, Sequence

from apscheduler.schedulers.blocking import BlockingScheduler
from apscheduler.triggers.cron import CronTrigger
from pymongo.database import Database

import database
from leaderboard import update_leaderboard

logger = logging.getLogger(__name__)

LEADERBOARD_TZ = os.getenv("LEADERBOARD_TZ", "Asia/Kolkata")
JOB_ID = "weekly_leaderboard_update"


def run_leaderboard_job(db: Database) -> None:
    try:
        update_leaderboard(db)
    except Exception:
        logger.exception("Leaderboard update failed")
        raise


def build_scheduler(db: Database, timezone: str = LEADERBOARD_TZ) -> BlockingScheduler:
    scheduler = BlockingScheduler(timezone=timezone)
    scheduler.add_job(
        run_leaderboard_job,
        CronTrigger(day_of_week="fri", hour=12, minute=0, timezone=timezone),
        args=[db],
        id=JOB_ID,
        replace_existing=True,
        max_instances=1,
        coalesce=True,
    )
    return scheduler


def main(argv: Optional[Sequence[str]] = None, db: Optional[Database] = None) -> int:
    parser = argparse.ArgumentParser(description="Weekly leaderboard aggregation")
    parser.add_argument("--once", action="store_true", help="run the aggregation now and exit")
    parser.add_argument("--timezone", default=LEADERBOARD_TZ, help="timezone of the Friday 12:00 trigger")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    db = db if db is not None else database.db
    if db is None:
        logger.error("DATABASE_URL is not configured")
        return 1

    if args.once:
        try:
            run_leaderboard_job(db)
        except Exception:
            return 1
        return 0

    scheduler = build_scheduler(db, timezone=args.timezone)
    logger.info("Leaderboard scheduler started (weekly update: Friday 12:00 %s)", args.timezone)
    try:
        scheduler.start()
    except (KeyboardInterrupt, SystemExit):
        logger.info("Leaderboard scheduler stopped")
    return 0


if __name__ == "__main__":
    sys.exit(main())

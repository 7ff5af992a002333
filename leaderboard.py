"""
Weekly leaderboard aggregation.

Every run recomputes each reporter's points from scratch: 10 points per
verified report, written to ``leaderboards/{userId}`` as a merge-upsert that
only touches ``points`` and ``lastUpdated``. Users without verified reports
are left alone, including entries left over from reports that were verified
once and later revoked.

The job is not transactional. A failed read means nothing is written; a
failed write stops the run with earlier upserts already committed. Errors
propagate to the caller (the scheduler), which owns retry policy.
"""

import logging
import os
from typing import Dict, Iterable, Iterator

from pymongo.database import Database

from database import LEADERBOARDS, REPORTS
from schemas import ReportTally

logger = logging.getLogger(__name__)

POINTS_PER_VERIFIED_REPORT = 10
PAGE_SIZE = int(os.getenv("LEADERBOARD_PAGE_SIZE", "500"))


def iter_verified_reports(db: Database, page_size: int = PAGE_SIZE) -> Iterator[ReportTally]:
    """Yield every verified report once, fetched from the store ``page_size`` at a time.

    Only ``userId`` and ``status`` are read, so fields the job doesn't use
    can hold anything. Ids are opaque and may mix BSON types.
    """
    if page_size < 1:
        raise ValueError("page_size must be positive")

    cursor = db[REPORTS].find({"status": "verified"}, {"userId": 1, "status": 1}).batch_size(page_size)
    seen = set()
    for doc in cursor:
        if doc["_id"] in seen:
            continue
        seen.add(doc["_id"])
        if doc.get("userId") in (None, ""):
            logger.warning("Skipping verified report %s with no userId", doc["_id"])
            continue
        yield ReportTally.from_document(doc)


def tally_points(reports: Iterable[ReportTally]) -> Dict[str, int]:
    totals: Dict[str, int] = {}
    for report in reports:
        if report.status != "verified":
            continue
        totals[report.userId] = totals.get(report.userId, 0) + POINTS_PER_VERIFIED_REPORT
    return totals


def upsert_entries(db: Database, totals: Dict[str, int]) -> int:
    """Merge each total into its leaderboard entry; stops at the first failure."""
    written = 0
    for user_id, points in totals.items():
        db[LEADERBOARDS].update_one(
            {"_id": user_id},
            {"$set": {"points": points}, "$currentDate": {"lastUpdated": True}},
            upsert=True,
        )
        written += 1
    return written


def update_leaderboard(db: Database, page_size: int = PAGE_SIZE) -> int:
    """Run one full aggregation and return the number of entries written."""
    totals = tally_points(iter_verified_reports(db, page_size=page_size))
    written = upsert_entries(db, totals)
    logger.info("Leaderboard updated successfully: %d entries from %d points awarded",
                written, sum(totals.values()))
    return written

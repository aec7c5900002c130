"""
Reminder Scan Runner
Run one scan from cron: python run_reminders.py day-ahead|hour-ahead|vaccinations
"""

import argparse
import json
import logging
import sys

from sqlalchemy.exc import SQLAlchemyError

from app.core.clock import utcnow
from app.core.config import settings
from app.core.database import get_thread_db
from app.models.appointment import ReminderWindow
from app.services.notification_gateway import get_notification_gateway
from app.services.reminder_scanner import ReminderWindowScanner
from app.services.vaccination_service import VaccinationReminderScanner
from app import models  # noqa: F401

logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format=settings.log_format,
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger(__name__)

JOBS = ("day-ahead", "hour-ahead", "vaccinations")


def build_scanner(job: str, db, gateway):
    if job == "day-ahead":
        return ReminderWindowScanner.for_window(db, gateway, ReminderWindow.DAY_AHEAD)
    if job == "hour-ahead":
        return ReminderWindowScanner.for_window(db, gateway, ReminderWindow.HOUR_AHEAD)
    return VaccinationReminderScanner(db, gateway)


def run(job: str) -> int:
    db = get_thread_db()
    try:
        summary = build_scanner(job, db, get_notification_gateway()).scan(utcnow())
    except SQLAlchemyError as e:
        logger.error(f"❌ {job} scan aborted, record store unavailable: {e}")
        return 1
    finally:
        db.close()

    print(json.dumps(summary.to_dict()))
    return 0


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Run one reminder scan and print its summary")
    parser.add_argument("job", choices=JOBS)
    args = parser.parse_args(argv)

    logger.info(f"🚀 Starting {args.job} reminder scan...")
    return run(args.job)


if __name__ == "__main__":
    sys.exit(main())

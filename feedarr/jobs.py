"""
Scheduled sweeps
The RSS sweep and the backlog sweep run on independent intervals
"""

import logging
import time
from typing import Callable

import schedule

from .config import VALID_SCHEDULE_UNITS

logger = logging.getLogger(__name__)


def _guarded(name: str, job: Callable[[], object]) -> Callable[[], None]:
    """Wrap a job so an unexpected error never stops the scheduler"""

    def run():
        logger.info(f"Running scheduled {name} at {time.strftime('%Y-%m-%d %H:%M:%S')}")
        try:
            job()
        except Exception:
            logger.exception(f"Error during scheduled {name}")

    return run


def add_job(
    scheduler: schedule.Scheduler,
    name: str,
    job: Callable[[], object],
    interval: int,
    unit: str,
) -> schedule.Job:
    """Register a job on the scheduler every `interval` `unit`"""
    if unit not in VALID_SCHEDULE_UNITS:
        raise ValueError(f"Invalid schedule unit: {unit}")

    scheduled = getattr(scheduler.every(interval), unit).do(_guarded(name, job))
    logger.info(f"Scheduled {name} every {interval} {unit}")
    return scheduled


def build_scheduler(
    rss_job: Callable[[], object] | None,
    backlog_job: Callable[[], object] | None,
    rss_interval: int,
    rss_unit: str,
    backlog_interval: int,
    backlog_unit: str,
) -> schedule.Scheduler:
    scheduler = schedule.Scheduler()
    if rss_job is not None:
        add_job(scheduler, "RSS sweep", rss_job, rss_interval, rss_unit)
    if backlog_job is not None:
        add_job(scheduler, "backlog sweep", backlog_job, backlog_interval, backlog_unit)
    return scheduler


def run_forever(scheduler: schedule.Scheduler, run_now: bool = True, poll: float = 1.0) -> None:
    """Run pending jobs until interrupted"""
    if run_now:
        scheduler.run_all()

    while True:
        scheduler.run_pending()
        time.sleep(poll)

"""Tests for the scheduled sweeps"""

from unittest.mock import MagicMock

import pytest

from feedarr.jobs import add_job, build_scheduler


def test_build_scheduler_registers_independent_jobs():
    scheduler = build_scheduler(MagicMock(), MagicMock(), 15, "minutes", 1, "days")

    units = sorted(job.unit for job in scheduler.jobs)
    assert units == ["days", "minutes"]
    intervals = sorted(job.interval for job in scheduler.jobs)
    assert intervals == [1, 15]


def test_build_scheduler_skips_missing_jobs():
    scheduler = build_scheduler(None, MagicMock(), 15, "minutes", 2, "hours")

    assert len(scheduler.jobs) == 1
    assert scheduler.jobs[0].unit == "hours"


def test_failing_job_does_not_stop_the_others():
    failing = MagicMock(side_effect=RuntimeError("sonarr down"))
    healthy = MagicMock()
    scheduler = build_scheduler(failing, healthy, 15, "minutes", 1, "days")

    scheduler.run_all()

    failing.assert_called_once()
    healthy.assert_called_once()


def test_add_job_rejects_invalid_unit():
    scheduler = build_scheduler(None, None, 1, "minutes", 1, "days")

    with pytest.raises(ValueError):
        add_job(scheduler, "test", MagicMock(), 1, "fortnights")

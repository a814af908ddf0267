# /tests/test_report_tasks.py

import asyncio
import logging

import pytest

from app.services.report_tasks import ReportTaskTracker


@pytest.mark.asyncio
async def test_wait_blocks_until_scheduled_tasks_finish():
    tracker = ReportTaskTracker()
    finished = []

    async def job(label):
        await asyncio.sleep(0.05)
        finished.append(label)

    tracker.schedule(job("first"), name="job-1")
    tracker.schedule(job("second"), name="job-2")
    assert tracker.outstanding == 2
    assert finished == []

    await tracker.wait()

    assert sorted(finished) == ["first", "second"]
    assert tracker.outstanding == 0


@pytest.mark.asyncio
async def test_wait_covers_tasks_scheduled_while_waiting():
    tracker = ReportTaskTracker()
    finished = []

    async def follow_up():
        await asyncio.sleep(0.01)
        finished.append("follow-up")

    async def job():
        await asyncio.sleep(0.01)
        tracker.schedule(follow_up())
        finished.append("job")

    tracker.schedule(job())
    await tracker.wait()

    assert finished == ["job", "follow-up"]


@pytest.mark.asyncio
async def test_failed_task_is_logged_and_does_not_break_wait(caplog):
    tracker = ReportTaskTracker()

    async def broken_job():
        raise RuntimeError("disk on fire")

    with caplog.at_level(logging.ERROR, logger="app.services.report_tasks"):
        tracker.schedule(broken_job(), name="class-report:cls_broken")
        await tracker.wait()

    assert tracker.outstanding == 0
    assert "class-report:cls_broken" in caplog.text
    assert "disk on fire" in caplog.text


@pytest.mark.asyncio
async def test_has_pending_matches_unfinished_tasks_by_name():
    tracker = ReportTaskTracker()
    release = asyncio.Event()

    async def job():
        await release.wait()

    tracker.schedule(job(), name="class-report:cls_1")
    assert tracker.has_pending("class-report:cls_1")
    assert not tracker.has_pending("class-report:cls_2")

    release.set()
    await tracker.wait()
    assert not tracker.has_pending("class-report:cls_1")

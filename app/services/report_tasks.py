# /app/services/report_tasks.py

"""
Tracks report computations that run in the background.

A report request returns as soon as the computation is scheduled. The tracker
keeps a handle on every such task so that application shutdown can wait for
all of them before the database engine is released.
"""

import asyncio
import logging
from typing import Awaitable, Optional, Set

logger = logging.getLogger(__name__)


class ReportTaskTracker:
    def __init__(self):
        self._tasks: Set[asyncio.Task] = set()

    @property
    def outstanding(self) -> int:
        """Number of scheduled tasks that have not finished yet."""
        return len(self._tasks)

    def has_pending(self, name: str) -> bool:
        return any(task.get_name() == name and not task.done() for task in self._tasks)

    def schedule(self, job: Awaitable, name: Optional[str] = None) -> asyncio.Task:
        """
        Starts `job` as an independent task on the running event loop and
        returns immediately. Must be called from within the loop.
        """
        task = asyncio.ensure_future(job)
        if name:
            task.set_name(name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task):
        self._tasks.discard(task)
        if task.cancelled():
            logger.warning("Background task %s was cancelled.", task.get_name())
            return
        error = task.exception()
        if error is not None:
            logger.error("Background task %s failed.", task.get_name(), exc_info=error)

    async def wait(self):
        """Blocks until every scheduled task, including ones scheduled meanwhile, is done."""
        while True:
            pending = [task for task in self._tasks if not task.done()]
            if not pending:
                return
            logger.info("Waiting for %d background report task(s) to finish...", len(pending))
            await asyncio.gather(*pending, return_exceptions=True)


# --- SINGLETON & DEPENDENCY PROVIDER ---
report_tracker = ReportTaskTracker()


def get_report_tracker() -> ReportTaskTracker:
    """Dependency provider for the process-wide ReportTaskTracker."""
    return report_tracker

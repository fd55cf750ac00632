"""Background task slots where a new request supersedes the running one."""

from __future__ import annotations

import asyncio
import logging
from typing import Coroutine


logger = logging.getLogger(__name__)


class TaskSupervisor:
    """Keep at most one running task per kind, cancelling the old one first."""

    def __init__(self) -> None:
        self._tasks: dict[str, asyncio.Task[None]] = {}

    def running(self, kind: str) -> bool:
        task = self._tasks.get(kind)
        return task is not None and not task.done()

    def start(self, kind: str, coroutine: Coroutine[object, object, None]) -> asyncio.Task[None]:
        self.cancel(kind)
        task = asyncio.create_task(self._run(kind, coroutine))
        task.add_done_callback(lambda done: _close_if_cancelled(done, coroutine))
        self._tasks[kind] = task
        return task

    def cancel(self, kind: str) -> None:
        existing = self._tasks.pop(kind, None)
        if existing is not None and not existing.done():
            existing.cancel()
            logger.debug("Cancelled superseded %s task", kind)

    async def cancel_all(self) -> None:
        tasks = list(self._tasks.values())
        self._tasks.clear()
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)

    async def _run(self, kind: str, coroutine: Coroutine[object, object, None]) -> None:
        try:
            await coroutine
        except asyncio.CancelledError:
            raise
        except Exception:
            logger.exception("Background %s task failed", kind)


def _close_if_cancelled(task: asyncio.Task[None], coroutine: Coroutine[object, object, None]) -> None:
    # A task cancelled before its first step never awaited the wrapped coroutine.
    if task.cancelled():
        coroutine.close()

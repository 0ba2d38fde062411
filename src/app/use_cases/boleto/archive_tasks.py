"""Controle das tasks de arquivamento em background."""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from collections.abc import Awaitable

logger = logging.getLogger(__name__)


class ArchiveTaskRunner:
    """Agenda arquivamentos com limite de concorrência e drena no shutdown."""

    def __init__(self, max_concurrency: int = 20) -> None:
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._active_tasks: set[asyncio.Task[Any]] = set()

    @property
    def active_count(self) -> int:
        return len(self._active_tasks)

    def schedule(self, *, nsu_code: str, coroutine: Awaitable[Any]) -> asyncio.Task[Any]:
        task = asyncio.create_task(self._run_with_limit(coroutine))
        self._active_tasks.add(task)
        task.add_done_callback(self._on_task_done)
        logger.info(
            "archive_task_scheduled",
            extra={"nsu_code": nsu_code, "active_tasks": len(self._active_tasks)},
        )
        return task

    async def _run_with_limit(self, coroutine: Awaitable[Any]) -> Any:
        async with self._semaphore:
            return await coroutine

    def _on_task_done(self, task: asyncio.Task[Any]) -> None:
        self._active_tasks.discard(task)
        with contextlib.suppress(asyncio.CancelledError):
            exc = task.exception()
            if exc is not None:
                # O registro já ficou archive_failed; só falta o log.
                logger.error(
                    "archive_task_failed",
                    extra={
                        "error_type": type(exc).__name__,
                        "active_tasks": len(self._active_tasks),
                    },
                )

    async def drain(self, timeout_seconds: float = 30.0) -> None:
        """Aguarda tasks pendentes durante shutdown do processo."""
        if not self._active_tasks:
            return

        pending_now = list(self._active_tasks)
        logger.info(
            "archive_tasks_shutdown_wait",
            extra={"pending_tasks": len(pending_now), "timeout_seconds": timeout_seconds},
        )
        _, pending = await asyncio.wait(pending_now, timeout=timeout_seconds)
        if not pending:
            return

        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)
        logger.warning(
            "archive_tasks_shutdown_cancelled",
            extra={"cancelled_tasks": len(pending)},
        )

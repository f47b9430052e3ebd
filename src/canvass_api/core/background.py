"""Background task runner and the score-aggregation queue.

The runner executes coroutines as in-process asyncio tasks and tracks their
status. ``InProcessScoreQueue`` is the task queue the ingestion path talks to:
it only knows ``enqueue(score_id)``, so the substrate can later move to
Celery/ARQ without touching the services. Delivery is at-least-once with no
ordering guarantee, which the leaderboard aggregation tolerates.
"""

import asyncio
import enum
import uuid
from collections.abc import Awaitable, Callable, Coroutine
from typing import Any, Protocol

from loguru import logger
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker


class JobStatus(enum.StrEnum):
    """Status of a background job."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"


_FINISHED = frozenset({JobStatus.COMPLETED, JobStatus.FAILED})


class BackgroundTaskRunner(Protocol):
    """Protocol for background task execution."""

    def submit_task(self, coro: Coroutine[Any, Any, Any]) -> str:
        """Submit an async task for background execution and return its job ID."""
        ...

    def get_status(self, job_id: str) -> JobStatus:
        """Get the current status of a background job."""
        ...


class TaskQueue(Protocol):
    """Queue port used by visit ingestion to request leaderboard aggregation."""

    def enqueue(self, score_id: uuid.UUID) -> str:
        """Schedule aggregation for a persisted score and return a job ID."""
        ...


class InProcessTaskRunner:
    """In-process background task runner using asyncio.

    Tasks run in the same process as the API server using
    ``asyncio.create_task()``. Failures are logged and recorded as
    ``FAILED``; they are not re-raised into the event loop. Finished tasks
    are released, and only the newest ``max_retained_jobs`` statuses are
    kept once jobs have finished.
    """

    def __init__(self, max_retained_jobs: int = 1000) -> None:
        self._max_retained_jobs = max_retained_jobs
        self._jobs: dict[str, JobStatus] = {}
        self._tasks: dict[str, asyncio.Task[Any]] = {}

    def submit_task(self, coro: Coroutine[Any, Any, Any]) -> str:
        """Submit an async task for background execution.

        Args:
            coro: The coroutine to execute.

        Returns:
            A job ID string for tracking.
        """
        job_id = str(uuid.uuid4())
        self._jobs[job_id] = JobStatus.PENDING

        async def _run() -> None:
            self._jobs[job_id] = JobStatus.RUNNING
            try:
                await coro
            except Exception:
                self._jobs[job_id] = JobStatus.FAILED
                logger.exception(f"Background job {job_id} failed")
            else:
                self._jobs[job_id] = JobStatus.COMPLETED
            finally:
                self._tasks.pop(job_id, None)
                self._evict_finished()

        self._tasks[job_id] = asyncio.create_task(_run())
        return job_id

    def get_status(self, job_id: str) -> JobStatus:
        """Get the current status of a background job.

        Raises:
            KeyError: If the job ID is not found.
        """
        return self._jobs[job_id]

    def _evict_finished(self) -> None:
        """Drop the oldest finished statuses beyond ``max_retained_jobs``."""
        excess = len(self._jobs) - self._max_retained_jobs
        if excess <= 0:
            return
        finished = [job_id for job_id, status in self._jobs.items() if status in _FINISHED]
        for job_id in finished[:excess]:
            del self._jobs[job_id]

    async def wait_all(self) -> None:
        """Wait until every submitted task has finished."""
        pending = [task for task in self._tasks.values() if not task.done()]
        if pending:
            await asyncio.gather(*pending)


ScoreHandler = Callable[[AsyncSession, uuid.UUID], Awaitable[Any]]


class InProcessScoreQueue:
    """Task queue that runs score aggregation on an ``InProcessTaskRunner``.

    Each delivery opens its own session, so aggregation never shares a
    transaction with the request that enqueued it.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        handler: ScoreHandler,
        runner: InProcessTaskRunner | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._handler = handler
        self.runner = runner or InProcessTaskRunner()

    def enqueue(self, score_id: uuid.UUID) -> str:
        """Schedule aggregation for ``score_id``.

        Args:
            score_id: ID of a committed Score.

        Returns:
            The background job ID.
        """

        async def _deliver() -> None:
            async with self._session_factory() as session:
                await self._handler(session, score_id)

        job_id = self.runner.submit_task(_deliver())
        logger.bind(json_output=True).info(f"Enqueued aggregation job {job_id} for score {score_id}")
        return job_id

    async def wait_all(self) -> None:
        """Wait for all queued deliveries to finish."""
        await self.runner.wait_all()

"""
StartupDeferralQueue - holds non-critical start-up work until the app is ready.

State Machine:
- uninitialized -> initialized (one-way; mark_initialized() again is a no-op)

While uninitialized, defer_task() only queues. mark_initialized() schedules a
processing pass after a short delay on the running event loop. A pass runs
every queued task concurrently, logs each failure on its own and never lets
one failure cancel the others. Processed tasks are dropped from the queue
whatever their outcome; nothing is retried.

Tasks deferred after initialization are run by another pass.
"""
import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional

logger = logging.getLogger(__name__)

DeferredTask = Callable[[], Awaitable[None]]


@dataclass(frozen=True)
class TaskOutcome:
    """Settled result of one deferred task."""
    index: int
    succeeded: bool
    error: Optional[BaseException] = None


class StartupDeferralQueue:
    """
    Args:
        delay_s: Pause between initialization and the processing pass
    """

    def __init__(self, delay_s: float = 0.1) -> None:
        self._delay_s = delay_s
        self._initialized = False
        self._tasks: List[DeferredTask] = []
        self._pass: Optional[asyncio.Task] = None
        self._last_outcomes: List[TaskOutcome] = []

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    @property
    def pending_task_count(self) -> int:
        return len(self._tasks)

    @property
    def last_outcomes(self) -> List[TaskOutcome]:
        return list(self._last_outcomes)

    def defer_task(self, task: DeferredTask) -> None:
        self._tasks.append(task)
        logger.debug("StartupDeferralQueue: task deferred (%d pending)", len(self._tasks))
        if self._initialized:
            self._schedule_pass()

    def mark_initialized(self) -> None:
        """
        Switch to initialized and schedule the deferred tasks.

        Must be called from a running event loop.
        """
        if self._initialized:
            return
        self._initialized = True
        logger.info("StartupDeferralQueue: app marked as initialized")
        self._schedule_pass()

    async def wait_until_idle(self) -> List[TaskOutcome]:
        """Wait for the scheduled processing pass(es) and return the latest outcomes."""
        while self._pass is not None and not self._pass.done():
            await self._pass
        return self.last_outcomes

    def _schedule_pass(self) -> None:
        if self._pass is not None and not self._pass.done():
            return
        loop = asyncio.get_running_loop()
        self._pass = loop.create_task(self._process_after_delay())

    async def _process_after_delay(self) -> None:
        await asyncio.sleep(self._delay_s)
        while self._tasks:
            await self._process_batch()

    async def _process_batch(self) -> List[TaskOutcome]:
        batch = list(self._tasks)
        if not batch:
            return []

        logger.info("StartupDeferralQueue: processing %d deferred tasks", len(batch))
        try:
            outcomes = await asyncio.gather(
                *(self._run_task(index, task) for index, task in enumerate(batch, start=1))
            )
        finally:
            # Tasks deferred while this pass ran stay queued
            del self._tasks[:len(batch)]

        self._last_outcomes = list(outcomes)
        failed = sum(1 for outcome in outcomes if not outcome.succeeded)
        logger.info("StartupDeferralQueue: deferred tasks processed (%d failed)", failed)
        return self._last_outcomes

    async def _run_task(self, index: int, task: DeferredTask) -> TaskOutcome:
        try:
            await task()
        except Exception as e:
            logger.error("StartupDeferralQueue: deferred task %d failed: %s", index, e, exc_info=True)
            return TaskOutcome(index=index, succeeded=False, error=e)
        logger.debug("StartupDeferralQueue: deferred task %d completed", index)
        return TaskOutcome(index=index, succeeded=True)

"""
Tests for StartupDeferralQueue.

Strategy: each test runs one coroutine under asyncio.run() that defers
AsyncMock tasks, marks the queue initialized and waits for the pass.
A zero delay keeps the tests fast.
"""
import asyncio
from unittest.mock import AsyncMock

from vocalflow.StartupDeferralQueue import StartupDeferralQueue


class TestBeforeInitialization:

    def test_deferred_tasks_do_not_run_before_initialization(self):
        async def scenario():
            queue = StartupDeferralQueue(delay_s=0)
            task = AsyncMock()
            queue.defer_task(task)
            await asyncio.sleep(0.01)
            return queue, task

        queue, task = asyncio.run(scenario())

        task.assert_not_awaited()
        assert queue.is_initialized is False
        assert queue.pending_task_count == 1


class TestProcessing:

    def test_all_tasks_run_after_initialization(self):
        async def scenario():
            queue = StartupDeferralQueue(delay_s=0)
            tasks = [AsyncMock() for _ in range(3)]
            for task in tasks:
                queue.defer_task(task)
            queue.mark_initialized()
            outcomes = await queue.wait_until_idle()
            return queue, tasks, outcomes

        queue, tasks, outcomes = asyncio.run(scenario())

        for task in tasks:
            task.assert_awaited_once()
        assert [o.succeeded for o in outcomes] == [True, True, True]
        assert queue.pending_task_count == 0

    def test_failing_task_does_not_stop_the_others(self):
        async def scenario():
            queue = StartupDeferralQueue(delay_s=0)
            first = AsyncMock()
            failing = AsyncMock(side_effect=RuntimeError("stats unavailable"))
            third = AsyncMock()
            for task in (first, failing, third):
                queue.defer_task(task)
            queue.mark_initialized()
            outcomes = await queue.wait_until_idle()
            return queue, (first, failing, third), outcomes

        queue, (first, failing, third), outcomes = asyncio.run(scenario())

        first.assert_awaited_once()
        third.assert_awaited_once()
        assert len(outcomes) == 3
        assert [o.succeeded for o in outcomes] == [True, False, True]
        assert isinstance(outcomes[1].error, RuntimeError)
        assert queue.is_initialized is True
        assert queue.pending_task_count == 0

    def test_tasks_are_not_retried(self):
        async def scenario():
            queue = StartupDeferralQueue(delay_s=0)
            failing = AsyncMock(side_effect=ValueError("boom"))
            queue.defer_task(failing)
            queue.mark_initialized()
            await queue.wait_until_idle()
            await asyncio.sleep(0.01)
            return failing

        failing = asyncio.run(scenario())

        assert failing.await_count == 1

    def test_mark_initialized_twice_is_a_no_op(self):
        async def scenario():
            queue = StartupDeferralQueue(delay_s=0)
            task = AsyncMock()
            queue.defer_task(task)
            queue.mark_initialized()
            queue.mark_initialized()
            await queue.wait_until_idle()
            return task

        task = asyncio.run(scenario())

        task.assert_awaited_once()

    def test_task_deferred_after_initialization_still_runs(self):
        async def scenario():
            queue = StartupDeferralQueue(delay_s=0)
            queue.mark_initialized()
            await queue.wait_until_idle()
            late = AsyncMock()
            queue.defer_task(late)
            await queue.wait_until_idle()
            return queue, late

        queue, late = asyncio.run(scenario())

        late.assert_awaited_once()
        assert queue.pending_task_count == 0

    def test_task_deferred_during_a_pass_runs_once(self):
        late = AsyncMock()

        async def scenario():
            queue = StartupDeferralQueue(delay_s=0)

            async def early():
                queue.defer_task(late)

            first = AsyncMock(side_effect=early)
            queue.defer_task(first)
            queue.mark_initialized()
            await queue.wait_until_idle()
            return queue, first

        queue, first = asyncio.run(scenario())

        first.assert_awaited_once()
        late.assert_awaited_once()
        assert queue.pending_task_count == 0

    def test_empty_queue_processes_nothing(self):
        async def scenario():
            queue = StartupDeferralQueue(delay_s=0)
            queue.mark_initialized()
            return await queue.wait_until_idle()

        assert asyncio.run(scenario()) == []

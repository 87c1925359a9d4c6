"""Tests for suppression counters and scopes."""

import asyncio
import contextvars
import threading

import pytest

from seedgate.core.settings import ScopeMode
from seedgate.gate.suppression import (
    ContextCounter,
    ProcessCounter,
    ScopeToken,
    SuppressionScope,
    make_counter,
)


@pytest.fixture(params=[ContextCounter, ProcessCounter], ids=["context", "process"])
def counter(request):
    return request.param()


class TestCounters:
    def test_starts_at_zero(self, counter):
        assert counter.depth == 0

    def test_token_closes_once(self):
        token = ScopeToken()
        assert token.close() is True
        assert token.close() is False
        assert token.released

    def test_make_counter(self):
        assert isinstance(make_counter(ScopeMode.CONTEXT), ContextCounter)
        assert isinstance(make_counter(ScopeMode.PROCESS), ProcessCounter)

    def test_context_counters_are_independent(self):
        a, b = ContextCounter(), ContextCounter()
        a.enter()
        assert a.depth == 1
        assert b.depth == 0


class TestSuppressionScope:
    def test_opening_increments(self, counter):
        scope = SuppressionScope(counter, reason="seed companies")
        assert scope.depth == 1
        assert counter.depth == 1
        assert scope.active

    def test_nested_scopes(self, counter):
        with SuppressionScope(counter) as outer:
            with SuppressionScope(counter) as inner:
                assert inner.depth == 2
            assert counter.depth == 1
            assert outer.active
        assert counter.depth == 0

    def test_inner_release_keeps_outer_suppression(self, counter):
        outer = SuppressionScope(counter)
        inner = SuppressionScope(counter)
        inner.release()
        assert counter.depth == 1
        outer.release()
        assert counter.depth == 0

    def test_double_release_is_noop(self, counter):
        outer = SuppressionScope(counter)
        inner = SuppressionScope(counter)
        inner.release()
        inner.release()
        assert counter.depth == 1
        assert not inner.active
        outer.release()

    def test_released_on_exception(self, counter):
        with pytest.raises(RuntimeError):
            with SuppressionScope(counter):
                raise RuntimeError("seeding failed")
        assert counter.depth == 0

    def test_repr(self, counter):
        scope = SuppressionScope(counter)
        assert repr(scope) == "SuppressionScope(depth=1, active)"
        scope.release()
        assert repr(scope) == "SuppressionScope(depth=1, released)"


class TestAsyncScopes:
    @pytest.mark.asyncio
    async def test_async_context_manager(self):
        counter = ContextCounter()
        async with SuppressionScope(counter):
            assert counter.depth == 1
        assert counter.depth == 0

    @pytest.mark.asyncio
    async def test_tasks_do_not_share_context_depth(self):
        counter = ContextCounter()
        opened = asyncio.Event()
        observed = []

        async def seeding_task():
            with SuppressionScope(counter):
                opened.set()
                await asyncio.sleep(0.01)

        async def request_task():
            await opened.wait()
            observed.append(counter.depth)

        await asyncio.gather(seeding_task(), request_task())
        assert observed == [0]

    @pytest.mark.asyncio
    async def test_child_task_inherits_open_scope(self):
        counter = ContextCounter()

        async def child():
            return counter.depth

        with SuppressionScope(counter):
            assert await asyncio.create_task(child()) == 1


class TestProcessCounterThreads:
    def test_concurrent_scopes_balance(self):
        counter = ProcessCounter()
        barrier = threading.Barrier(10)

        def worker():
            barrier.wait()
            for _ in range(100):
                with SuppressionScope(counter):
                    pass

        threads = [threading.Thread(target=worker) for _ in range(10)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert counter.depth == 0

    def test_scope_visible_to_other_threads(self):
        counter = ProcessCounter()
        seen = []
        with SuppressionScope(counter):
            t = threading.Thread(target=lambda: seen.append(counter.depth))
            t.start()
            t.join()
        assert seen == [1]


class TestReleaseFromAnotherContext:
    def test_release_from_other_thread(self, counter):
        scope = SuppressionScope(counter)
        worker = threading.Thread(target=scope.release)
        worker.start()
        worker.join()
        assert not scope.active
        assert counter.depth == 0

    def test_release_from_copied_context(self, counter):
        scope = SuppressionScope(counter)
        contextvars.copy_context().run(scope.release)
        assert counter.depth == 0

    def test_foreign_release_leaves_other_scopes_open(self):
        counter = ContextCounter()
        outer = SuppressionScope(counter)
        inner = SuppressionScope(counter)
        contextvars.copy_context().run(inner.release)
        assert counter.depth == 1
        outer.release()
        assert counter.depth == 0

    @pytest.mark.asyncio
    async def test_child_task_loses_suppression_when_parent_releases(self):
        counter = ContextCounter()
        released = asyncio.Event()

        async def child():
            before = counter.depth
            await released.wait()
            return before, counter.depth

        scope = SuppressionScope(counter)
        task = asyncio.create_task(child())
        await asyncio.sleep(0)
        scope.release()
        released.set()
        assert await task == (1, 0)

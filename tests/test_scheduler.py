import asyncio

from guirlande.core.scheduler import AsyncioScheduler


class TestAsyncioScheduler:
    """Test scheduling on a real event loop"""

    async def test_recurring_runs_until_stopped(self):
        scheduler = AsyncioScheduler()
        calls = []
        handle = scheduler.run_recurring("tick", lambda: calls.append(1), 10)

        await asyncio.sleep(0.1)
        handle.stop()
        count = len(calls)
        await asyncio.sleep(0.05)

        assert count >= 3
        assert len(calls) == count
        assert not handle.active

    async def test_same_key_returns_existing_handle(self):
        scheduler = AsyncioScheduler()
        first = scheduler.run_recurring("tick", lambda: None, 10)
        second = scheduler.run_recurring("tick", lambda: None, 10)
        assert first is second
        await scheduler.stop_all()

    async def test_key_reusable_after_stop(self):
        scheduler = AsyncioScheduler()
        first = scheduler.run_recurring("tick", lambda: None, 10)
        first.stop()
        second = scheduler.run_recurring("tick", lambda: None, 10)
        assert second is not first
        assert second.active
        await scheduler.stop_all()

    async def test_run_once(self):
        scheduler = AsyncioScheduler()
        calls = []
        handle = scheduler.run_once(lambda: calls.append(1), 10)

        await asyncio.sleep(0.05)

        assert calls == [1]
        assert not handle.active

    async def test_run_once_cancelled(self):
        scheduler = AsyncioScheduler()
        calls = []
        handle = scheduler.run_once(lambda: calls.append(1), 20)
        handle.stop()

        await asyncio.sleep(0.05)

        assert calls == []

    async def test_async_callbacks_awaited(self):
        scheduler = AsyncioScheduler()
        calls = []

        async def callback():
            await asyncio.sleep(0)
            calls.append(1)

        scheduler.run_once(callback, 5)
        await asyncio.sleep(0.05)
        assert calls == [1]

    async def test_failing_callback_keeps_running(self, caplog):
        scheduler = AsyncioScheduler()
        calls = []

        def callback():
            calls.append(1)
            raise ValueError("boom")

        scheduler.run_recurring("failing", callback, 10)
        await asyncio.sleep(0.08)
        await scheduler.stop_all()

        assert len(calls) >= 2
        assert "boom" in caplog.text

    async def test_stop_from_inside_callback(self):
        scheduler = AsyncioScheduler()
        calls = []

        def callback():
            calls.append(1)
            handle.stop()

        handle = scheduler.run_recurring("self-stop", callback, 10)
        await asyncio.sleep(0.08)

        assert calls == [1]
        assert not handle.active

    async def test_stop_all(self):
        scheduler = AsyncioScheduler()
        calls = []
        scheduler.run_recurring("a", lambda: calls.append("a"), 10)
        scheduler.run_once(lambda: calls.append("b"), 50)

        await scheduler.stop_all()
        await asyncio.sleep(0.08)

        assert calls == []

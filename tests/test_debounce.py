"""Tests for the debounce utility."""

import asyncio

from gotask.debounce import Debouncer


def make_counter():
    calls = []

    async def callback():
        calls.append(asyncio.get_running_loop().time())

    return calls, callback


class TestDebouncer:
    def test_coalesces_rapid_triggers(self):
        calls, callback = make_counter()

        async def scenario():
            debouncer = Debouncer(0.05, callback)
            for _ in range(5):
                debouncer.trigger()
                await asyncio.sleep(0.01)
            await asyncio.sleep(0.15)

        asyncio.run(scenario())
        assert len(calls) == 1

    def test_separate_bursts_run_separately(self):
        calls, callback = make_counter()

        async def scenario():
            debouncer = Debouncer(0.02, callback)
            debouncer.trigger()
            await asyncio.sleep(0.1)
            debouncer.trigger()
            await asyncio.sleep(0.1)

        asyncio.run(scenario())
        assert len(calls) == 2

    def test_flush_runs_pending_call_now(self):
        calls, callback = make_counter()

        async def scenario():
            debouncer = Debouncer(10, callback)
            debouncer.trigger()
            assert debouncer.pending
            await debouncer.flush()
            assert not debouncer.pending

        asyncio.run(scenario())
        assert len(calls) == 1

    def test_flush_without_pending_is_noop(self):
        calls, callback = make_counter()
        asyncio.run(Debouncer(0.01, callback).flush())
        assert calls == []

    def test_cancel_drops_pending_call(self):
        calls, callback = make_counter()

        async def scenario():
            debouncer = Debouncer(0.02, callback)
            debouncer.trigger()
            debouncer.cancel()
            await asyncio.sleep(0.1)
            await debouncer.flush()

        asyncio.run(scenario())
        assert calls == []

    def test_calls_never_overlap(self):
        active = []
        overlaps = []

        async def slow():
            if active:
                overlaps.append(True)
            active.append(1)
            await asyncio.sleep(0.05)
            active.pop()

        async def scenario():
            debouncer = Debouncer(0, slow)
            debouncer.trigger()
            await asyncio.sleep(0.01)
            debouncer.trigger()
            await asyncio.sleep(0.01)
            await debouncer.flush()
            await asyncio.sleep(0.1)

        asyncio.run(scenario())
        assert overlaps == []

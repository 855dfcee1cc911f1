import asyncio

import pytest

from category_timers import TickDriver

class CountingStore:
    def __init__(self, fail_first: bool = False) -> None:
        self.ticks = 0
        self.fail_first = fail_first

    def tick(self) -> bool:
        self.ticks += 1
        if self.fail_first and self.ticks == 1:
            raise RuntimeError('first tick fails')
        return False

def test_ticks_until_cancelled():
    store = CountingStore()
    driver = TickDriver(store, interval=0.01)

    async def main():
        async with driver.Running():
            assert driver.isRunning
            await asyncio.sleep(0.1)
        assert not driver.isRunning
        seen = store.ticks
        await asyncio.sleep(0.05)
        return seen

    seen = asyncio.run(main())
    assert seen > 0
    assert store.ticks == seen

def test_double_start_raises():
    driver = TickDriver(CountingStore(), interval=0.01)

    async def main():
        driver.start()
        try:
            with pytest.raises(RuntimeError):
                driver.start()
        finally:
            await driver.aclose()

    asyncio.run(main())
    assert driver.task is None

def test_failing_tick_keeps_loop_alive():
    store = CountingStore(fail_first=True)
    driver = TickDriver(store, interval=0.01)

    async def main():
        async with driver.Running():
            await asyncio.sleep(0.1)

    asyncio.run(main())
    assert store.ticks > 1

def test_cancel_before_start_is_harmless():
    driver = TickDriver(CountingStore())
    driver.cancel()
    assert driver.task is None

def test_drives_a_real_store(store, clock, history):
    timer = store.add(dict(name='Read', duration=2, category='Study'))
    store.start(timer.id)
    driver = TickDriver(store, interval=0.01)

    async def main():
        async with driver.Running():
            clock.advance(5)
            for _ in range(100):
                await asyncio.sleep(0.01)
                if history.list():
                    break

    asyncio.run(main())
    assert store.get(timer.id).remaining_time == 0
    assert len(history.list()) == 1

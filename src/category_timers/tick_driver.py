from __future__ import annotations

import asyncio
import logging
import typing as tp
from contextlib import asynccontextmanager, suppress

from .timer_store import TimerStore
from . import config

logger = logging.getLogger(__name__)

class TickDriver:
    '''
    Calls `store.tick()` every `interval` seconds on the running event loop.
    Elapsed time is read from timestamps, not counted from ticks, so a
    late or skipped tick does not lose time.
    '''
    def __init__(
        self, store: TimerStore,
        interval: float = config.TICK_INTERVAL_SECONDS,
    ) -> None:
        self.store = store
        self.interval = interval
        self.task: asyncio.Task | None = None

    @property
    def isRunning(self) -> bool:
        return self.task is not None

    def start(self) -> asyncio.Task:
        if self.task is not None:
            raise RuntimeError('TickDriver already started')
        self.task = asyncio.create_task(self.loop())
        return self.task

    async def loop(self) -> None:
        try:
            while True:
                await asyncio.sleep(self.interval)
                try:
                    self.store.tick()
                except Exception:
                    logger.exception('Tick failed')
        except asyncio.CancelledError:
            return

    def cancel(self) -> None:
        if self.task is not None:
            self.task.cancel()
            self.task = None

    async def aclose(self) -> None:
        task = self.task
        self.cancel()
        if task is not None:
            with suppress(asyncio.CancelledError):
                await task

    @asynccontextmanager
    async def Running(self) -> tp.AsyncGenerator[TickDriver, None]:
        self.start()
        try:
            yield self
        finally:
            await self.aclose()

from __future__ import annotations

import logging
import typing as tp

from .shared import Timer, TimerHistory, newId
from .clock import Clock, SystemClock
from .persistent import Persistent

logger = logging.getLogger(__name__)

class HistoryLog:
    '''
    Append-only record of completed timer runs.
    Entries outlive the timers they were taken from.
    '''
    def __init__(
        self, persistent: Persistent, clock: Clock | None = None,
    ) -> None:
        self.persistent = persistent
        self.clock = clock or SystemClock()
        self.__entries: tuple[TimerHistory, ...] = ()
        self.__listeners: list[tp.Callable[[tuple[TimerHistory, ...]], None]] = []

    def load(self) -> None:
        self.__entries = tuple(self.persistent.loadHistory())
        self.__notify()

    def record(self, timer: Timer) -> TimerHistory:
        now = self.clock.nowMs()
        entry = TimerHistory(
            id=newId(now, (e.id for e in self.__entries)),
            timer_id=timer.id,
            timer_name=timer.name,
            category=timer.category,
            duration=timer.duration,
            completed_at=now,
        )
        self.__entries = (*self.__entries, entry)
        self.persistent.saveHistory(self.__entries)
        logger.info('Recorded completion of %r (%s)', timer.name, timer.id)
        self.__notify()
        return entry

    def clear(self) -> None:
        self.__entries = ()
        self.persistent.saveHistory(self.__entries)
        self.__notify()

    def sortedForDisplay(self) -> list[TimerHistory]:
        return sorted(
            self.__entries, key=lambda e: e.completed_at, reverse=True,
        )

    def subscribe(
        self, listener: tp.Callable[[tuple[TimerHistory, ...]], None],
    ) -> tp.Callable[[], None]:
        self.__listeners.append(listener)
        def unsubscribe() -> None:
            if listener in self.__listeners:
                self.__listeners.remove(listener)
        return unsubscribe

    def __notify(self) -> None:
        for listener in [*self.__listeners]:
            try:
                listener(self.__entries)
            except Exception:
                logger.exception('History listener failed')

    def list(self) -> tuple[TimerHistory, ...]:
        return self.__entries

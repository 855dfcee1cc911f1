from __future__ import annotations

import logging
import typing as tp

from .shared import (
    Timer, TimerDraft, TimerEvent, EpochMs, newId, groupByCategory,
)
from .clock import Clock, SystemClock
from .persistent import Persistent
from .history_log import HistoryLog

logger = logging.getLogger(__name__)

Step = tuple[Timer, list[TimerEvent.Base]]

def advance(timer: Timer, now_ms: EpochMs) -> Step:
    '''
    Accrue whole elapsed seconds against a running timer.
    `last_started_at` moves forward by exactly the accrued seconds,
    so the sub-second remainder carries over to the next call.
    '''
    if not timer.isRunning:
        return timer, []
    if timer.last_started_at is None:
        elapsed, rebased = 0, now_ms
    else:
        elapsed = max(0, (now_ms - timer.last_started_at) // 1000)
        # Not rebased to now_ms: a pass that accrues nothing leaves the timer untouched.
        rebased = timer.last_started_at + elapsed * 1000
    new_remaining = max(0, timer.remaining_time - elapsed)

    if timer.remaining_time > 0 and new_remaining == 0:
        return timer.model_copy(update=dict(
            is_active=False,
            is_paused=False,
            remaining_time=0,
            last_started_at=None,
        )), [TimerEvent.Completed(timer.id, timer.name)]

    events: list[TimerEvent.Base] = []
    if (
        timer.halfway_alert and
        timer.remaining_time > timer.duration / 2 >= new_remaining
    ):
        events.append(TimerEvent.Halfway(timer.id, timer.name))
    still_active = new_remaining > 0
    return timer.model_copy(update=dict(
        remaining_time=new_remaining,
        last_started_at=rebased if still_active else None,
        is_active=still_active,
    )), events

def started(timer: Timer, now_ms: EpochMs) -> Step:
    timer, events = advance(timer, now_ms)
    if any(isinstance(e, TimerEvent.Completed) for e in events):
        return timer, events
    return timer.model_copy(update=dict(
        is_active=True,
        is_paused=False,
        last_started_at=now_ms,
    )), events

def paused(timer: Timer, now_ms: EpochMs) -> Step:
    if not timer.is_active:
        return timer, []
    timer, events = advance(timer, now_ms)
    if not timer.is_active:
        return timer, events
    return timer.model_copy(update=dict(
        is_paused=True,
        last_started_at=None,
    )), events

def stopped(timer: Timer, now_ms: EpochMs) -> Step:
    timer, events = advance(timer, now_ms)
    return timer.model_copy(update=dict(
        is_active=False,
        is_paused=False,
        last_started_at=None,
    )), events

def wasReset(timer: Timer) -> Step:
    return timer.model_copy(update=dict(
        is_active=False,
        is_paused=False,
        remaining_time=timer.duration,
        last_started_at=None,
    )), []

class TimerStore:
    '''
    Owns the timer collection.
    Every mutation rewrites the whole collection to `persistent` and
    then notifies subscribers. Unknown ids are silently ignored.
    Completions found along the way are appended to `history`.
    '''
    def __init__(
        self, persistent: Persistent, history: HistoryLog,
        clock: Clock | None = None,
    ) -> None:
        self.persistent = persistent
        self.history = history
        self.clock = clock or SystemClock()
        self.__timers: tuple[Timer, ...] = ()
        self.__change_listeners: list[tp.Callable[[tuple[Timer, ...]], None]] = []
        self.__event_listeners: list[tp.Callable[[TimerEvent.Base], None]] = []

    def load(self) -> None:
        self.__timers = tuple(self.persistent.loadTimers())
        self.__notifyChanges()

    @property
    def timers(self) -> tuple[Timer, ...]:
        return self.__timers

    def get(self, id_: str) -> Timer | None:
        for timer in self.__timers:
            if timer.id == id_:
                return timer
        return None

    def isRunning(self, id_: str) -> bool:
        timer = self.get(id_)
        return timer is not None and timer.isRunning

    def categories(self) -> list[str]:
        return list(groupByCategory(self.__timers))

    def byCategory(self) -> dict[str, list[Timer]]:
        return groupByCategory(self.__timers)

    def add(self, draft: TimerDraft | tp.Mapping[str, tp.Any]) -> Timer:
        if not isinstance(draft, TimerDraft):
            draft = TimerDraft.model_validate(draft)
        timer = draft.toTimer(newId(
            self.clock.nowMs(), (t.id for t in self.__timers),
        ))
        self.__commit((*self.__timers, timer), [])
        return timer

    def update(self, timer: Timer) -> None:
        '''
        Raises `ValueError` (pydantic's `ValidationError` included) before
        touching the collection if `timer` is not a valid record.
        '''
        # model_copy() skips validation.
        timer = Timer.model_validate(timer.model_dump())
        existing = self.get(timer.id)
        if existing is not None and (
            existing.duration != timer.duration or
            existing.halfway_alert != timer.halfway_alert
        ):
            raise ValueError(
                f'duration and halfwayAlert of timer {timer.id} are immutable'
            )
        self.__apply(lambda t: (timer if t.id == timer.id else t, []))

    def delete(self, id_: str) -> None:
        self.__commit([t for t in self.__timers if t.id != id_], [])

    def start(self, id_: str) -> None:
        now = self.clock.nowMs()
        self.__apply(lambda t: started(t, now) if t.id == id_ else (t, []))

    def pause(self, id_: str) -> None:
        now = self.clock.nowMs()
        self.__apply(lambda t: paused(t, now) if t.id == id_ else (t, []))

    def stop(self, id_: str) -> None:
        now = self.clock.nowMs()
        self.__apply(lambda t: stopped(t, now) if t.id == id_ else (t, []))

    def reset(self, id_: str) -> None:
        self.__apply(lambda t: wasReset(t) if t.id == id_ else (t, []))

    def startAll(self, category: str) -> None:
        now = self.clock.nowMs()
        self.__apply(lambda t: started(t, now) if (
            t.category == category and t.remaining_time > 0
        ) else (t, []))

    def pauseAll(self, category: str) -> None:
        now = self.clock.nowMs()
        self.__apply(lambda t: paused(t, now) if (
            t.category == category and t.is_active
        ) else (t, []))

    def resetAll(self, category: str) -> None:
        self.__apply(lambda t: wasReset(t) if (
            t.category == category
        ) else (t, []))

    def tick(self) -> bool:
        '''
        One recomputation pass over running timers.
        Returns whether anything changed, in which case the collection
        was persisted.
        '''
        now = self.clock.nowMs()
        changed = self.__apply(lambda t: advance(t, now), only_if_changed=True)
        logger.debug('Tick at %d, changed=%s', now, changed)
        return changed

    def subscribeChanges(
        self, listener: tp.Callable[[tuple[Timer, ...]], None],
    ) -> tp.Callable[[], None]:
        return self.__subscribe(self.__change_listeners, listener)

    def subscribeEvents(
        self, listener: tp.Callable[[TimerEvent.Base], None],
    ) -> tp.Callable[[], None]:
        '''
        `listener` receives `TimerEvent.Completed` and `TimerEvent.Halfway`.
        '''
        return self.__subscribe(self.__event_listeners, listener)

    @staticmethod
    def __subscribe(listeners: list, listener: tp.Callable) -> tp.Callable[[], None]:
        listeners.append(listener)
        def unsubscribe() -> None:
            if listener in listeners:
                listeners.remove(listener)
        return unsubscribe

    def __apply(
        self, transform: tp.Callable[[Timer], Step],
        only_if_changed: bool = False,
    ) -> bool:
        new_timers: list[Timer] = []
        all_events: list[TimerEvent.Base] = []
        changed = False
        for timer in self.__timers:
            updated, events = transform(timer)
            for event in events:
                if isinstance(event, TimerEvent.Completed):
                    self.history.record(timer)
            all_events.extend(events)
            changed = changed or updated != timer
            new_timers.append(updated)
        if only_if_changed and not changed:
            return False
        self.__commit(new_timers, all_events)
        return changed

    def __commit(
        self, timers: tp.Iterable[Timer], events: list[TimerEvent.Base],
    ) -> None:
        self.__timers = tuple(timers)
        self.persistent.saveTimers(self.__timers)
        self.__notifyChanges()
        for event in events:
            logger.info('%s %s', event.title(), event.message())
            for listener in [*self.__event_listeners]:
                try:
                    listener(event)
                except Exception:
                    logger.exception('Event listener failed')

    def __notifyChanges(self) -> None:
        for listener in [*self.__change_listeners]:
            try:
                listener(self.__timers)
            except Exception:
                logger.exception('Change listener failed')

from __future__ import annotations

import typing as tp
from dataclasses import dataclass
from abc import ABC, abstractmethod

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

Seconds = int
EpochMs = int

class Timer(BaseModel):
    id: str
    name: str = Field(min_length=1)
    duration: Seconds = Field(gt=0)
    category: str = Field(min_length=1)
    is_active: bool = False
    is_paused: bool = False
    remaining_time: Seconds
    last_started_at: EpochMs | None = None
    halfway_alert: bool = False

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    @model_validator(mode='after')
    def check_remaining_time(self) -> Timer:
        if not 0 <= self.remaining_time <= self.duration:
            raise ValueError(
                f'remainingTime {self.remaining_time} outside [0, {self.duration}]'
            )
        return self

    @property
    def isRunning(self) -> bool:
        return self.is_active and not self.is_paused

    @property
    def isCompleted(self) -> bool:
        return self.remaining_time == 0

    @property
    def progress(self) -> float:
        '''
        Fraction of `duration` already elapsed, in [0, 1].
        '''
        return 1 - self.remaining_time / self.duration

class TimerDraft(BaseModel):
    '''
    What the user types in to create a timer.
    Name and category are stripped before the emptiness check.
    '''
    name: str = Field(min_length=1)
    duration: Seconds = Field(gt=0)
    category: str = Field(min_length=1)
    halfway_alert: bool = False

    model_config = ConfigDict(
        frozen=True,
        str_strip_whitespace=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra='forbid',
    )

    @classmethod
    def fromHms(
        cls, name: str, hours: str, minutes: str, seconds: str,
        category: str, halfway_alert: bool = False,
    ) -> TimerDraft:
        '''
        Blank fields count as zero. Raises `ValueError` on non-numeric
        input and pydantic's `ValidationError` on an invalid draft.
        '''
        duration = (
            int(hours   or '0') * 3600 +
            int(minutes or '0') * 60 +
            int(seconds or '0')
        )
        return cls(
            name=name,
            duration=duration,
            category=category,
            halfway_alert=halfway_alert,
        )

    def toTimer(self, id_: str) -> Timer:
        return Timer(
            id=id_,
            name=self.name,
            duration=self.duration,
            category=self.category,
            remaining_time=self.duration,
            halfway_alert=self.halfway_alert,
        )

class TimerHistory(BaseModel):
    id: str
    timer_id: str
    timer_name: str
    category: str
    duration: Seconds
    completed_at: EpochMs

    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

class TimerEvent:
    class Base(ABC):
        timer_id: str
        timer_name: str

        @abstractmethod
        def title(self) -> str:
            raise NotImplementedError()

        @abstractmethod
        def message(self) -> str:
            raise NotImplementedError()

    @dataclass(frozen=True)
    class Completed(Base):
        timer_id: str
        timer_name: str

        def title(self) -> str:
            return 'Timer Completed!'

        def message(self) -> str:
            return f'"{self.timer_name}" has finished.'

    @dataclass(frozen=True)
    class Halfway(Base):
        timer_id: str
        timer_name: str

        def title(self) -> str:
            return 'Halfway Point!'

        def message(self) -> str:
            return f'"{self.timer_name}" is halfway done.'

def newId(now_ms: EpochMs, taken: tp.Iterable[str]) -> str:
    '''
    Timestamp ids, bumped forward until unique.
    '''
    taken = set(taken)
    candidate = now_ms
    while str(candidate) in taken:
        candidate += 1
    return str(candidate)

def formatTime(seconds: Seconds) -> str:
    minutes, seconds = divmod(seconds, 60)
    return f'{minutes:02d}:{seconds:02d}'

def groupByCategory(timers: tp.Iterable[Timer]) -> dict[str, list[Timer]]:
    groups: dict[str, list[Timer]] = {}
    for timer in timers:
        groups.setdefault(timer.category, []).append(timer)
    return groups

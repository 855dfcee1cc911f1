import time
from abc import ABC, abstractmethod

from .shared import EpochMs

class Clock(ABC):
    @abstractmethod
    def nowMs(self) -> EpochMs:
        '''
        Wall-clock time in epoch milliseconds.
        '''
        raise NotImplementedError

class SystemClock(Clock):
    def nowMs(self) -> EpochMs:
        return int(time.time() * 1000)

class ManualClock(Clock):
    '''
    Only moves when told to. For tests and simulations.
    '''
    def __init__(self, start_ms: EpochMs = 1_700_000_000_000) -> None:
        self.now_ms = start_ms

    def nowMs(self) -> EpochMs:
        return self.now_ms

    def advance(self, seconds: float) -> None:
        self.now_ms += round(seconds * 1000)

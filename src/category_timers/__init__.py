from .UI import UI as CategoryTimersUI
from .shared import Timer, TimerDraft, TimerHistory, TimerEvent
from .clock import Clock, SystemClock, ManualClock
from .persistent import Persistent
from .history_log import HistoryLog
from .timer_store import TimerStore
from .tick_driver import TickDriver

__all__ = [
    "CategoryTimersUI", "Timer", "TimerDraft", "TimerHistory", "TimerEvent",
    "Clock", "SystemClock", "ManualClock", "Persistent", "HistoryLog",
    "TimerStore", "TickDriver",
]

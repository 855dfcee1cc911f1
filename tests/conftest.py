import pytest

from category_timers import ManualClock, Persistent, HistoryLog, TimerStore

@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()

@pytest.fixture
def store_path(tmp_path):
    return tmp_path / 'storage.json'

@pytest.fixture
def persistent(store_path) -> Persistent:
    return Persistent(store_path)

@pytest.fixture
def history(persistent, clock) -> HistoryLog:
    h = HistoryLog(persistent, clock)
    h.load()
    return h

@pytest.fixture
def store(persistent, history, clock) -> TimerStore:
    s = TimerStore(persistent, history, clock)
    s.load()
    return s

@pytest.fixture
def events(store) -> list:
    received = []
    store.subscribeEvents(received.append)
    return received

from category_timers import HistoryLog
from category_timers.shared import Timer

def makeTimer(id_='1', name='Read', category='Study', duration=60) -> Timer:
    return Timer(
        id=id_, name=name, duration=duration, category=category,
        remaining_time=0,
    )

def test_record_snapshots_timer(history, clock):
    entry = history.record(makeTimer())
    assert entry.timer_id == '1'
    assert entry.timer_name == 'Read'
    assert entry.category == 'Study'
    assert entry.duration == 60
    assert entry.completed_at == clock.nowMs()
    assert history.list() == (entry, )

def test_record_persists(history, persistent, clock):
    history.record(makeTimer())
    reloaded = HistoryLog(persistent, clock)
    reloaded.load()
    assert reloaded.list() == history.list()

def test_ids_unique_within_same_millisecond(history):
    a = history.record(makeTimer('1'))
    b = history.record(makeTimer('2'))
    assert a.id != b.id

def test_sorted_for_display_newest_first(history, clock):
    first = history.record(makeTimer('1'))
    clock.advance(5)
    second = history.record(makeTimer('2'))
    assert history.list() == (first, second)
    assert history.sortedForDisplay() == [second, first]

def test_clear_empties_and_persists(history, persistent):
    history.record(makeTimer())
    history.clear()
    assert history.list() == ()
    assert persistent.loadHistory() == []

def test_subscribe_and_unsubscribe(history):
    seen = []
    unsubscribe = history.subscribe(seen.append)
    history.record(makeTimer())
    unsubscribe()
    unsubscribe()
    history.clear()
    assert len(seen) == 1
    assert len(seen[0]) == 1

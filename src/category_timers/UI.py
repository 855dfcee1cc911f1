import os
import datetime
import typing as tp

from pydantic import ValidationError
from textual import on
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal, Vertical
from textual.widgets import (
    Button, DataTable, Footer, Header, Input, Label, Switch,
    TabbedContent, TabPane,
)
from textual.widgets.data_table import CellDoesNotExist, RowDoesNotExist

from .shared import Timer, TimerDraft, TimerEvent, formatTime
from .clock import Clock
from .persistent import Persistent
from .history_log import HistoryLog
from .timer_store import TimerStore
from .tick_driver import TickDriver
from .progress_ascii import ProgressAscii, renderBar
from . import config

def statusOf(timer: Timer) -> str:
    if timer.isRunning:
        return 'Running'
    if timer.is_paused:
        return 'Paused'
    if timer.isCompleted:
        return 'Done'
    return 'Idle'

def describeErrors(e: ValidationError) -> str:
    return '\n'.join(
        f"{'.'.join(str(x) for x in err['loc'])}: {err['msg']}"
        for err in e.errors()
    )

class UI(App):
    CSS_PATH = "styles.tcss"
    BINDINGS = [
        Binding("s", "toggle_timer", "Start/Stop"),
        Binding("p", "pause_timer", "Pause"),
        Binding("r", "reset_timer", "Reset"),
        Binding("d", "delete_timer", "Delete"),
        Binding("a", "start_all", "Start cat."),
        Binding("z", "pause_all", "Pause cat."),
        Binding("x", "reset_all", "Reset cat."),
        Binding("c", "clear_history", "Clear history"),
    ]

    def __init__(
        self,
        store_path: str | os.PathLike = config.STORE_PATH,
        clock: Clock | None = None,
        tick_interval: float = config.TICK_INTERVAL_SECONDS,
    ) -> None:
        super().__init__()

        self.persistent = Persistent(store_path)
        self.history_log = HistoryLog(self.persistent, clock)
        self.timer_store = TimerStore(self.persistent, self.history_log, clock)
        self.tick_driver = TickDriver(self.timer_store, tick_interval)
        self.unsubscribers: list[tp.Callable[[], None]] = []

        self.history_log.load()
        self.timer_store.load()

        self.title = config.APP_NAME

    def compose(self) -> ComposeResult:
        yield Header(show_clock=False)

        with TabbedContent(id="tabs", initial="tab-timers"):
            with TabPane("Timers", id="tab-timers"):
                yield DataTable(id="timers-table", cursor_type="row", zebra_stripes=True)
                yield ProgressAscii(id="selected-progress")
            with TabPane("Add", id="tab-add"):
                with Vertical(id="add-form"):
                    yield Input(placeholder="Timer name", id="name-input")
                    with Horizontal(id="duration-inputs"):
                        yield Input(placeholder="Hours",   id="hours-input",   restrict=r"\d*", max_length=2)
                        yield Input(placeholder="Minutes", id="minutes-input", restrict=r"\d*", max_length=2)
                        yield Input(placeholder="Seconds", id="seconds-input", restrict=r"\d*", max_length=2)
                    yield Input(placeholder="Category (e.g. Workout, Study)", id="category-input")
                    with Horizontal(id="halfway-row"):
                        yield Switch(id="halfway-switch")
                        yield Label("Alert at the halfway point", classes="padding-h-1")
                    yield Button("Create Timer", id="create-btn")
            with TabPane("History", id="tab-history"):
                yield DataTable(id="history-table", cursor_type="row", zebra_stripes=True)

        yield Footer(compact=True)

    def on_mount(self) -> None:
        self.query_one('#timers-table', DataTable).add_columns(
            'Category', 'Name', 'Remaining', 'Status', 'Progress',
        )
        self.query_one('#history-table', DataTable).add_columns(
            'Name', 'Category', 'Duration', 'Completed',
        )
        self.unsubscribers = [
            self.timer_store.subscribeChanges(lambda _: self.refreshTimers()),
            self.timer_store.subscribeEvents(self.onTimerEvent),
            self.history_log.subscribe(lambda _: self.refreshHistory()),
        ]
        self.refreshTimers()
        self.refreshHistory()
        self.tick_driver.start()
        self.query_one('#timers-table', DataTable).focus()

    def selectedTimerId(self) -> str | None:
        table: DataTable = self.query_one('#timers-table', DataTable)
        if table.row_count == 0:
            return None
        try:
            row_key, _ = table.coordinate_to_cell_key(table.cursor_coordinate)
        except CellDoesNotExist:
            return None
        return row_key.value

    def selectedCategory(self) -> str | None:
        id_ = self.selectedTimerId()
        if id_ is None:
            return None
        timer = self.timer_store.get(id_)
        return None if timer is None else timer.category

    def refreshTimers(self) -> None:
        table: DataTable = self.query_one('#timers-table', DataTable)
        selected = self.selectedTimerId()
        table.clear()
        for category, timers in self.timer_store.byCategory().items():
            for timer in timers:
                table.add_row(
                    category,
                    timer.name,
                    f'{formatTime(timer.remaining_time)} / {formatTime(timer.duration)}',
                    statusOf(timer),
                    renderBar(timer.progress, config.PROGRESS_CELL_WIDTH),
                    key=timer.id,
                )
        if selected is not None:
            try:
                table.move_cursor(row=table.get_row_index(selected))
            except RowDoesNotExist:
                pass    # deleted
        self.updateSelectedProgress()

    def refreshHistory(self) -> None:
        table: DataTable = self.query_one('#history-table', DataTable)
        table.clear()
        for entry in self.history_log.sortedForDisplay():
            completed = datetime.datetime.fromtimestamp(entry.completed_at / 1000)
            table.add_row(
                entry.timer_name,
                entry.category,
                formatTime(entry.duration),
                completed.strftime('%Y-%m-%d %H:%M:%S'),
                key=entry.id,
            )

    @on(DataTable.RowHighlighted, '#timers-table')
    def updateSelectedProgress(self) -> None:
        bar = self.query_one('#selected-progress', ProgressAscii)
        id_ = self.selectedTimerId()
        timer = None if id_ is None else self.timer_store.get(id_)
        if timer is None:
            bar.caption = ''
            bar.fraction = 0.0
            return
        bar.caption = f'{timer.name} {formatTime(timer.remaining_time)}'
        bar.fraction = timer.progress

    def onTimerEvent(self, event: TimerEvent.Base) -> None:
        self.notify(
            event.message(), title=event.title(),
            severity='warning' if isinstance(event, TimerEvent.Completed) else 'information',
        )

    def action_toggle_timer(self) -> None:
        id_ = self.selectedTimerId()
        if id_ is None:
            return
        if self.timer_store.isRunning(id_):
            self.timer_store.stop(id_)
        else:
            self.timer_store.start(id_)

    def action_pause_timer(self) -> None:
        id_ = self.selectedTimerId()
        if id_ is not None:
            self.timer_store.pause(id_)

    def action_reset_timer(self) -> None:
        id_ = self.selectedTimerId()
        if id_ is not None:
            self.timer_store.reset(id_)

    def action_delete_timer(self) -> None:
        id_ = self.selectedTimerId()
        if id_ is not None:
            self.timer_store.delete(id_)

    def action_start_all(self) -> None:
        category = self.selectedCategory()
        if category is not None:
            self.timer_store.startAll(category)

    def action_pause_all(self) -> None:
        category = self.selectedCategory()
        if category is not None:
            self.timer_store.pauseAll(category)

    def action_reset_all(self) -> None:
        category = self.selectedCategory()
        if category is not None:
            self.timer_store.resetAll(category)

    def action_clear_history(self) -> None:
        self.history_log.clear()

    @on(Button.Pressed, '#create-btn')
    def createFromForm(self) -> Timer | None:
        inputs = {
            field: self.query_one(f'#{field}-input', Input)
            for field in ('name', 'hours', 'minutes', 'seconds', 'category')
        }
        try:
            draft = TimerDraft.fromHms(
                **{field: i.value for field, i in inputs.items()},
                halfway_alert=self.query_one('#halfway-switch', Switch).value,
            )
        except ValidationError as e:
            self.notify(describeErrors(e), title='Invalid timer', severity='error')
            return None
        except ValueError:
            self.notify(
                'Duration fields take whole numbers.',
                title='Invalid timer', severity='error',
            )
            return None
        timer = self.timer_store.add(draft)
        for i in inputs.values():
            i.value = ''
        self.query_one('#halfway-switch', Switch).value = False
        self.notify(
            f'"{timer.name}" timer has been created successfully.',
            title='Timer Created',
        )
        self.query_one('#tabs', TabbedContent).active = 'tab-timers'
        self.query_one('#timers-table', DataTable).focus()
        return timer

    def tearDown(self) -> None:
        self.tick_driver.cancel()
        for unsubscribe in self.unsubscribers:
            unsubscribe()
        self.unsubscribers = []

    def on_unmount(self) -> None:
        self.tearDown()

    def exit(self, result=None, return_code: int = 0, message=None) -> None:
        self.tearDown()
        return super().exit(result, return_code, message)

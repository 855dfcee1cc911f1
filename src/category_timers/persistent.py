from __future__ import annotations

import os
import json
import logging
import typing as tp

from pydantic import TypeAdapter

from .shared import Timer, TimerHistory
from . import config

logger = logging.getLogger(__name__)

TIMERS = TypeAdapter(list[Timer])
HISTORY = TypeAdapter(list[TimerHistory])

class Persistent:
    '''
    A string-keyed store backed by one JSON object file.
    Every slot holds a serialized snapshot of a whole collection and
    is overwritten in full on each save.
    '''
    def __init__(
        self, /, path: str | os.PathLike = config.STORE_PATH,
        timers_key: str = config.TIMERS_STORAGE_KEY,
        history_key: str = config.HISTORY_STORAGE_KEY,
    ) -> None:
        self.path = os.fspath(path)
        self.timers_key = timers_key
        self.history_key = history_key

    def __readAll(self) -> dict[str, str]:
        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                raw = json.load(f)
        except FileNotFoundError:
            return {}
        if not isinstance(raw, dict):
            raise ValueError(f'{self.path} does not hold a JSON object')
        return raw

    def __writeAll(self, raw: dict[str, str]) -> None:
        directory = os.path.dirname(self.path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        tmp_path = self.path + '.tmp'
        with open(tmp_path, 'w', encoding='utf-8') as f:
            json.dump(raw, f, indent=2)
        os.replace(tmp_path, self.path)

    def getItem(self, key: str) -> str | None:
        value = self.__readAll().get(key)
        if value is not None and not isinstance(value, str):
            raise ValueError(f'Slot {key!r} does not hold a string')
        return value

    def setItem(self, key: str, value: str) -> None:
        try:
            raw = self.__readAll()
        except ValueError:
            logger.warning('Discarding malformed store at %s', self.path)
            raw = {}
        raw[key] = value
        self.__writeAll(raw)

    def __load(self, key: str, adapter: TypeAdapter) -> list:
        try:
            value = self.getItem(key)
            if value is None:
                return []
            return adapter.validate_json(value)
        except (OSError, ValueError):
            logger.exception('Error reading slot %r from %s', key, self.path)
            return []

    def __save(self, key: str, adapter: TypeAdapter, items: tp.Sequence) -> None:
        try:
            self.setItem(key, adapter.dump_json(
                list(items), by_alias=True, exclude_none=True,
            ).decode('utf-8'))
        except (OSError, ValueError):
            logger.exception('Error writing slot %r to %s', key, self.path)

    def loadTimers(self) -> list[Timer]:
        return self.__load(self.timers_key, TIMERS)

    def saveTimers(self, timers: tp.Sequence[Timer]) -> None:
        self.__save(self.timers_key, TIMERS, timers)

    def loadHistory(self) -> list[TimerHistory]:
        return self.__load(self.history_key, HISTORY)

    def saveHistory(self, history: tp.Sequence[TimerHistory]) -> None:
        self.__save(self.history_key, HISTORY, history)

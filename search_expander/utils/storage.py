from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol
import json
import logging
import os

logger = logging.getLogger(__name__)

SYNC_AREA = "sync"

_MISSING = object()


@dataclass(frozen=True)
class StorageChange:
    old_value: Any = None
    new_value: Any = None


ChangeListener = Callable[[Dict[str, StorageChange], str], None]


class SettingsStore(Protocol):
    """Persisted key/value settings with change notification."""

    def get(self, keys: Iterable[str]) -> Dict[str, Any]:
        """Values for the keys that are set; absent keys are omitted."""
        ...

    def set(self, values: Dict[str, Any]) -> None:
        ...

    def add_listener(self, listener: ChangeListener) -> None:
        ...

    def remove_listener(self, listener: ChangeListener) -> None:
        ...


class MemoryStore:
    """In-process store; nothing survives the process."""

    area = SYNC_AREA

    def __init__(self, initial: Optional[Dict[str, Any]] = None) -> None:
        self._data: Dict[str, Any] = dict(initial or {})
        self._listeners: List[ChangeListener] = []

    def get(self, keys: Iterable[str]) -> Dict[str, Any]:
        return {k: self._data[k] for k in keys if k in self._data}

    def set(self, values: Dict[str, Any]) -> None:
        changes: Dict[str, StorageChange] = {}
        for key, value in values.items():
            old = self._data.get(key, _MISSING)
            if old is not _MISSING and old == value:
                continue
            self._data[key] = value
            changes[key] = StorageChange(None if old is _MISSING else old, value)
        if changes:
            self._persist()
            self._emit(changes)

    def add_listener(self, listener: ChangeListener) -> None:
        if listener not in self._listeners:
            self._listeners.append(listener)

    def remove_listener(self, listener: ChangeListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def _persist(self) -> None:
        pass

    def _emit(self, changes: Dict[str, StorageChange]) -> None:
        for listener in list(self._listeners):
            listener(changes, self.area)


class JsonFileStore(MemoryStore):
    """
    Store persisted as a JSON object on disk.
    A missing file reads as empty; a corrupt one is logged and treated as empty.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self.path = Path(path)
        super().__init__(self._read())

    def _read(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as exc:
            logger.warning("Ignoring unreadable settings file %s: %s", self.path, exc)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring settings file %s: expected a JSON object", self.path)
            return {}
        return data

    def _persist(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(self._data, f, indent=2, ensure_ascii=False)

"""
Origin-scoped preference storage with cross-tab change notifications.

An OriginStorage holds the key/value items shared by every tab of the
same origin. Each tab works through its own TabStorage view:
- get/set read and write the shared items
- subscribe registers a listener for changes made by *other* tabs
  (a tab never hears about its own writes)

JsonFileStorage persists the items as a JSON file across restarts.
"""

import json
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

from snowfall.logger import logger


@dataclass(frozen=True)
class StorageEvent:
    """Change notification delivered to other tabs."""
    key: str
    old_value: Optional[str]
    new_value: Optional[str]


StorageListener = Callable[[StorageEvent], None]


class TabStorage:
    """One tab's view of the origin storage."""

    def __init__(self, origin: "OriginStorage"):
        self._origin = origin
        self._listeners: list[StorageListener] = []

    def get(self, key: str) -> Optional[str]:
        return self._origin.get_item(key)

    def set(self, key: str, value: str) -> None:
        self._origin.write(key, value, source=self)

    def subscribe(self, listener: StorageListener) -> Callable[[], None]:
        """
        Register a change listener.

        Returns:
            Function that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, event: StorageEvent) -> None:
        for listener in list(self._listeners):
            listener(event)


class OriginStorage:
    """
    In-memory key/value items shared by all tabs.

    Writes are atomic per key. Listeners run after the write completes,
    outside the lock.
    """

    def __init__(self):
        self._items: dict[str, str] = {}
        self._tabs: list[TabStorage] = []
        self._write_hooks: list[Callable[[str, str], None]] = []
        self._lock = threading.Lock()

    def open_tab(self) -> TabStorage:
        tab = TabStorage(self)
        with self._lock:
            self._tabs.append(tab)
        return tab

    def close_tab(self, tab: TabStorage) -> None:
        with self._lock:
            if tab in self._tabs:
                self._tabs.remove(tab)

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._items.get(key)

    def on_local_write(self, hook: Callable[[str, str], None]) -> None:
        """Register a hook called for every write made by a local tab."""
        self._write_hooks.append(hook)

    def write(self, key: str, value: str, source: Optional[TabStorage] = None) -> None:
        """
        Store a value and notify every tab except the writer.

        Args:
            key: Storage key
            value: New value
            source: Writing tab, or None for changes coming from outside
                    this process (all local tabs are notified)
        """
        value = str(value)
        with self._lock:
            old_value = self._items.get(key)
            if old_value != value:
                items = dict(self._items)
                items[key] = value
                self._persist(items)
                self._items = items
            tabs = [tab for tab in self._tabs if tab is not source]

        if source is not None:
            for hook in list(self._write_hooks):
                hook(key, value)

        if old_value == value:
            logger.debug(f"Storage value unchanged: {key}={value}")
            return

        event = StorageEvent(key=key, old_value=old_value, new_value=value)
        for tab in tabs:
            tab._notify(event)

    def apply_external(self, key: str, value: str) -> None:
        """Apply a change made elsewhere (e.g. another instance)."""
        logger.debug(f"External storage change: {key}={value}")
        self.write(key, value, source=None)

    def _persist(self, items: dict[str, str]) -> None:
        """
        Called with the lock held before a change is committed.

        Raising leaves the stored items untouched and notifies nobody.
        """


class JsonFileStorage(OriginStorage):
    """Origin storage persisted to a JSON file."""

    def __init__(self, path: str):
        super().__init__()
        self.path = Path(path)
        self._items = self._load()

    def _load(self) -> dict[str, str]:
        if not self.path.exists():
            logger.info(f"Preference file not found, starting empty: {self.path}")
            return {}

        try:
            with open(self.path, "r") as f:
                data = json.load(f)

            if not isinstance(data, dict):
                logger.warning(f"Ignoring preference file with unexpected content: {self.path}")
                return {}

            items = {str(key): str(value) for key, value in data.items()}
            logger.info(f"Loaded {len(items)} stored preferences from {self.path}")
            return items

        except json.JSONDecodeError as e:
            logger.error(f"Invalid JSON in preference file: {e}")
            return {}

    def _persist(self, items: dict[str, str]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.path, "w") as f:
                json.dump(items, f, indent=2)
            logger.debug(f"Saved {len(items)} preferences to {self.path}")

        except OSError as e:
            logger.error(f"Failed to save preferences: {e}", exc_info=True)
            raise

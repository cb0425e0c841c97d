from __future__ import annotations

import logging
from typing import Dict, Optional

from ..adapters.base import SiteAdapter
from ..config import DEFAULT_MAX_PAGES, ExpansionConfig
from ..document import DocumentView
from ..ui.notifier import Notifier
from ..utils.storage import SYNC_AREA, SettingsStore, StorageChange

logger = logging.getLogger(__name__)

ENABLED_KEY = "enabled"
MAX_PAGES_KEY = "maxPages"


class SettingsBridge:
    """
    Mirrors the persisted ``enabled``/``maxPages`` settings into the live config.
    Toggling never resets engine state; re-enabling resumes where it stopped.
    """

    def __init__(self, store: SettingsStore, config: ExpansionConfig) -> None:
        self.store = store
        self.config = config
        self._adapter: Optional[SiteAdapter] = None
        self._view: Optional[DocumentView] = None
        self._notifier: Optional[Notifier] = None

    def load(self) -> ExpansionConfig:
        stored = self.store.get([ENABLED_KEY, MAX_PAGES_KEY])
        # Absent keys keep the config value (the defaults unless the host overrode them).
        if ENABLED_KEY in stored:
            # Only an explicit False disables.
            self.config.enabled = stored[ENABLED_KEY] is not False
        if MAX_PAGES_KEY in stored:
            # A falsy cap falls back to the default.
            self.config.max_pages = max(1, int(stored[MAX_PAGES_KEY] or DEFAULT_MAX_PAGES))
        return self.config

    def subscribe(self, adapter: SiteAdapter, view: DocumentView, notifier: Notifier) -> None:
        self._adapter = adapter
        self._view = view
        self._notifier = notifier
        self.store.add_listener(self.on_changed)

    def unsubscribe(self) -> None:
        self.store.remove_listener(self.on_changed)

    def on_changed(self, changes: Dict[str, StorageChange], area: str) -> None:
        if area != SYNC_AREA:
            return

        if ENABLED_KEY in changes:
            self.config.enabled = bool(changes[ENABLED_KEY].new_value)
            if self._adapter is not None:
                if self.config.enabled:
                    self._on_enabled()
                else:
                    self._on_disabled()

        if MAX_PAGES_KEY in changes:
            self.config.max_pages = max(1, int(changes[MAX_PAGES_KEY].new_value or DEFAULT_MAX_PAGES))
            if self._notifier is not None:
                self._notifier.notify(f"Max pages set to {self.config.max_pages}")

    def _on_enabled(self) -> None:
        self._adapter.hide_native_pagination(self._view.soup)
        self._notifier.refresh_stats()
        self._notifier.notify("Auto expand enabled")

    def _on_disabled(self) -> None:
        self._adapter.show_native_pagination(self._view.soup)
        self._notifier.hide_stats()
        self._notifier.notify("Auto expand disabled")

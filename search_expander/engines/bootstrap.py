from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from .base import EngineState
from .cache import COMPACTION_INTERVAL_SECONDS
from .expansion import ExpansionController
from .scroll import ScrollTrigger
from .settings_bridge import SettingsBridge
from ..adapters.base import SiteAdapter
from ..adapters.registry import AdapterRegistry
from ..config import ExpansionConfig
from ..document import DocumentView
from ..ui.notifier import Notifier
from ..utils.http import Fetcher
from ..utils.storage import MemoryStore, SettingsStore
from ..utils.timers import Scheduler, TimerHandle

logger = logging.getLogger(__name__)


@dataclass
class ExpansionSession:
    """Everything wired up for one view; ``close`` is the view unloading."""

    view: DocumentView
    adapter: SiteAdapter
    config: ExpansionConfig
    state: EngineState
    controller: ExpansionController
    notifier: Notifier
    trigger: ScrollTrigger
    bridge: SettingsBridge
    timers: List[TimerHandle] = field(default_factory=list)

    def close(self) -> None:
        self.trigger.detach()
        self.bridge.unsubscribe()
        self.notifier.dismiss()
        for handle in self.timers:
            handle.cancel()
        self.timers.clear()


def compact_loaded_urls(state: EngineState) -> None:
    evicted = state.loaded_urls.compact()
    if evicted:
        logger.debug("Evicted %s merged page URLs", evicted)


def bootstrap(
    view: DocumentView,
    fetcher: Fetcher,
    scheduler: Scheduler,
    *,
    config: Optional[ExpansionConfig] = None,
    store: Optional[SettingsStore] = None,
    registry: Optional[AdapterRegistry] = None,
) -> Optional[ExpansionSession]:
    """
    Start expansion on a freshly loaded view.
    Returns None (and leaves the page alone) when no adapter handles it.
    """
    registry = registry or AdapterRegistry()
    adapter = registry.select(view.url)
    if adapter is None:
        logger.info("No adapter for %s; auto expand inactive", view.url)
        return None

    config = config or ExpansionConfig()
    bridge = SettingsBridge(store if store is not None else MemoryStore(), config)
    bridge.load()
    logger.info("Auto expand ready: %s, %s", adapter.name, "enabled" if config.enabled else "disabled")

    state = EngineState()
    notifier = Notifier(view, config, state, scheduler)
    controller = ExpansionController(view, adapter, fetcher, config, notifier, state)
    controller.seed()

    trigger = ScrollTrigger(view, controller, config, scheduler)
    trigger.attach()

    session = ExpansionSession(
        view=view,
        adapter=adapter,
        config=config,
        state=state,
        controller=controller,
        notifier=notifier,
        trigger=trigger,
        bridge=bridge,
    )

    if config.enabled:
        adapter.hide_native_pagination(view.soup)
        notifier.refresh_stats()
        session.timers.append(scheduler.call_later(config.loading_delay, controller.load_next_page))

    bridge.subscribe(adapter, view, notifier)
    session.timers.append(
        scheduler.call_every(COMPACTION_INTERVAL_SECONDS, lambda: compact_loaded_urls(state))
    )
    return session

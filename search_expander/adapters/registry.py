from __future__ import annotations

import logging
from typing import Iterable, List, Optional
from importlib import metadata

from .base import SiteAdapter
from .baidu import BaiduAdapter
from .bing import BingAdapter
from .google import GoogleAdapter
from ..utils.loader import load_symbol

logger = logging.getLogger(__name__)


class AdapterRegistry:
    """
    Ordered set of provider adapters; the first one that matches a page wins.
    Built-ins come first, then config-defined dotted classes and entry-point plugins.
    """
    def __init__(self, adapters: Optional[Iterable[SiteAdapter]] = None) -> None:
        if adapters is None:
            adapters = [GoogleAdapter(), BaiduAdapter(), BingAdapter()]
        self._adapters: List[SiteAdapter] = list(adapters)

    # ---- Introspection / Management ----

    def register(self, adapter: SiteAdapter) -> None:
        self._adapters.append(adapter)

    @property
    def adapters(self) -> List[SiteAdapter]:
        return list(self._adapters)

    def select(self, url: str) -> Optional[SiteAdapter]:
        for adapter in self._adapters:
            if adapter.matches(url):
                return adapter
        return None

    # ---- Discovery ----

    def register_dotted(self, paths: Iterable[str]) -> int:
        """
        Instantiate and register adapter classes given as dotted paths.
        Paths that fail to load are logged and skipped.
        """
        added = 0
        for dotted in paths:
            try:
                adapter_cls = load_symbol(dotted)
                self.register(adapter_cls())
            except (ImportError, AttributeError, ValueError, TypeError) as exc:
                logger.warning("Failed to load adapter %s: %r", dotted, exc)
                continue
            added += 1
        return added

    def discover_entry_points(self, group: str = "search_expander.adapters") -> int:
        """
        Discover third-party adapters installed as entry points.
        Returns count of newly registered adapters.
        """
        added = 0
        for ep in metadata.entry_points().select(group=group):
            try:
                adapter_cls = ep.load()
                self.register(adapter_cls())
            except Exception as exc:
                # Plugins are optional; a broken one must not stop the built-ins.
                logger.warning("Failed to load adapter plugin %s: %r", ep.name, exc)
                continue
            added += 1
        return added

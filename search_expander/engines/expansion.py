from __future__ import annotations

import logging
from typing import Optional

from bs4 import Tag

from .base import EngineState, ExpansionReport
from ..adapters.base import SiteAdapter
from ..config import ExpansionConfig
from ..document import DocumentView, parse_fragment
from ..ui.notifier import Notifier
from ..utils.http import Fetcher, FetchError

logger = logging.getLogger(__name__)

LOADING_ID = "auto-expand-loading"

MSG_NO_MORE_RESULTS = "No more results"
MSG_LOAD_FAILED = "Failed to load, please try again later"


class ExpansionController:
    """
    Loads the next result page and splices it into the view.

    - Single-flight: ``state.is_loading`` is checked and set before the first
      await, so a second caller no-ops while a fetch is outstanding.
    - Exhaustion (a fetched page with no results) is terminal for the view.
    - Fetch failures leave the state as it was; the next trigger retries.
    """

    def __init__(
        self,
        view: DocumentView,
        adapter: SiteAdapter,
        fetcher: Fetcher,
        config: ExpansionConfig,
        notifier: Notifier,
        state: Optional[EngineState] = None,
    ) -> None:
        self.view = view
        self.adapter = adapter
        self.fetcher = fetcher
        self.config = config
        self.notifier = notifier
        self.state = state if state is not None else notifier.state

    def seed(self) -> None:
        """Count the results the page already shows."""
        self.state.total_results = self.adapter.count_initial_results(self.view.soup)
        self.state.initialized = True

    def can_load(self) -> bool:
        state = self.state
        return (
            self.config.enabled
            and not state.is_loading
            and state.has_more_pages
            and state.current_page < self.config.max_pages
        )

    async def load_next_page(self) -> bool:
        """Fetch and merge the next page. Returns True if a page was merged."""
        if not self.can_load():
            return False

        state = self.state
        state.is_loading = True
        try:
            return await self._load(state.current_page + 1)
        finally:
            state.is_loading = False

    async def _load(self, page_number: int) -> bool:
        state = self.state
        next_url = self.adapter.next_page_url(self.view.url, page_number)
        if next_url in state.loaded_urls:
            logger.debug("Page %s already merged: %s", page_number, next_url)
            return False

        container = self.adapter.results_container(self.view.soup)
        if container is None:
            logger.debug("No results container on %s for %s", self.view.url, self.adapter.name)
            return False

        indicator = self._loading_indicator(page_number)
        container.append(indicator)
        try:
            html = await self.fetcher.fetch(next_url)
            results = self.adapter.extract_results(html)
        except FetchError as exc:
            logger.warning("Failed to load page %s (%s): %s", page_number, exc.url, exc)
            self.notifier.notify(MSG_LOAD_FAILED)
            return False
        finally:
            indicator.decompose()

        if not results:
            state.has_more_pages = False
            logger.info("Page %s has no results; stopping", page_number)
            self.notifier.notify(MSG_NO_MORE_RESULTS)
            return False

        container.append(self.adapter.create_separator(page_number))
        for fragment in results:
            container.append(fragment)

        state.current_page = page_number
        state.loaded_urls.add(next_url)
        state.total_results += len(results)
        logger.debug("Merged page %s: %s results (%s total)", page_number, len(results), state.total_results)

        self.notifier.refresh_stats()
        # Merged markup may carry its own pager.
        if self.config.enabled:
            self.adapter.hide_native_pagination(self.view.soup)
        return True

    def _loading_indicator(self, page_number: int) -> Tag:
        return parse_fragment(
            f'<div id="{LOADING_ID}">'
            '<div class="loading-spinner"></div>'
            f"<span>Loading page {page_number}...</span>"
            "</div>"
        )

    def report(self) -> ExpansionReport:
        state = self.state
        return ExpansionReport(
            url=self.view.url,
            adapter=self.adapter.name,
            pages_loaded=state.current_page,
            total_results=state.total_results,
            exhausted=not state.has_more_pages,
            loaded_urls=state.loaded_urls.urls(),
        )

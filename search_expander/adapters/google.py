from __future__ import annotations

from typing import List, Optional

from bs4 import BeautifulSoup, Tag

from .base import (
    SearchParams,
    build_separator,
    first_match,
    host_of,
    int_or,
    query_value,
    substantial,
    toggle_pagination,
    with_query_param,
)

RESULTS_PER_PAGE = 10


class GoogleAdapter:
    """Google web search: ``start`` is a zero-based result offset."""

    name = "google"

    container_selectors = ["#search", "#rso", "#center_col", 'div[role="main"]']
    count_selectors = ["div[data-ved] div.g", "div.g", ".g", 'div[role="listitem"]']
    result_selectors = [
        "div[data-ved] div.g",
        "div.g",
        "div[data-header-feature]",
        ".g",
        'div[role="listitem"]',
    ]
    pagination_selector = '#botstuff, #foot, #xjs, .AaVjTc, td[role="heading"]'

    def matches(self, url: str) -> bool:
        return "google" in host_of(url)

    def search_params(self, url: str) -> SearchParams:
        return SearchParams(
            query=query_value(url, "q"),
            offset=int_or(query_value(url, "start"), 0),
            query_key="q",
            offset_key="start",
        )

    def next_page_url(self, url: str, page_number: int) -> str:
        start = (page_number - 1) * RESULTS_PER_PAGE
        return with_query_param(url, "start", str(start))

    def results_container(self, soup: BeautifulSoup) -> Optional[Tag]:
        return first_match(soup, self.container_selectors)

    def count_initial_results(self, soup: BeautifulSoup) -> int:
        # Counting stops at the first selector that finds anything, even if
        # none of its nodes pass the length filter.
        for selector in self.count_selectors:
            nodes = soup.select(selector)
            if nodes:
                return len(substantial(nodes))
        return 0

    def extract_results(self, html: str) -> List[Tag]:
        doc = BeautifulSoup(html, "html.parser")
        for selector in self.result_selectors:
            results = substantial(doc.select(selector))
            if results:
                return results
        return []

    def create_separator(self, page_number: int) -> Tag:
        return build_separator(f"Page {page_number}")

    def hide_native_pagination(self, soup: BeautifulSoup) -> None:
        toggle_pagination(soup, self.pagination_selector, displayed=False)

    def show_native_pagination(self, soup: BeautifulSoup) -> None:
        toggle_pagination(soup, self.pagination_selector, displayed=True)

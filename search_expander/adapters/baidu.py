from __future__ import annotations

from typing import List, Optional

from bs4 import BeautifulSoup, Tag

from .base import SearchParams, build_separator, host_of, int_or, query_value, toggle_pagination, with_query_param

RESULTS_PER_PAGE = 10


class BaiduAdapter:
    """Baidu web search: ``pn`` is a zero-based result offset, ``wd`` (or ``word``) the query."""

    name = "baidu"

    container_selector = "#content_left"
    count_selector = "#content_left > .result, #content_left > .c-container"
    result_selector = ":scope > .result, :scope > .c-container, :scope > div[tpl]"
    pagination_selector = "#page"

    def matches(self, url: str) -> bool:
        return "baidu" in host_of(url)

    def search_params(self, url: str) -> SearchParams:
        return SearchParams(
            query=query_value(url, "wd", "word"),
            offset=int_or(query_value(url, "pn"), 0),
            query_key="wd",
            offset_key="pn",
        )

    def next_page_url(self, url: str, page_number: int) -> str:
        pn = (page_number - 1) * RESULTS_PER_PAGE
        return with_query_param(url, "pn", str(pn))

    def results_container(self, soup: BeautifulSoup) -> Optional[Tag]:
        return soup.select_one(self.container_selector)

    def count_initial_results(self, soup: BeautifulSoup) -> int:
        return len(soup.select(self.count_selector))

    def extract_results(self, html: str) -> List[Tag]:
        doc = BeautifulSoup(html, "html.parser")
        container = doc.select_one(self.container_selector)
        if container is None:
            return []
        return container.select(self.result_selector)

    def create_separator(self, page_number: int) -> Tag:
        return build_separator(f"第 {page_number} 页", "baidu-separator")

    def hide_native_pagination(self, soup: BeautifulSoup) -> None:
        toggle_pagination(soup, self.pagination_selector, displayed=False)

    def show_native_pagination(self, soup: BeautifulSoup) -> None:
        toggle_pagination(soup, self.pagination_selector, displayed=True)

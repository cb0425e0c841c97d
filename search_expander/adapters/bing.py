from __future__ import annotations

import logging
import re
from typing import List, Optional

from bs4 import BeautifulSoup, Tag

from .base import SearchParams, build_separator, first_match, host_of, int_or, query_value, toggle_pagination, with_query_param
from ..document import set_style_property

logger = logging.getLogger(__name__)

RESULTS_PER_PAGE = 10

_BACKGROUND_URL = re.compile(r"background-image:\s*url\(['\"]?([^'\")\s]+)['\"]?\)", re.IGNORECASE)


class BingAdapter:
    """
    Bing web search: ``first`` is a one-based result offset.
    Fetched results lazy-load their thumbnails and favicons, so each
    extracted fragment has its asset URLs made immediate and absolute.
    """

    name = "bing"

    container_selectors = ["#b_results", "#b_content"]
    count_selector = "#b_results > li.b_algo"
    result_selector = ":scope > li.b_algo"
    pagination_selector = ".b_pag"

    def matches(self, url: str) -> bool:
        return "bing.com" in host_of(url)

    def search_params(self, url: str) -> SearchParams:
        return SearchParams(
            query=query_value(url, "q"),
            offset=int_or(query_value(url, "first"), 1),
            query_key="q",
            offset_key="first",
        )

    def next_page_url(self, url: str, page_number: int) -> str:
        first = (page_number - 1) * RESULTS_PER_PAGE + 1
        return with_query_param(url, "first", str(first))

    def results_container(self, soup: BeautifulSoup) -> Optional[Tag]:
        return first_match(soup, self.container_selectors)

    def count_initial_results(self, soup: BeautifulSoup) -> int:
        return len(soup.select(self.count_selector))

    def extract_results(self, html: str) -> List[Tag]:
        doc = BeautifulSoup(html, "html.parser")
        container = doc.select_one("#b_results")
        if container is None:
            return []

        results: List[Tag] = []
        for item in container.select(self.result_selector):
            try:
                normalize_assets(doc, item)
            except Exception as exc:
                # A half-normalized result still beats a dropped one.
                logger.debug("Asset normalization failed for a bing result: %r", exc)
            results.append(item)
        return results

    def create_separator(self, page_number: int) -> Tag:
        return build_separator(f"Page {page_number}", "bing-separator")

    def hide_native_pagination(self, soup: BeautifulSoup) -> None:
        toggle_pagination(soup, self.pagination_selector, displayed=False)

    def show_native_pagination(self, soup: BeautifulSoup) -> None:
        toggle_pagination(soup, self.pagination_selector, displayed=True)


# ---- Asset normalization ----------------------------------------------------


def _secure(url: str) -> str:
    return "https:" + url if url.startswith("//") else url


def _is_placeholder(src: Optional[str]) -> bool:
    return not src or src.startswith("data:")


def normalize_assets(doc: BeautifulSoup, item: Tag) -> None:
    """Resolve lazily-loaded images and icon backgrounds inside one result."""
    for img in item.select("img"):
        _resolve_lazy_image(img)

    for holder in item.select(".cico, .rms_iac"):
        match = _BACKGROUND_URL.search(holder.get("style", ""))
        if not match:
            continue
        icon_url = _secure(match.group(1))
        existing = holder.find("img")
        if existing is not None:
            if _is_placeholder(existing.get("src")):
                existing["src"] = icon_url
        else:
            img = doc.new_tag("img", src=icon_url, style="width: 16px; height: 16px")
            img["class"] = ["rms_img"]
            holder.clear()
            holder.append(img)

    for node in item.select('[style*="background-image"]'):
        match = _BACKGROUND_URL.search(node.get("style", ""))
        if not match:
            continue
        icon_url = match.group(1)
        if "favicon" in icon_url or "icon" in icon_url:
            set_style_property(node, "background-image", f"url('{_secure(icon_url)}')")


def _resolve_lazy_image(img: Tag) -> None:
    data_src = img.get("data-src")
    if data_src and _is_placeholder(img.get("src")):
        img["src"] = data_src
        del img["data-src"]

    data_srcset = img.get("data-srcset")
    if data_srcset and not img.get("srcset"):
        img["srcset"] = data_srcset
        del img["data-srcset"]

    if img.has_attr("data-loading"):
        del img["data-loading"]

    src = img.get("src")
    if src and src.startswith("//"):
        img["src"] = _secure(src)


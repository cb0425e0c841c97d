from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Protocol
from urllib.parse import parse_qsl, urlencode, urlparse, urlunparse

from bs4 import BeautifulSoup, Tag

from ..document import parse_fragment, set_displayed, text_length

# Nodes with less text than this are layout noise, not search results.
MIN_RESULT_TEXT_LENGTH = 50


@dataclass(frozen=True)
class SearchParams:
    """Query and offset of a results URL, as the provider names them."""

    query: Optional[str]
    offset: int
    query_key: str
    offset_key: str


class SiteAdapter(Protocol):
    """
    Interface for provider-specific pagination logic.
    Adapters are stateless: every input (URL, parsed tree, payload) is passed in.
    The controller owns fetching, merging and bookkeeping.
    """

    name: str

    def matches(self, url: str) -> bool:
        """Return True if this adapter should handle the given page URL."""
        ...

    def search_params(self, url: str) -> SearchParams:
        ...

    def next_page_url(self, url: str, page_number: int) -> str:
        """URL of result page ``page_number`` (>= 2). Same inputs, same URL."""
        ...

    def results_container(self, soup: BeautifulSoup) -> Optional[Tag]:
        ...

    def count_initial_results(self, soup: BeautifulSoup) -> int:
        ...

    def extract_results(self, html: str) -> List[Tag]:
        """
        Parse a fetched page on its own and return its result fragments.
        Must never touch the live document.
        """
        ...

    def create_separator(self, page_number: int) -> Tag:
        ...

    def hide_native_pagination(self, soup: BeautifulSoup) -> None:
        ...

    def show_native_pagination(self, soup: BeautifulSoup) -> None:
        ...


def host_of(url: str) -> str:
    return (urlparse(url).hostname or "").lower()


def with_query_param(url: str, key: str, value: str) -> str:
    """
    Return ``url`` with one query parameter set, all others kept in order.
    Replaces the first occurrence in place and drops any repeats.
    """
    parts = urlparse(url)
    pairs = parse_qsl(parts.query, keep_blank_values=True)
    out: List[tuple[str, str]] = []
    replaced = False
    for k, v in pairs:
        if k != key:
            out.append((k, v))
        elif not replaced:
            out.append((k, value))
            replaced = True
    if not replaced:
        out.append((key, value))
    return urlunparse(parts._replace(query=urlencode(out)))


def query_value(url: str, *keys: str) -> Optional[str]:
    """First non-empty value among ``keys``, in the order given."""
    params = dict(parse_qsl(urlparse(url).query, keep_blank_values=True))
    for key in keys:
        if params.get(key):
            return params[key]
    return None


def int_or(value: Optional[str], default: int) -> int:
    try:
        return int(value) if value is not None else default
    except ValueError:
        return default


def first_match(soup: BeautifulSoup, selectors: Iterable[str]) -> Optional[Tag]:
    """First element found by the first selector that finds anything."""
    for selector in selectors:
        node = soup.select_one(selector)
        if node is not None:
            return node
    return None


def substantial(nodes: Iterable[Tag]) -> List[Tag]:
    return [n for n in nodes if text_length(n) > MIN_RESULT_TEXT_LENGTH]


def build_separator(label: str, extra_class: Optional[str] = None) -> Tag:
    classes = "auto-expand-separator" if not extra_class else f"auto-expand-separator {extra_class}"
    return parse_fragment(
        f'<div class="{classes}">'
        '<div class="separator-line"></div>'
        f'<span class="separator-text">{label}</span>'
        '<div class="separator-line"></div>'
        "</div>"
    )


def toggle_pagination(soup: BeautifulSoup, selector: str, displayed: bool) -> None:
    set_displayed(soup.select(selector), displayed)

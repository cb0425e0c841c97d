from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from ..config import ExpansionConfig
from ..document import DocumentView
from ..utils.logging import setup_logging
from ..utils.http import Fetcher, FetchError, PageFetcher, create_session
from ..utils.storage import JsonFileStore, MemoryStore, SettingsStore
from ..utils.timers import LoopScheduler
from ..adapters.registry import AdapterRegistry
from ..engines.bootstrap import ExpansionSession, bootstrap
from ..engines.scroll import SCROLL_DEBOUNCE_SECONDS
from ..engines.settings_bridge import ENABLED_KEY, MAX_PAGES_KEY
from ..export.html_exporter import HTMLExporter
from ..export.json_exporter import JSONExporter

logger = logging.getLogger(__name__)

# Slack past a timer's deadline before checking what it did.
_SETTLE_SECONDS = 0.05


def build_arg_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(description="Expand a paginated search-results page in place")
    p.add_argument("url", help="Search results URL (Google, Baidu or Bing)")
    p.add_argument("--config", type=str, default=None, help="Path to config JSON")
    p.add_argument("--settings", type=str, default=None,
                   help="Path to the persisted settings JSON (enabled/maxPages)")
    p.add_argument("--max-pages", type=int, default=None, help="Page cap (stored in the settings)")
    p.add_argument("--loading-delay", type=int, default=None, help="Delay before the first load, in ms")
    p.add_argument("--scroll-threshold", type=int, default=None,
                   help="Distance from the bottom that triggers a load, in px")
    p.add_argument("--disabled", action="store_true", help="Store enabled=false before loading the page")
    p.add_argument("--extra-adapters", type=str, default=None,
                   help="Comma-separated dotted paths for additional adapters")
    p.add_argument("--output", type=str, default="output/expanded.html", help="Expanded HTML output path")
    p.add_argument("--report", type=str, default=None, help="Optional JSON session report path")
    p.add_argument("--log-level", type=str, default=None, help="Log level (DEBUG, INFO, WARNING, ERROR)")
    return p


def _load_config(args: argparse.Namespace) -> ExpansionConfig:
    if args.config:
        cfg = ExpansionConfig.from_file(args.config)
    else:
        cfg = ExpansionConfig.from_env()

    if args.settings:
        cfg.settings_path = args.settings
    if args.loading_delay is not None:
        cfg.loading_delay_ms = args.loading_delay
    if args.scroll_threshold is not None:
        cfg.scroll_threshold_px = args.scroll_threshold
    if args.max_pages is not None:
        cfg.max_pages = args.max_pages
    if args.extra_adapters:
        cfg.extra_adapters = [a.strip() for a in args.extra_adapters.split(",") if a.strip()]

    cfg.validate()
    return cfg


def _open_store(cfg: ExpansionConfig, args: argparse.Namespace) -> SettingsStore:
    store: SettingsStore = JsonFileStore(cfg.settings_path) if cfg.settings_path else MemoryStore()
    # Same writes the settings surface would make.
    overrides = {}
    if args.max_pages is not None:
        overrides[MAX_PAGES_KEY] = args.max_pages
    if args.disabled:
        overrides[ENABLED_KEY] = False
    if overrides:
        store.set(overrides)
    return store


async def scroll_until_done(session: ExpansionSession, scheduler: LoopScheduler) -> None:
    """
    Keep scrolling to the bottom like a reader would, until the controller
    can load no more or a scroll brings in nothing new.
    """
    state = session.state
    while session.controller.can_load():
        before = state.current_page
        session.view.scroll_to_bottom()
        await asyncio.sleep(SCROLL_DEBOUNCE_SECONDS + _SETTLE_SECONDS)
        await scheduler.drain()
        if state.current_page == before:
            logger.info("Stopped at page %s: last load made no progress", before)
            break


async def expand_url(
    url: str,
    cfg: ExpansionConfig,
    store: SettingsStore,
    *,
    fetcher: Optional[Fetcher] = None,
    registry: Optional[AdapterRegistry] = None,
) -> Optional[ExpansionSession]:
    """Open ``url`` as a view, let the engine expand it, and return the session."""
    http_session = None
    if fetcher is None:
        http_session = create_session()
        fetcher = PageFetcher(
            http_session,
            accept_language=cfg.accept_language,
            user_agent=cfg.default_user_agent(),
        )

    scheduler = LoopScheduler()
    session: Optional[ExpansionSession] = None
    try:
        html = await fetcher.fetch(url)
        view = DocumentView(url, html)
        session = bootstrap(view, fetcher, scheduler, config=cfg, store=store, registry=registry)
        if session is None:
            return None

        await asyncio.sleep(cfg.loading_delay + _SETTLE_SECONDS)
        await scheduler.drain()
        await scroll_until_done(session, scheduler)
        return session
    finally:
        if session is not None:
            session.close()
        scheduler.cancel_all()
        if http_session is not None:
            await http_session.close()


def run_cli(argv: List[str] | None = None) -> int:
    args = build_arg_parser().parse_args(argv)
    setup_logging(args.log_level)

    try:
        cfg = _load_config(args)
    except (ValueError, TypeError, OSError) as exc:
        logger.error("Invalid configuration: %s", exc)
        return 1

    store = _open_store(cfg, args)

    registry = AdapterRegistry()
    registry.register_dotted(cfg.extra_adapters)
    registry.discover_entry_points()

    try:
        session = asyncio.run(expand_url(args.url, cfg, store, registry=registry))
    except FetchError as exc:
        logger.error("Could not load %s: %s", exc.url, exc)
        return 1

    if session is None:
        return 2

    HTMLExporter().export(session, args.output)
    if args.report:
        JSONExporter().export(session, args.report)

    logger.info("Pages: %s | Results: %s | Output: %s",
                session.state.current_page,
                session.state.total_results,
                args.output)
    return 0


def main() -> int:
    return run_cli(sys.argv[1:])

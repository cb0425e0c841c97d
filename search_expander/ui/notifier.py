from __future__ import annotations

import logging
from typing import Optional

from ..config import ExpansionConfig
from ..document import DocumentView, parse_fragment, set_style_property
from ..engines.base import EngineState
from ..utils.timers import Scheduler, TimerHandle

logger = logging.getLogger(__name__)

MESSAGE_ID = "auto-expand-message"
STATS_ID = "auto-expand-stats"
MESSAGE_DURATION_SECONDS = 3.0


class Notifier:
    """
    Toast messages and the running-totals overlay.
    Reads engine state, never writes it.
    """

    def __init__(
        self,
        view: DocumentView,
        config: ExpansionConfig,
        state: EngineState,
        scheduler: Scheduler,
        *,
        duration: float = MESSAGE_DURATION_SECONDS,
    ) -> None:
        self.view = view
        self.config = config
        self.state = state
        self.scheduler = scheduler
        self.duration = duration
        self._dismiss: Optional[TimerHandle] = None

    def notify(self, text: str) -> None:
        logger.info("%s", text)
        self.dismiss()

        message = self.view.soup.new_tag("div", id=MESSAGE_ID)
        message.string = text
        self.view.body.append(message)
        self._dismiss = self.scheduler.call_later(self.duration, self.dismiss)

    def dismiss(self) -> None:
        if self._dismiss is not None:
            self._dismiss.cancel()
            self._dismiss = None
        existing = self.view.get_element_by_id(MESSAGE_ID)
        if existing is not None:
            existing.decompose()

    def refresh_stats(self) -> None:
        stats = self.view.get_element_by_id(STATS_ID)
        if stats is None:
            stats = self.view.soup.new_tag("div", id=STATS_ID)
            self.view.body.append(stats)

        if not self.config.enabled:
            set_style_property(stats, "display", "none")
            return

        set_style_property(stats, "display", "flex")
        stats.clear()
        stats.append(parse_fragment(f"<span>Loaded {self.state.current_page} pages</span>"))
        stats.append(parse_fragment(f"<span>{self.state.total_results} results total</span>"))

    def hide_stats(self) -> None:
        stats = self.view.get_element_by_id(STATS_ID)
        if stats is not None:
            set_style_property(stats, "display", "none")

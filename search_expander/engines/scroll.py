from __future__ import annotations

import logging
from typing import Any, Optional

from .expansion import ExpansionController
from ..config import ExpansionConfig
from ..document import DocumentView
from ..utils.timers import Debouncer, Scheduler

logger = logging.getLogger(__name__)

SCROLL_DEBOUNCE_SECONDS = 0.2


class ScrollTrigger:
    """Requests the next page once scrolling settles near the bottom of the view."""

    def __init__(
        self,
        view: DocumentView,
        controller: ExpansionController,
        config: ExpansionConfig,
        scheduler: Scheduler,
        *,
        wait: float = SCROLL_DEBOUNCE_SECONDS,
    ) -> None:
        self.view = view
        self.controller = controller
        self.config = config
        self._debounced = Debouncer(scheduler, wait, self.check)

    def attach(self) -> None:
        self.view.add_scroll_listener(self.on_scroll)

    def detach(self) -> None:
        self.view.remove_scroll_listener(self.on_scroll)
        self._debounced.cancel()

    def on_scroll(self) -> None:
        self._debounced()

    def check(self) -> Optional[Any]:
        """Return the load coroutine when the viewport is within the threshold."""
        if not self.config.enabled:
            return None
        remaining = self.view.remaining_scroll
        if remaining < self.config.scroll_threshold_px:
            logger.debug("Near bottom (%spx left), requesting next page", remaining)
            return self.controller.load_next_page()
        return None

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List

from .cache import LoadedUrlCache


@dataclass
class EngineState:
    """
    Per-view expansion state. One instance per document view,
    mutated only by its ExpansionController.
    """
    current_page: int = 1
    is_loading: bool = False
    has_more_pages: bool = True
    loaded_urls: LoadedUrlCache = field(default_factory=LoadedUrlCache)
    total_results: int = 0
    initialized: bool = False


@dataclass
class ExpansionReport:
    url: str
    adapter: str
    pages_loaded: int
    total_results: int
    exhausted: bool
    loaded_urls: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "url": self.url,
            "adapter": self.adapter,
            "pages_loaded": self.pages_loaded,
            "total_results": self.total_results,
            "exhausted": self.exhausted,
            "loaded_urls": list(self.loaded_urls),
        }

from __future__ import annotations

from dataclasses import dataclass, field, asdict
from typing import List, Optional, Dict, Any
import os
import json

from .version import __version__, CONFIG_SCHEMA_VERSION

DEFAULT_MAX_PAGES = 5
DEFAULT_LOADING_DELAY_MS = 500
DEFAULT_SCROLL_THRESHOLD_PX = 300
DEFAULT_ACCEPT_LANGUAGE = "zh-CN,zh;q=0.9,en;q=0.8"


@dataclass
class ExpansionConfig:
    """
    Live configuration shared by the controller, scroll trigger and notifier.
    Only the settings bridge mutates it once the view is running.
    """
    schema_version: int = CONFIG_SCHEMA_VERSION
    max_pages: int = DEFAULT_MAX_PAGES
    loading_delay_ms: int = DEFAULT_LOADING_DELAY_MS
    scroll_threshold_px: int = DEFAULT_SCROLL_THRESHOLD_PX
    enabled: bool = True
    # Host-side settings, not persisted in the settings store.
    accept_language: str = DEFAULT_ACCEPT_LANGUAGE
    user_agent: Optional[str] = None
    # Extra adapters (dotted class paths) to register after the built-ins
    extra_adapters: List[str] = field(default_factory=list)
    # JSON file backing the enabled/maxPages store; in-memory when unset
    settings_path: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @property
    def loading_delay(self) -> float:
        """Bootstrap delay in seconds."""
        return self.loading_delay_ms / 1000.0

    # ---------- Loaders ----------

    @classmethod
    def from_env(cls) -> "ExpansionConfig":
        """
        Build config from environment variables (all optional).
        """
        def _get(name: str, default: str) -> str:
            return os.getenv(name, default)

        enabled = _get("EXPANDER_ENABLED", "true").strip().lower() not in ("0", "false", "no", "off")

        return cls(
            max_pages=int(_get("EXPANDER_MAX_PAGES", str(DEFAULT_MAX_PAGES))),
            loading_delay_ms=int(_get("EXPANDER_LOADING_DELAY_MS", str(DEFAULT_LOADING_DELAY_MS))),
            scroll_threshold_px=int(_get("EXPANDER_SCROLL_THRESHOLD_PX", str(DEFAULT_SCROLL_THRESHOLD_PX))),
            enabled=enabled,
            accept_language=_get("EXPANDER_ACCEPT_LANGUAGE", DEFAULT_ACCEPT_LANGUAGE),
            user_agent=os.getenv("EXPANDER_USER_AGENT") or None,
            extra_adapters=[a.strip() for a in _get("EXPANDER_EXTRA_ADAPTERS", "").split(",") if a.strip()],
            settings_path=os.getenv("EXPANDER_SETTINGS_PATH") or None,
        )

    @classmethod
    def from_file(cls, path: str | os.PathLike[str]) -> "ExpansionConfig":
        """
        Load configuration from a JSON file, migrating older schemas first.
        """
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        data = migrate_config(data)
        return cls(**data)

    # ---------- Validation ----------

    def validate(self) -> None:
        if self.max_pages < 1:
            raise ValueError("max_pages must be >= 1")
        if self.loading_delay_ms < 0:
            raise ValueError("loading_delay_ms must be >= 0")
        if self.scroll_threshold_px < 0:
            raise ValueError("scroll_threshold_px must be >= 0")

    def default_user_agent(self) -> str:
        return self.user_agent or f"search_expander/{__version__}"


def migrate_config(raw: Dict[str, Any]) -> Dict[str, Any]:
    """
    Migrate a config dict to the latest schema version.
    Keep this pure and additive. Add migrations here as you bump schema.
    """
    data = dict(raw)

    # Schema 0 used the store's camelCase keys.
    renames = {
        "maxPages": "max_pages",
        "loadingDelay": "loading_delay_ms",
        "scrollThreshold": "scroll_threshold_px",
    }
    for old, new in renames.items():
        if old in data:
            data.setdefault(new, data.pop(old))

    data["schema_version"] = CONFIG_SCHEMA_VERSION
    return data

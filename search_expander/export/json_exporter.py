from __future__ import annotations

import json
from pathlib import Path

from .base import Exporter
from ..engines.bootstrap import ExpansionSession


class JSONExporter:
    """Writes the session report: adapter, pages loaded, totals and merged URLs."""

    def export(self, session: ExpansionSession, path: str) -> None:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            serializable = session.controller.report().to_dict()
            serializable["config"] = {
                "enabled": session.config.enabled,
                "max_pages": session.config.max_pages,
            }
            json.dump(serializable, f, indent=2, ensure_ascii=False)

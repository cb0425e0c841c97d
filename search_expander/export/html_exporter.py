from __future__ import annotations

from pathlib import Path

from .base import Exporter
from ..engines.bootstrap import ExpansionSession


class HTMLExporter:
    """Writes the expanded page as it stands, merged results included."""

    def export(self, session: ExpansionSession, path: str) -> None:
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(session.view.html())

from __future__ import annotations

from typing import Protocol

from ..engines.bootstrap import ExpansionSession


class Exporter(Protocol):
    def export(self, session: ExpansionSession, path: str) -> None:
        ...

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Type

from .errors import RecordWarning
from .models import Diagnostic


log = logging.getLogger(__name__)

EventCallback = Callable[[Diagnostic], None]


class Diagnostics:
    """Per-run event channel.

    Every event is kept on the instance, mirrored to ``logging`` and handed
    to the optional ``on_event`` callback (e.g. a UI log view). A failing
    callback is logged and otherwise ignored so it cannot abort a run.
    """

    def __init__(self, on_event: Optional[EventCallback] = None) -> None:
        self.events: List[Diagnostic] = []
        self._on_event = on_event

    def _emit(self, event: Diagnostic, level: int) -> None:
        self.events.append(event)
        log.log(level, event.message)
        if self._on_event:
            try:
                self._on_event(event)
            except Exception as e:
                log.warning(f"Diagnostics callback failed: {e}")

    def info(self, message: str, kind: str = "info") -> None:
        self._emit(Diagnostic(level="info", kind=kind, message=message), logging.INFO)

    def warn(
        self,
        category: Type[RecordWarning],
        message: str,
        row: Optional[int] = None,
        value: Optional[str] = None,
    ) -> None:
        event = Diagnostic(level="warning", kind=category.__name__, message=message, row=row, value=value)
        self._emit(event, logging.WARNING)

    def count(self, category: Type[RecordWarning]) -> int:
        return sum(1 for e in self.events if e.kind == category.__name__)

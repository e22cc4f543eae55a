"""Capture notifications and the subscription interface flows listen on."""
from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from typing import Callable, List, Optional

logger = logging.getLogger(__name__)

CAPTURED = 'captured'
CAPTURE_FAILED = 'capture_failed'


@dataclass(frozen=True)
class CaptureEvent:
    kind: str
    identifier: Optional[str] = None
    message: str = ''
    simulated: bool = False

    @property
    def ok(self) -> bool:
        return self.kind == CAPTURED

    def as_dict(self) -> dict:
        return asdict(self)


Listener = Callable[[CaptureEvent], None]


class CaptureNotifier:
    """Delivers capture events to subscribers in subscription order.

    A listener that raises is logged and skipped so one broken screen
    cannot stop the others from seeing the capture.
    """

    def __init__(self) -> None:
        self._listeners: List[Listener] = []

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            self.unsubscribe(listener)

        return unsubscribe

    def unsubscribe(self, listener: Listener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def publish(self, event: CaptureEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception('capture listener %r failed on %s', listener, event.kind)

    def __len__(self) -> int:
        return len(self._listeners)

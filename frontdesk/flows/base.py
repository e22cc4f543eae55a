"""Shared plumbing for the front-desk flows: notifications and sensor subscription."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from frontdesk.sensor.events import CaptureEvent

logger = logging.getLogger(__name__)

INFO = 'info'
SUCCESS = 'success'
ERROR = 'error'


@dataclass(frozen=True)
class Notification:
    message: str
    level: str = INFO


class Flow:
    """Base class holding the injected sensor and record store.

    A flow listens to the sensor only while active, the way only the
    screen on display reacts to a capture.  Notifications are kept in
    ``notifications`` and handed to ``on_notify`` when given.
    """

    def __init__(self, sensor, store, on_notify: Optional[Callable[[Notification], None]] = None,
                 active: bool = True):
        self.sensor = sensor
        self.store = store
        self.on_notify = on_notify
        self.notifications: List[Notification] = []
        self._unsubscribe: Optional[Callable[[], None]] = None
        if active:
            self.activate()

    @property
    def active(self) -> bool:
        return self._unsubscribe is not None

    def activate(self) -> None:
        if self._unsubscribe is None:
            self._unsubscribe = self.sensor.subscribe(self.on_capture_event)

    def notify(self, message: str, level: str = INFO) -> Notification:
        note = Notification(message, level)
        self.notifications.append(note)
        log = logger.warning if level == ERROR else logger.info
        log('[%s] %s', type(self).__name__, message)
        if self.on_notify:
            self.on_notify(note)
        return note

    @property
    def last_notification(self) -> Optional[Notification]:
        return self.notifications[-1] if self.notifications else None

    def on_capture_event(self, event: CaptureEvent) -> None:
        raise NotImplementedError

    def deactivate(self) -> None:
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None

    close = deactivate

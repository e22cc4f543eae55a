"""
Front-desk session wiring.

One sensor client and one record store client are built per session and
injected into both flows; nothing reaches the sensor through a global.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from django.conf import settings

from frontdesk.flows import LookupFlow, Notification, RegistrationFlow
from frontdesk.sensor import SensorClient
from frontdesk.services.store import RecordStoreClient

logger = logging.getLogger(__name__)


@dataclass
class FrontDeskSession:
    sensor: SensorClient
    store: RecordStoreClient
    registration: RegistrationFlow
    lookup: LookupFlow
    _detach: List[Callable[[], None]] = field(default_factory=list)

    def use(self, flow):
        """Make ``flow`` the one reacting to captures, like switching screens."""
        for other in (self.registration, self.lookup):
            if other is not flow:
                other.deactivate()
        flow.activate()
        return flow

    def close(self) -> None:
        for detach in self._detach:
            detach()
        self._detach.clear()
        self.registration.close()
        self.lookup.close()
        self.sensor.disconnect()


def build_session(*, sensor: Optional[SensorClient] = None, store: Optional[RecordStoreClient] = None,
                  on_notify: Optional[Callable[[Notification], None]] = None,
                  relay: bool = False) -> FrontDeskSession:
    """Construct the session; ``relay`` forwards capture events to websocket screens."""
    sensor = sensor or SensorClient.from_settings()
    store = store or RecordStoreClient.from_settings()
    detach = []
    if relay:
        from frontdesk.realtime.relay import ChannelLayerRelay

        detach.append(sensor.subscribe(ChannelLayerRelay()))
    if sensor.check_status():
        logger.info('capture service reachable at %s', sensor.base_url)
    else:
        logger.warning('capture service not available at %s, captures will be simulated', sensor.base_url)
    return FrontDeskSession(
        sensor=sensor,
        store=store,
        registration=RegistrationFlow(sensor, store, on_notify, active=False),
        lookup=LookupFlow(sensor, store, on_notify, recent_limit=settings.FRONTDESK_RECENT_LIMIT, active=False),
        _detach=detach,
    )

"""Forward sensor capture events to the channel layer group watched by
:class:`~frontdesk.realtime.consumers.CaptureConsumer`."""
import logging

from asgiref.sync import async_to_sync
from channels.layers import get_channel_layer

from frontdesk.realtime.consumers import CAPTURE_GROUP
from frontdesk.sensor.events import CaptureEvent

logger = logging.getLogger(__name__)


class ChannelLayerRelay:
    def __init__(self, group: str = CAPTURE_GROUP, channel_layer=None):
        self.group = group
        self.channel_layer = channel_layer if channel_layer is not None else get_channel_layer()

    def __call__(self, event: CaptureEvent) -> None:
        if self.channel_layer is None:
            return
        message = {"type": "capture.event", **event.as_dict()}
        async_to_sync(self.channel_layer.group_send)(self.group, message)
        logger.debug("relayed %s to group %s", event.kind, self.group)

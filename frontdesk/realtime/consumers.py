import json
from channels.generic.websocket import AsyncWebsocketConsumer

CAPTURE_GROUP = "captures"


class CaptureConsumer(AsyncWebsocketConsumer):
    """Streams capture notifications to front-desk screens."""
    GROUP = CAPTURE_GROUP

    async def connect(self):
        await self.channel_layer.group_add(self.GROUP, self.channel_name)
        await self.accept()
        await self.send(json.dumps({"type": "welcome", "message": "connected"}))

    async def disconnect(self, close_code):
        await self.channel_layer.group_discard(self.GROUP, self.channel_name)

    async def capture_event(self, event):
        # event: {"type": "capture.event", "kind": ..., "identifier": ..., "message": ..., "simulated": ...}
        await self.send(json.dumps(event))

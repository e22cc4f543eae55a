from django.urls import path

from frontdesk.realtime.consumers import CaptureConsumer

websocket_urlpatterns = [
    path("ws/captures/", CaptureConsumer.as_asgi()),
]

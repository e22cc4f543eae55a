"""
WSGI config for the clinic project.

It exposes the WSGI callable as a module-level variable named ``application``.
Capture notifications over WebSocket need the ASGI entry point instead
(see ``clinic.asgi``).
"""
import os

from django.core.wsgi import get_wsgi_application  # type: ignore

os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'clinic.settings')

application = get_wsgi_application()

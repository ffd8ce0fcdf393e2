"""
ASGI config for the inbox service.

Uvicorn uses this entry point to serve the HTTP API. There are no
WebSocket routes; clients sync by polling message history with ``since``.

For more information on this file, see:
https://docs.djangoproject.com/en/5.2/howto/deployment/asgi/
"""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings")

application = get_asgi_application()

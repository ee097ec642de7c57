# backend/asgi.py
"""
ASGI entrypoint for the billing backend (uvicorn backend.asgi:application).

Same settings selection as backend.wsgi.
"""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "backend.settings.dev")

application = get_asgi_application()

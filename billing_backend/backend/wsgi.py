# backend/wsgi.py
"""
WSGI entrypoint for the billing backend (gunicorn backend.wsgi).

Production hosts set DJANGO_SETTINGS_MODULE=backend.settings.prod;
without it the dev settings are loaded.
"""

import os

from django.core.wsgi import get_wsgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "backend.settings.dev")

application = get_wsgi_application()

# backend/settings/dev.py
"""
DEVELOPMENT SETTINGS

- DEBUG forced on
- local front end origins allowed by default
- billing loggers at DEBUG unless LOG_LEVEL says otherwise
"""

from __future__ import annotations

from .base import *  # noqa: F403
from .base import LOGGING, TESTING, env

DEBUG = True

LOCAL_FRONTEND = ["http://localhost:5173", "http://127.0.0.1:5173"]

ALLOWED_HOSTS = env.list("ALLOWED_HOSTS", default=["localhost", "127.0.0.1", "testserver"])
CORS_ALLOWED_ORIGINS = env.list("CORS_ALLOWED_ORIGINS", default=LOCAL_FRONTEND)
CSRF_TRUSTED_ORIGINS = env.list("CSRF_TRUSTED_ORIGINS", default=LOCAL_FRONTEND)
CORS_ALLOW_CREDENTIALS = True

if not TESTING and "LOG_LEVEL" not in env.ENVIRON:
    for name in ("invoicing", "payments", "reports"):
        LOGGING["loggers"][name]["level"] = "DEBUG"

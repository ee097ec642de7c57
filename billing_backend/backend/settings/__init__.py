# backend/settings/__init__.py
"""
Billing backend settings.

Pick a concrete module through DJANGO_SETTINGS_MODULE:
- backend.settings.dev   local work and the test suite (sqlite by default)
- backend.settings.prod  deployed instances (Postgres, WhiteNoise, HTTPS)

base.py holds everything both share, including the billing knobs.
"""

#!/usr/bin/env python
"""
Billing backend management entrypoint.

Settings:
- backend.settings.dev is used when DJANGO_SETTINGS_MODULE is unset, or
  points at the bare settings package (which configures nothing)
- deployments export DJANGO_SETTINGS_MODULE=backend.settings.prod

Run the suite with:
    python manage.py test customers products invoicing reports
"""

import os
import sys

DEV_SETTINGS = "backend.settings.dev"


def main():
    selected = (os.environ.get("DJANGO_SETTINGS_MODULE") or "").strip()
    if selected in ("", "backend.settings"):
        os.environ["DJANGO_SETTINGS_MODULE"] = DEV_SETTINGS

    try:
        from django.core.management import execute_from_command_line
    except ImportError as exc:
        raise ImportError(
            "Django is not importable. Install the billing backend "
            "(pip install -e .) inside the active virtual environment."
        ) from exc

    execute_from_command_line(sys.argv)


if __name__ == "__main__":
    main()

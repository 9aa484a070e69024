"""ASGI config for fieldkit project."""

import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "fieldkit.settings")

application = get_asgi_application()

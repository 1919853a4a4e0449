"""
ASGI config for the Olympus clinic project.

The API is plain request/response, so the ASGI entrypoint is Django's
HTTP application only.
"""
import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "olympus.settings")

application = get_asgi_application()

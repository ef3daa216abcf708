"""
ASGI config for the hospital directory project.

Only HTTP is served; the API has no WebSocket endpoints.
"""
import os

from django.core.asgi import get_asgi_application

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "hospital_directory.settings")

application = get_asgi_application()

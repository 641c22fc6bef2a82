"""ASGI entrypoint for the studio portal API."""

from studio_portal.api.app import create_app
from studio_portal.containers import build_container

app = create_app(build_container())

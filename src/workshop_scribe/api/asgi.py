"""ASGI entrypoint for the workshop scribe API."""

from workshop_scribe.api.app import create_app
from workshop_scribe.containers import build_container

app = create_app(build_container())

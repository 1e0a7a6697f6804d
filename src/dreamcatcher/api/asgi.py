"""ASGI entrypoint for the DreamCatcher API."""

from dreamcatcher.api.app import create_app
from dreamcatcher.containers import build_container

app = create_app(build_container())

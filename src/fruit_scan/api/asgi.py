"""ASGI entrypoint for the fruit scan API."""

from fruit_scan.api.app import create_app
from fruit_scan.containers import build_container

app = create_app(build_container())

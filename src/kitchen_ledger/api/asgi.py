"""ASGI entrypoint for the kitchen ledger API."""

from kitchen_ledger.api.app import create_app
from kitchen_ledger.containers import build_container

app = create_app(build_container())

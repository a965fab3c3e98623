"""ASGI entrypoint for the nutrition calculator API."""

from nutrition_calculator.api.app import create_app
from nutrition_calculator.containers import build_container

app = create_app(build_container())

"""ASGI entrypoint for the meal importer API."""

from meal_importer.api.app import create_app
from meal_importer.containers import build_container

app = create_app(build_container())

"""ASGI entry point: ``uvicorn ecoride.app_factory:app``."""
from ecoride.app import create_app

app = create_app()

__all__ = ["app", "create_app"]

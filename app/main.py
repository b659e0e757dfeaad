"""ASGI entrypoint for the profile API (``uvicorn app.main:app``)."""

from .core.app_factory import create_application

app = create_application()

__all__ = ("app",)

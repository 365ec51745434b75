"""Celery task modules for EventHub."""

# Import submodules so Celery autodiscovery registers tasks.
from . import courtesies as _courtesies  # noqa: F401

__all__ = ["_courtesies"]

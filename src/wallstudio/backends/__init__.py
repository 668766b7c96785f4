"""Persistence collaborators: the abstract surface, a local JSON store and the HTTP API."""

from wallstudio.backends.base import PersistenceBackend, Session, create_backend
from wallstudio.backends.http import HttpBackend
from wallstudio.backends.local import LocalStore

__all__ = ["HttpBackend", "LocalStore", "PersistenceBackend", "Session", "create_backend"]

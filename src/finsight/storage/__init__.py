"""Relational and object storage."""
from .database import Database
from .object_store import ObjectStore

__all__ = ["Database", "ObjectStore"]

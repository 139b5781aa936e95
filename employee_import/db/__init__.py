"""Persistence: the EmployeeStore protocol and its implementations."""

from .memory_store import MemoryStore
from .postgres_store import PostgresStore
from .store import Catalog, EmployeeStore, StoreError

__all__ = ["Catalog", "EmployeeStore", "MemoryStore", "PostgresStore", "StoreError"]

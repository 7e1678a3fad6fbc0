# PATH: data/__init__.py
"""
data - Entity store for PRICER.

- store.py: EntityStore protocol and the snapshot-backed in-memory store
"""

from data.store import EntityStore, InMemoryEntityStore

__all__ = [
    "EntityStore",
    "InMemoryEntityStore",
]

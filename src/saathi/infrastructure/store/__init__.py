"""Profile/Session Store contract and implementations."""

from saathi.infrastructure.store.base import ProfileSessionStore, StoreDeletion
from saathi.infrastructure.store.memory import InMemoryProfileSessionStore

__all__ = [
    "InMemoryProfileSessionStore",
    "ProfileSessionStore",
    "StoreDeletion",
]

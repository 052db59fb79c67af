"""Shared-link record store adapters."""

from fileshare.adapters.links.base import (
    AbstractLinkStore,
    ActivityEntry,
    LinkUsage,
    SharedLinkRecord,
)
from fileshare.adapters.links.factory import create_link_store
from fileshare.adapters.links.in_memory import InMemoryLinkStore

__all__ = [
    "AbstractLinkStore",
    "ActivityEntry",
    "InMemoryLinkStore",
    "LinkUsage",
    "SharedLinkRecord",
    "create_link_store",
]

"""In-memory shared-link store for local development and tests."""

from __future__ import annotations

import threading
from typing import Any, Mapping

from fileshare.adapters.links.base import (
    AbstractLinkStore,
    ActivityEntry,
    LinkUsage,
    SharedLinkRecord,
    record_from_document,
)


class InMemoryLinkStore(AbstractLinkStore):
    """Dict-backed store holding raw documents keyed by slug."""

    def __init__(self, documents: Mapping[str, Mapping[str, Any]] | None = None) -> None:
        self._lock = threading.Lock()
        self._documents: dict[str, dict[str, Any]] = {
            slug: dict(doc) for slug, doc in (documents or {}).items()
        }
        self.usage: list[LinkUsage] = []
        self.activity: list[ActivityEntry] = []

    def put(self, slug: str, document: Mapping[str, Any]) -> None:
        with self._lock:
            self._documents[slug] = dict(document)

    async def get(self, slug: str) -> SharedLinkRecord | None:
        with self._lock:
            document = self._documents.get(slug)
        if document is None:
            return None
        return record_from_document(slug, document)

    async def record_usage(self, usage: LinkUsage) -> None:
        with self._lock:
            self.usage.append(usage)

    async def append_activity(self, entry: ActivityEntry) -> None:
        with self._lock:
            self.activity.append(entry)

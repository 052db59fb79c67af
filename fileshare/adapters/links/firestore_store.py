"""Firestore-backed shared-link store."""

from __future__ import annotations

import re

from google.cloud import firestore

from fileshare.adapters.links.base import (
    AbstractLinkStore,
    ActivityEntry,
    LinkUsage,
    SharedLinkRecord,
    activity_to_document,
    record_from_document,
    usage_to_document,
)

# Firestore document id limits
_MAX_DOCUMENT_ID_BYTES = 1500
_RESERVED_DOCUMENT_ID = re.compile(r"^__.*__$")


def is_document_id(value: str) -> bool:
    """Return True if ``value`` can name a single document in a collection."""
    if not value or value in {".", ".."} or "/" in value:
        return False
    if _RESERVED_DOCUMENT_ID.match(value):
        return False
    return len(value.encode("utf-8")) <= _MAX_DOCUMENT_ID_BYTES


class FirestoreLinkStore(AbstractLinkStore):
    """Reads ``sharedFiles/{slug}`` documents and appends to the usage and activity logs.

    Uses the async Firestore client; credentials come from the environment
    (``GOOGLE_APPLICATION_CREDENTIALS`` or workload identity).
    """

    def __init__(
        self,
        client: firestore.AsyncClient,
        *,
        collection: str = "sharedFiles",
        usage_collection: str = "linkUsage",
        activity_collection: str = "activityLogs",
    ) -> None:
        self._client = client
        self._collection = collection
        self._usage_collection = usage_collection
        self._activity_collection = activity_collection

    async def get(self, slug: str) -> SharedLinkRecord | None:
        # Such a slug can never name a stored link; the client would raise ValueError
        if not is_document_id(slug):
            return None
        snapshot = await self._client.collection(self._collection).document(slug).get()
        if not snapshot.exists:
            return None
        return record_from_document(slug, snapshot.to_dict() or {})

    async def record_usage(self, usage: LinkUsage) -> None:
        document = usage_to_document(usage)
        # Server clock, so entries from every instance sort consistently
        document["accessedAt"] = firestore.SERVER_TIMESTAMP
        await self._client.collection(self._usage_collection).add(document)

    async def append_activity(self, entry: ActivityEntry) -> None:
        document = activity_to_document(entry)
        document["timestamp"] = firestore.SERVER_TIMESTAMP
        await self._client.collection(self._activity_collection).add(document)

"""Shared-link record store interfaces and record parsing."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Mapping


@dataclass(frozen=True)
class SharedLinkRecord:
    """A public share link, as written by the share flow.

    Attributes:
        slug: Public identifier used in the shareable URL.
        key: Internal storage key of the shared object; None for malformed entries.
        expires_at: Instant after which the link is dead (timezone-aware).
        name: Display name given to the link by its owner.
        file_name: File name at share time.
        original_name: Original upload name.
        owner: Uid of the user who created the link.
        created_at: Creation instant.
    """

    slug: str
    key: str | None
    expires_at: datetime | None = None
    name: str | None = None
    file_name: str | None = None
    original_name: str | None = None
    owner: str | None = None
    created_at: datetime | None = None

    def is_expired(self, now: datetime) -> bool:
        return self.expires_at is not None and self.expires_at < now

    @property
    def display_file_name(self) -> str:
        """File name, falling back to the last segment of the storage key."""
        return self.file_name or _key_basename(self.key) or "file"


@dataclass(frozen=True)
class LinkUsage:
    """One access to a shared link, stored for the owner's activity view."""

    link_id: str
    link_name: str
    file_name: str
    owner: str | None
    accessed_at: datetime
    user_agent: str
    ip_address: str


@dataclass(frozen=True)
class ActivityEntry:
    """One client-reported action (e.g. an upload queue event) for the activity feed."""

    user_id: str
    action: str
    file_name: str
    task_id: str
    timestamp: datetime
    additional_data: dict[str, Any] = field(default_factory=dict)


def _key_basename(key: str | None) -> str:
    if not key:
        return ""
    return key.rsplit("/", 1)[-1]


def _as_utc(value: Any) -> datetime | None:
    """Normalize a stored timestamp to an aware UTC datetime.

    Firestore returns ``DatetimeWithNanoseconds`` (a datetime subclass); ISO
    strings are accepted for records written by other tooling. Naive values
    are treated as UTC.
    """
    if value is None:
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if not isinstance(value, datetime):
        raise TypeError(f"unsupported timestamp type: {type(value).__name__}")
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def record_from_document(slug: str, data: Mapping[str, Any]) -> SharedLinkRecord:
    """Build a SharedLinkRecord from a raw ``sharedFiles`` document."""

    return SharedLinkRecord(
        slug=slug,
        key=data.get("key") or None,
        expires_at=_as_utc(data.get("expiresAt")),
        name=data.get("name"),
        file_name=data.get("fileName"),
        original_name=data.get("originalName"),
        owner=data.get("owner"),
        created_at=_as_utc(data.get("createdAt")),
    )


def usage_to_document(usage: LinkUsage) -> dict[str, Any]:
    return {
        "linkId": usage.link_id,
        "linkName": usage.link_name,
        "fileName": usage.file_name,
        "owner": usage.owner,
        "accessedAt": usage.accessed_at,
        "userAgent": usage.user_agent,
        "ipAddress": usage.ip_address,
    }


def activity_to_document(entry: ActivityEntry) -> dict[str, Any]:
    # userEmail and fileSize are present in every activityLogs document
    return {
        "userId": entry.user_id,
        "userEmail": "",
        "action": entry.action,
        "fileName": entry.file_name,
        "fileSize": 0,
        "taskId": entry.task_id,
        "additionalData": dict(entry.additional_data),
        "timestamp": entry.timestamp,
    }


class AbstractLinkStore(ABC):
    """Keyed lookup of share links plus append-only usage and activity logs."""

    @abstractmethod
    async def get(self, slug: str) -> SharedLinkRecord | None:
        """Fetch the record for an exact slug match, or None when absent."""
        raise NotImplementedError

    @abstractmethod
    async def record_usage(self, usage: LinkUsage) -> None:
        """Append one usage entry."""
        raise NotImplementedError

    @abstractmethod
    async def append_activity(self, entry: ActivityEntry) -> None:
        """Append one activity-feed entry."""
        raise NotImplementedError

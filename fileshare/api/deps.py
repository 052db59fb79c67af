"""FastAPI dependencies building the services from settings.

Collaborators are created on first use rather than at import time, so the
app starts (and /health answers) even when storage is not configured, and
tests can swap them through ``app.dependency_overrides``.
"""

from __future__ import annotations

from functools import lru_cache

from fileshare.adapters.links.base import AbstractLinkStore
from fileshare.adapters.links.factory import create_link_store
from fileshare.adapters.storage.base import AbstractUrlSigner
from fileshare.adapters.storage.factory import create_url_signer
from fileshare.core.config import settings
from fileshare.services.activity_log import ActivityLogService
from fileshare.services.link_resolver import LinkResolver


@lru_cache
def get_link_store() -> AbstractLinkStore:
    return create_link_store()


@lru_cache
def get_url_signer() -> AbstractUrlSigner:
    return create_url_signer()


def get_link_resolver() -> LinkResolver:
    return LinkResolver(
        store=get_link_store(),
        signer=get_url_signer(),
        url_ttl_seconds=settings.app.download_url_ttl_seconds,
        attachment_ttl_seconds=settings.app.public_download_url_ttl_seconds,
    )


def get_activity_log_service() -> ActivityLogService:
    return ActivityLogService(store=get_link_store())

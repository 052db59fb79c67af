"""Share-link resolution: slug -> record -> expiry check -> presigned URL.

Every public share endpoint goes through ``LinkResolver``. Lookup failures
are raised as tagged ``AppError`` subclasses:

- ValidationAppError: missing slug or record without a storage key (400)
- NotFoundAppError: no record for the slug (404)
- ExpiredAppError: record past its expiry (410)
- InternalAppError: record store or URL signer failed (500)

The presigned URL lives far shorter than the link itself, so a leaked URL
stops working within a minute.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable
from urllib.parse import quote

from fileshare.adapters.links.base import AbstractLinkStore, LinkUsage, SharedLinkRecord
from fileshare.adapters.storage.base import AbstractUrlSigner, ObjectMeta
from fileshare.core.errors import (
    ExpiredAppError,
    InternalAppError,
    NotFoundAppError,
    ValidationAppError,
)
from fileshare.core.logging import hash_identifier
from fileshare.schemas.links import PublicDownloadResponse, SharedFileData, SharedFileResponse

logger = logging.getLogger(__name__)

DEFAULT_URL_TTL_SECONDS = 60
DEFAULT_ATTACHMENT_TTL_SECONDS = 300
UNNAMED_LINK = "Unnamed"
UNKNOWN = "unknown"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def extract_slug(query_slug: str | None, path: str = "") -> str:
    """Pick the slug from a request.

    The ``slug`` query parameter wins; otherwise the final path segment is
    used (``/files/report-ab12`` -> ``report-ab12``). Returns "" when neither
    carries a value.
    """

    if query_slug:
        return query_slug
    return path.split("/")[-1] if path else ""


class LinkResolver:
    """Resolves public slugs into short-lived object URLs."""

    def __init__(
        self,
        *,
        store: AbstractLinkStore,
        signer: AbstractUrlSigner,
        clock: Callable[[], datetime] = _utcnow,
        url_ttl_seconds: int = DEFAULT_URL_TTL_SECONDS,
        attachment_ttl_seconds: int = DEFAULT_ATTACHMENT_TTL_SECONDS,
    ) -> None:
        self._store = store
        self._signer = signer
        self._clock = clock
        self._url_ttl_seconds = url_ttl_seconds
        self._attachment_ttl_seconds = attachment_ttl_seconds

    async def _load(self, slug: str) -> SharedLinkRecord:
        """Fetch and validate the live record for ``slug``."""

        if not slug:
            raise ValidationAppError(code="missing_slug", message="Missing slug")

        try:
            record = await self._store.get(slug)
        except Exception as exc:
            logger.error(
                "link.store_failed",
                extra={
                    "slug_hash": hash_identifier(slug),
                    "error_type": type(exc).__name__,
                    "error_msg": str(exc),
                },
            )
            raise InternalAppError(
                code="link_lookup_failed",
                message="Server error",
            ) from exc

        if record is None:
            logger.info("link.not_found", extra={"slug_hash": hash_identifier(slug)})
            raise NotFoundAppError(code="link_not_found", message="Not found")

        if not record.key:
            logger.warning("link.malformed", extra={"slug_hash": hash_identifier(slug)})
            raise ValidationAppError(code="link_malformed", message="Invalid link entry")

        if record.is_expired(self._clock()):
            expired_at = record.expires_at.isoformat() if record.expires_at else ""
            logger.info(
                "link.expired",
                extra={"slug_hash": hash_identifier(slug), "expired_at": expired_at},
            )
            raise ExpiredAppError(
                code="link_expired",
                message="Link expired",
                details={"expired_at": expired_at},
            )

        return record

    async def _sign(
        self,
        record: SharedLinkRecord,
        ttl_seconds: int,
        response_headers: dict[str, str] | None = None,
    ) -> str:
        try:
            return await self._signer.sign(
                record.key or "",
                "get",
                ttl_seconds,
                response_headers=response_headers,
            )
        except Exception as exc:
            logger.error(
                "link.sign_failed",
                extra={
                    "slug_hash": hash_identifier(record.slug),
                    "error_type": type(exc).__name__,
                    "error_msg": str(exc),
                },
            )
            raise InternalAppError(code="link_sign_failed", message="Server error") from exc

    async def resolve(self, slug: str) -> str:
        """Return a presigned GET URL for the object behind ``slug``.

        Performs one store read and one signing call, without retries.

        Raises:
            ValidationAppError, NotFoundAppError, ExpiredAppError, InternalAppError.
        """

        record = await self._load(slug)
        url = await self._sign(record, self._url_ttl_seconds)
        logger.info(
            "link.resolved",
            extra={"slug_hash": hash_identifier(slug), "ttl_s": self._url_ttl_seconds},
        )
        return url

    async def _record_usage(
        self, record: SharedLinkRecord, *, user_agent: str | None, ip_address: str | None
    ) -> None:
        usage = LinkUsage(
            link_id=record.slug,
            link_name=record.name or UNNAMED_LINK,
            file_name=record.display_file_name,
            owner=record.owner,
            accessed_at=self._clock(),
            user_agent=user_agent or UNKNOWN,
            ip_address=ip_address or UNKNOWN,
        )
        try:
            await self._store.record_usage(usage)
        except Exception as exc:
            # Usage tracking never blocks the recipient's download
            logger.warning(
                "link.usage_log_failed",
                extra={"slug_hash": hash_identifier(record.slug), "error_type": type(exc).__name__},
            )

    async def _head(self, record: SharedLinkRecord) -> ObjectMeta:
        try:
            return await self._signer.head(record.key or "")
        except Exception as exc:
            logger.warning(
                "link.head_failed",
                extra={"slug_hash": hash_identifier(record.slug), "error_type": type(exc).__name__},
            )
            return ObjectMeta(size=None, content_type=None)

    async def describe(
        self,
        slug: str,
        *,
        user_agent: str | None = None,
        ip_address: str | None = None,
    ) -> SharedFileResponse:
        """Resolve ``slug`` and return file metadata with the download URL.

        Also appends a usage entry for the link owner. Usage logging and the
        metadata HEAD are best effort: their failures are logged only.
        """

        record = await self._load(slug)
        download_url = await self._sign(record, self._url_ttl_seconds)

        await self._record_usage(record, user_agent=user_agent, ip_address=ip_address)
        meta = await self._head(record)

        thumbnail_url = None
        if meta.content_type and meta.content_type.startswith("image/"):
            thumbnail_url = download_url

        logger.info(
            "link.described",
            extra={
                "slug_hash": hash_identifier(slug),
                "ip_hash": hash_identifier(ip_address or UNKNOWN),
                "has_meta": meta.size is not None,
            },
        )

        file_name = record.display_file_name
        return SharedFileResponse(
            file_data=SharedFileData(
                key=record.key or "",
                file_name=file_name,
                original_name=record.original_name or file_name,
                created_at=record.created_at,
                expires_at=record.expires_at,
                owner=record.owner or UNKNOWN,
                size=meta.size,
                mime=meta.content_type,
                thumbnail_url=thumbnail_url,
            ),
            download_url=download_url,
        )

    async def public_download(self, slug: str) -> PublicDownloadResponse:
        """Return a longer-lived URL that makes browsers save the file.

        The URL carries a ``response-content-disposition`` override with the
        original upload name.
        """

        record = await self._load(slug)
        file_name = record.original_name or record.display_file_name
        encoded_name = quote(file_name, safe="!*'()")
        disposition = f'attachment; filename="{encoded_name}"'
        url = await self._sign(
            record,
            self._attachment_ttl_seconds,
            response_headers={"response-content-disposition": disposition},
        )
        logger.info(
            "link.public_download",
            extra={"slug_hash": hash_identifier(slug), "ttl_s": self._attachment_ttl_seconds},
        )
        return PublicDownloadResponse(
            presigned_url=url,
            file_name=file_name,
            original_name=record.original_name,
        )

"""Public file endpoints: share-link resolution and the queue activity log.

None of these routes require authentication. For share links, possession of
the slug is the credential. Errors are raised as AppError subclasses and
rendered by the global exception handlers.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse

from fileshare.api.deps import get_activity_log_service, get_link_resolver
from fileshare.core.rate_limit import get_client_ip, rate_limited
from fileshare.schemas.activity import QueueLogRequest, QueueLogResponse
from fileshare.schemas.links import ErrorResponse, PublicDownloadResponse, SharedFileResponse
from fileshare.services.activity_log import ActivityLogService
from fileshare.services.link_resolver import LinkResolver, extract_slug

router = APIRouter(tags=["Files"])

Resolver = Annotated[LinkResolver, Depends(get_link_resolver)]
ActivityLog = Annotated[ActivityLogService, Depends(get_activity_log_service)]

_ERROR_RESPONSES: dict[int | str, dict] = {
    400: {"model": ErrorResponse, "description": "Missing slug or malformed link entry"},
    404: {"model": ErrorResponse, "description": "Unknown slug"},
    410: {"model": ErrorResponse, "description": "Link expired"},
    500: {"model": ErrorResponse, "description": "Record store or storage failure"},
}

_RATE_LIMITED_RESPONSES: dict[int | str, dict] = {
    **_ERROR_RESPONSES,
    429: {"model": ErrorResponse, "description": "Too many requests from this client"},
}

_shared_rate_limit = rate_limited(
    "files-shared-get",
    "shared_rate_limit_requests",
    "shared_rate_limit_window_ms",
)
_public_download_rate_limit = rate_limited(
    "files-public-download",
    "public_download_rate_limit_requests",
    "public_download_rate_limit_window_ms",
)
_queue_log_rate_limit = rate_limited(
    "files-queue-log",
    "queue_log_rate_limit_requests",
    "queue_log_rate_limit_window_ms",
)


def _slug_from_request(request: Request) -> str:
    """``?slug=`` wins over the ``{slug}`` path segment."""

    return extract_slug(
        request.query_params.get("slug"),
        request.path_params.get("slug", ""),
    )


@router.get(
    "/api/files/download",
    response_class=PlainTextResponse,
    responses=_ERROR_RESPONSES,
)
@router.get(
    "/files/{slug}",
    response_class=PlainTextResponse,
    responses=_ERROR_RESPONSES,
)
async def download(request: Request, resolver: Resolver) -> str:
    """Resolve a share link to a presigned URL, returned as plain text.

    Served both as ``/api/files/download?slug=...`` and as the pretty link
    ``/files/{slug}``. The URL is valid for about a minute.
    """

    return await resolver.resolve(_slug_from_request(request))


@router.get(
    "/api/files/shared",
    response_model=SharedFileResponse,
    responses=_RATE_LIMITED_RESPONSES,
    dependencies=[Depends(_shared_rate_limit)],
)
@router.get(
    "/api/files/shared/{slug}",
    response_model=SharedFileResponse,
    responses=_RATE_LIMITED_RESPONSES,
    dependencies=[Depends(_shared_rate_limit)],
)
async def shared_file(request: Request, resolver: Resolver) -> SharedFileResponse:
    """Metadata for the share page: file name, size, MIME and a download URL.

    Every call is recorded in the owner's link usage log.
    """

    return await resolver.describe(
        _slug_from_request(request),
        user_agent=request.headers.get("user-agent"),
        ip_address=get_client_ip(request),
    )


@router.get(
    "/api/files/public-download",
    response_model=PublicDownloadResponse,
    responses=_RATE_LIMITED_RESPONSES,
    dependencies=[Depends(_public_download_rate_limit)],
)
async def public_download(request: Request, resolver: Resolver) -> PublicDownloadResponse:
    """Attachment-style download URL (``Content-Disposition: attachment``)."""

    return await resolver.public_download(request.query_params.get("slug") or "")


@router.post(
    "/api/files/queue-log",
    response_model=QueueLogResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Missing action or taskId"},
        429: {"model": ErrorResponse, "description": "Too many requests from this client"},
        500: {"model": ErrorResponse, "description": "Activity store failure"},
    },
    dependencies=[Depends(_queue_log_rate_limit)],
)
async def queue_log(payload: QueueLogRequest, activity: ActivityLog) -> QueueLogResponse:
    """Record an upload queue event in the activity feed as ``queue_<action>``."""

    await activity.log_queue_action(payload)
    return QueueLogResponse()

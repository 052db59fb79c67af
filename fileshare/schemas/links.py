"""Pydantic schemas for public share-link responses.

Fields are snake_case in Python and camelCase on the wire, matching the
documents written by the share flow.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SharedFileData(_CamelModel):
    """Metadata about the object behind a share link."""

    key: str = Field(..., description="Internal storage key of the shared object.")
    file_name: str = Field(..., description="File name shown to the recipient.")
    original_name: str = Field(..., description="Name of the file as originally uploaded.")
    created_at: datetime | None = Field(None, description="When the link was created.")
    expires_at: datetime | None = Field(None, description="When the link stops working.")
    owner: str = Field("unknown", description="Uid of the user who shared the file.")
    size: int | None = Field(None, description="Object size in bytes, if known.")
    mime: str | None = Field(None, description="Object MIME type, if known.")
    thumbnail_url: str | None = Field(
        None,
        description="Preview URL for images (currently the download URL itself).",
    )


class SharedFileResponse(_CamelModel):
    file_data: SharedFileData
    download_url: str = Field(..., description="Presigned URL valid for about a minute.")


class PublicDownloadResponse(_CamelModel):
    presigned_url: str = Field(
        ...,
        description="Presigned URL forcing an attachment download.",
    )
    file_name: str
    original_name: str | None = None


class ErrorResponse(BaseModel):
    """Error body returned for every handled failure."""

    error: str = Field(..., description="Human-readable error message.")
    code: str = Field(..., description="Stable, machine-readable error code.")
    request_id: str | None = Field(None, description="Correlation id of the request.")
    details: dict[str, Any] | None = Field(None, description="Optional structured context.")

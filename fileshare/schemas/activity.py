"""Pydantic schemas for client-reported activity entries."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class QueueLogRequest(BaseModel):
    """Upload queue event reported by the browser.

    ``action`` and ``taskId`` are checked by the service rather than by
    pydantic so that a missing value answers 400 in the usual error shape.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    action: str | None = Field(None, description="Queue action, e.g. 'started' or 'failed'.")
    task_id: str | None = Field(None, description="Client-side id of the queued task.")
    user_id: str | None = Field(None, description="Uid of the acting user, if known.")
    file_name: str | None = Field(None, description="Name of the file the task handles.")
    additional_data: dict[str, Any] | None = Field(
        None,
        description="Free-form context stored with the entry.",
    )


class QueueLogResponse(BaseModel):
    success: bool = True

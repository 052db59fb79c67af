"""Activity feed writes for events reported by the web client."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable

from fileshare.adapters.links.base import AbstractLinkStore, ActivityEntry
from fileshare.core.errors import InternalAppError, ValidationAppError
from fileshare.core.logging import hash_identifier
from fileshare.schemas.activity import QueueLogRequest

logger = logging.getLogger(__name__)

QUEUE_ACTION_PREFIX = "queue_"
UNKNOWN = "unknown"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ActivityLogService:
    """Appends upload queue events to the activity feed."""

    def __init__(
        self,
        *,
        store: AbstractLinkStore,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._clock = clock

    async def log_queue_action(self, payload: QueueLogRequest) -> ActivityEntry:
        """Store one queue event as ``queue_<action>``.

        Raises:
            ValidationAppError: ``action`` or ``taskId`` is missing or empty.
            InternalAppError: The store rejected the write.
        """

        missing = [
            name
            for name, value in (("action", payload.action), ("taskId", payload.task_id))
            if not value
        ]
        if missing:
            raise ValidationAppError(
                code="missing_parameters",
                message="Missing required parameters",
                details={"missing": missing},
            )

        entry = ActivityEntry(
            user_id=payload.user_id or UNKNOWN,
            action=f"{QUEUE_ACTION_PREFIX}{payload.action}",
            file_name=payload.file_name or UNKNOWN,
            task_id=payload.task_id or "",
            timestamp=self._clock(),
            additional_data=payload.additional_data or {},
        )

        try:
            await self._store.append_activity(entry)
        except Exception as exc:
            logger.error(
                "activity.write_failed",
                extra={"action": entry.action, "error_type": type(exc).__name__},
            )
            raise InternalAppError(code="activity_log_failed", message="Server error") from exc

        logger.info(
            "activity.logged",
            extra={"action": entry.action, "user_hash": hash_identifier(entry.user_id)},
        )
        return entry

"""URL signing interface for the object storage service."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Literal, Mapping

Operation = Literal["get"]


@dataclass(frozen=True)
class ObjectMeta:
    size: int | None
    content_type: str | None


class AbstractUrlSigner(ABC):
    """Issues time-limited URLs granting direct access to stored objects."""

    @abstractmethod
    async def sign(
        self,
        key: str,
        operation: Operation,
        ttl_seconds: int,
        *,
        response_headers: Mapping[str, str] | None = None,
    ) -> str:
        """Presign ``operation`` on the object stored under ``key``.

        Args:
            key: Internal storage key.
            operation: Only "get" is supported.
            ttl_seconds: Validity of the URL from issuance.
            response_headers: Response header overrides baked into the URL
                (e.g. ``response-content-disposition``).

        Returns:
            The signed URL.
        """
        raise NotImplementedError

    @abstractmethod
    async def head(self, key: str) -> ObjectMeta:
        """Return size and MIME type of the object stored under ``key``."""
        raise NotImplementedError

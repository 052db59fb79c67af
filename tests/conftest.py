"""Pytest configuration and fixtures shared across all test modules.

Environment defaults are set before any ``fileshare`` import so the global
settings object is built from them.
"""

import os
from datetime import datetime, timezone
from typing import Any, Mapping

import pytest

os.environ.setdefault("APP_ENV", "testing")
os.environ.setdefault("LINKS_BACKEND", "memory")
os.environ.setdefault("LOG_LEVEL", "WARNING")

from fileshare.adapters.links.in_memory import InMemoryLinkStore  # noqa: E402
from fileshare.adapters.storage.base import AbstractUrlSigner, ObjectMeta  # noqa: E402

NOW = datetime(2025, 3, 1, 12, 0, 0, tzinfo=timezone.utc)


class FakeSigner(AbstractUrlSigner):
    """Deterministic signer recording every call."""

    def __init__(self, meta: ObjectMeta | None = None) -> None:
        self.calls: list[dict[str, Any]] = []
        self.meta = meta or ObjectMeta(size=1024, content_type="application/pdf")
        self.fail_sign: Exception | None = None
        self.fail_head: Exception | None = None

    async def sign(
        self,
        key: str,
        operation: str,
        ttl_seconds: int,
        *,
        response_headers: Mapping[str, str] | None = None,
    ) -> str:
        if self.fail_sign:
            raise self.fail_sign
        self.calls.append(
            {
                "key": key,
                "operation": operation,
                "ttl_seconds": ttl_seconds,
                "response_headers": response_headers,
            }
        )
        return f"https://storage.test/bucket/{key}?ttl={ttl_seconds}"

    async def head(self, key: str) -> ObjectMeta:
        if self.fail_head:
            raise self.fail_head
        return self.meta


@pytest.fixture
def signer() -> FakeSigner:
    return FakeSigner()


@pytest.fixture
def store() -> InMemoryLinkStore:
    return InMemoryLinkStore(
        {
            "abc1": {"key": "main/doc.pdf"},
            "report-x7k2p9q0a": {
                "key": "users/u-1/reports/Q1 report.pdf",
                "fileName": "Q1 report.pdf",
                "originalName": "Q1 report (final).pdf",
                "name": "Quarterly",
                "owner": "u-1",
                "createdAt": datetime(2025, 2, 28, tzinfo=timezone.utc),
                "expiresAt": datetime(2025, 3, 2, tzinfo=timezone.utc),
            },
            "old-link": {
                "key": "main/old.zip",
                "expiresAt": datetime(2025, 3, 1, 11, 59, 59, tzinfo=timezone.utc),
            },
            "broken": {"fileName": "orphan.txt"},
        }
    )

"""S3-compatible URL signer backed by the MinIO client."""

from __future__ import annotations

import asyncio
from datetime import timedelta
from typing import Mapping

from minio import Minio

from fileshare.adapters.storage.base import AbstractUrlSigner, ObjectMeta, Operation

_HTTP_METHOD_BY_OPERATION: dict[str, str] = {"get": "GET"}


class MinioUrlSigner(AbstractUrlSigner):
    """Presigns object URLs in a single bucket.

    The MinIO client is synchronous; calls run in a worker thread so the
    event loop is never blocked by a region lookup or a HEAD request.
    """

    def __init__(self, *, client: Minio, bucket: str) -> None:
        self._client = client
        self._bucket = bucket

    @property
    def bucket(self) -> str:
        return self._bucket

    async def sign(
        self,
        key: str,
        operation: Operation,
        ttl_seconds: int,
        *,
        response_headers: Mapping[str, str] | None = None,
    ) -> str:
        method = _HTTP_METHOD_BY_OPERATION.get(operation)
        if method is None:
            raise ValueError(f"unsupported presign operation: {operation!r}")
        if ttl_seconds < 1:
            raise ValueError("ttl_seconds must be >= 1")

        return await asyncio.to_thread(
            self._client.get_presigned_url,
            method=method,
            bucket_name=self._bucket,
            object_name=key,
            expires=timedelta(seconds=ttl_seconds),
            response_headers=dict(response_headers) if response_headers else None,
        )

    async def head(self, key: str) -> ObjectMeta:
        stat = await asyncio.to_thread(
            self._client.stat_object,
            bucket_name=self._bucket,
            object_name=key,
        )
        return ObjectMeta(size=stat.size, content_type=stat.content_type)

"""Factory for the configured URL signer."""

from urllib.parse import urlparse

from minio import Minio

from fileshare.adapters.storage.base import AbstractUrlSigner
from fileshare.adapters.storage.minio_signer import MinioUrlSigner
from fileshare.core.config import StorageSettings, settings
from fileshare.core.errors import ConfigurationAppError


def create_url_signer(storage_settings: StorageSettings | None = None) -> AbstractUrlSigner:
    """Build a MinioUrlSigner from ``S3_*`` settings.

    Raises:
        ConfigurationAppError: If endpoint, bucket or credentials are missing.
    """
    cfg = storage_settings or settings.storage

    missing = [
        name
        for name in ("endpoint_url", "bucket", "access_key", "secret_key")
        if not getattr(cfg, name)
    ]
    if missing:
        raise ConfigurationAppError(
            code="storage_not_configured",
            message="Object storage is not fully configured",
            details={"hint": "Set " + ", ".join(f"S3_{n.upper()}" for n in missing)},
        )

    parsed = urlparse(str(cfg.endpoint_url))
    secure = cfg.secure if cfg.secure is not None else parsed.scheme == "https"
    client = Minio(
        parsed.netloc or parsed.path,
        access_key=cfg.access_key,
        secret_key=cfg.secret_key,
        secure=secure,
        region=cfg.region,
    )
    return MinioUrlSigner(client=client, bucket=str(cfg.bucket))

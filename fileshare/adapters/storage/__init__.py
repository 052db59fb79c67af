"""Object storage adapters (presigned URLs and object metadata)."""

from fileshare.adapters.storage.base import AbstractUrlSigner, ObjectMeta
from fileshare.adapters.storage.factory import create_url_signer

__all__ = ["AbstractUrlSigner", "ObjectMeta", "create_url_signer"]

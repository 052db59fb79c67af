"""Factory for the configured shared-link store."""

from fileshare.adapters.links.base import AbstractLinkStore
from fileshare.adapters.links.in_memory import InMemoryLinkStore
from fileshare.core.config import settings
from fileshare.core.errors import ConfigurationAppError


def create_link_store() -> AbstractLinkStore:
    """Instantiate the record store selected by ``LINKS_BACKEND``.

    Returns:
        AbstractLinkStore: Configured store instance.

    Raises:
        ConfigurationAppError: If the backend name is unknown.
    """
    backend = settings.links.backend.lower()

    if backend == "firestore":
        # Imported lazily so the memory backend runs without GCP libraries loaded
        from google.cloud import firestore

        from fileshare.adapters.links.firestore_store import FirestoreLinkStore

        return FirestoreLinkStore(
            firestore.AsyncClient(project=settings.links.project_id),
            collection=settings.links.collection,
            usage_collection=settings.links.usage_collection,
            activity_collection=settings.links.activity_collection,
        )

    if backend == "memory":
        return InMemoryLinkStore()

    raise ConfigurationAppError(
        code="links_unknown_backend",
        message=(
            f"Unknown link store backend: '{backend}'. Supported backends: firestore, memory"
        ),
    )

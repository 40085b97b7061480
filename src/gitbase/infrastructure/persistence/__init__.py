"""Collection persistence on top of a remote content client."""

from gitbase.infrastructure.persistence.collection_codec import CollectionCodec
from gitbase.infrastructure.persistence.collection_store import CollectionStore
from gitbase.infrastructure.persistence.store_factory import (
    create_collection_store,
    create_remote_client,
)

__all__ = [
    "CollectionCodec",
    "CollectionStore",
    "create_collection_store",
    "create_remote_client",
]

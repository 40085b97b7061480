"""GitBase - a document store on top of a Git content repository.

Collections of JSON records are persisted as one file each in a remote
repository, with a short-lived read cache, per-collection write queues and
optimistic-concurrency retries.
"""

__version__ = "0.1.0"

from gitbase.application.services.auth_service import AuthService
from gitbase.infrastructure.persistence.collection_store import CollectionStore
from gitbase.infrastructure.persistence.store_factory import create_collection_store

__all__ = ["AuthService", "CollectionStore", "create_collection_store", "__version__"]

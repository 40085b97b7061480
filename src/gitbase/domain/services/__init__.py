"""Domain services for GitBase.

Services contain logic that doesn't naturally fit within a single entity.
They have no dependencies on the remote backend.
"""

from gitbase.domain.services.collection_cache import CacheEntry, CollectionCache
from gitbase.domain.services.id_generator import RecordIdGenerator, generate_id
from gitbase.domain.services.operation_queue import OperationQueue
from gitbase.domain.services.otp_verifier import (
    InMemoryOTPVerifier,
    OTPVerifier,
    PermissiveOTPVerifier,
)
from gitbase.domain.services.retry_policy import RetryPolicy
from gitbase.domain.services.slug_generator import SlugGenerator

__all__ = [
    "CacheEntry",
    "CollectionCache",
    "InMemoryOTPVerifier",
    "OTPVerifier",
    "OperationQueue",
    "PermissiveOTPVerifier",
    "RecordIdGenerator",
    "RetryPolicy",
    "SlugGenerator",
    "generate_id",
]

"""Error taxonomy for GitBase.

Every error raised by the store carries an ``ErrorKind`` so callers can
branch on ``err.kind`` instead of matching message strings.
"""

from enum import Enum


class ErrorKind(str, Enum):
    """Broad category of a GitBase error."""

    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    AUTH = "auth"
    TRANSIENT = "transient"


class GitBaseError(Exception):
    """Base class for all GitBase errors."""

    kind: ErrorKind = ErrorKind.TRANSIENT


class NotFoundError(GitBaseError):
    """Raised when a requested document, record or user does not exist."""

    kind = ErrorKind.NOT_FOUND


class RecordNotFoundError(NotFoundError):
    """Raised when a record id is not present in a collection."""

    def __init__(self, collection: str, record_id: str) -> None:
        self.collection = collection
        self.record_id = record_id
        super().__init__(f"Item with id {record_id} not found in {collection}")


class UserNotFoundError(NotFoundError):
    """Raised when no user record matches an email."""

    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__("User not found")


class ConflictError(GitBaseError):
    """Raised when a write keeps losing the version-token race."""

    kind = ErrorKind.CONFLICT

    def __init__(
        self,
        collection: str,
        attempts: int | None = None,
        message: str | None = None,
    ) -> None:
        self.collection = collection
        self.attempts = attempts
        if message is None:
            message = f"Version conflict writing {collection}"
            if attempts is not None:
                message = f"{message} after {attempts} attempts"
        super().__init__(message)


class AuthError(GitBaseError):
    """Base class for authentication failures."""

    kind = ErrorKind.AUTH


class InvalidCredentialsError(AuthError):
    def __init__(self) -> None:
        super().__init__("Invalid credentials")


class UserAlreadyExistsError(AuthError):
    def __init__(self, email: str) -> None:
        self.email = email
        super().__init__("User already exists")


class InvalidOTPError(AuthError):
    def __init__(self) -> None:
        super().__init__("Invalid or expired one-time password")


class TransientError(GitBaseError):
    """Raised for remote failures that are neither absence nor conflict."""

    kind = ErrorKind.TRANSIENT


class CollectionDecodeError(TransientError):
    """Raised when a collection document is not a JSON list of records."""

    def __init__(self, collection: str, reason: str) -> None:
        self.collection = collection
        super().__init__(f"Collection {collection} could not be decoded: {reason}")

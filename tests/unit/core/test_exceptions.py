"""Unit tests for the error taxonomy."""

import pytest

from gitbase.core.exceptions import (
    AuthError,
    CollectionDecodeError,
    ConflictError,
    ErrorKind,
    GitBaseError,
    InvalidCredentialsError,
    InvalidOTPError,
    NotFoundError,
    RecordNotFoundError,
    TransientError,
    UserAlreadyExistsError,
    UserNotFoundError,
)
from gitbase.infrastructure.remote.base import (
    RemoteConflictError,
    RemoteNotFoundError,
    RemoteTransientError,
)


@pytest.mark.parametrize(
    ("error", "kind"),
    [
        (RecordNotFoundError("widgets", "w1"), ErrorKind.NOT_FOUND),
        (UserNotFoundError("a@example.com"), ErrorKind.NOT_FOUND),
        (RemoteNotFoundError("db/widgets.json"), ErrorKind.NOT_FOUND),
        (ConflictError("widgets", attempts=3), ErrorKind.CONFLICT),
        (RemoteConflictError("db/widgets.json"), ErrorKind.CONFLICT),
        (InvalidCredentialsError(), ErrorKind.AUTH),
        (UserAlreadyExistsError("a@example.com"), ErrorKind.AUTH),
        (InvalidOTPError(), ErrorKind.AUTH),
        (RemoteTransientError("boom", status_code=502), ErrorKind.TRANSIENT),
        (CollectionDecodeError("widgets", "invalid JSON"), ErrorKind.TRANSIENT),
    ],
)
def test_every_error_carries_its_kind(error, kind):
    assert isinstance(error, GitBaseError)
    assert error.kind is kind


def test_remote_errors_are_catchable_as_taxonomy_errors():
    assert issubclass(RemoteNotFoundError, NotFoundError)
    assert issubclass(RemoteConflictError, ConflictError)
    assert issubclass(RemoteTransientError, TransientError)
    assert issubclass(InvalidCredentialsError, AuthError)


def test_record_not_found_message():
    error = RecordNotFoundError("widgets", "missing-id")

    assert str(error) == "Item with id missing-id not found in widgets"
    assert error.collection == "widgets"
    assert error.record_id == "missing-id"


def test_conflict_error_reports_attempts():
    error = ConflictError("widgets", attempts=3)

    assert error.attempts == 3
    assert "after 3 attempts" in str(error)


def test_remote_conflict_keeps_detail():
    error = RemoteConflictError("db/widgets.json", "does not match")

    assert error.path == "db/widgets.json"
    assert "does not match" in str(error)
    assert error.attempts is None

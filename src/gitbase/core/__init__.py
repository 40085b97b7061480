"""Core GitBase utilities.

This module exports core utilities for use throughout the application.
"""

from gitbase.core.config import Settings, get_settings
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
from gitbase.core.logging import LoggingContext, configure_logging, get_logger

__all__ = [
    "AuthError",
    "CollectionDecodeError",
    "ConflictError",
    "ErrorKind",
    "GitBaseError",
    "InvalidCredentialsError",
    "InvalidOTPError",
    "LoggingContext",
    "NotFoundError",
    "RecordNotFoundError",
    "Settings",
    "TransientError",
    "UserAlreadyExistsError",
    "UserNotFoundError",
    "configure_logging",
    "get_logger",
    "get_settings",
]

"""Application services."""

from gitbase.application.services.auth_service import AuthService

__all__ = ["AuthService"]

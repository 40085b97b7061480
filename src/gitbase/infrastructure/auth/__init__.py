"""Credential handling for GitBase."""

from gitbase.infrastructure.auth.password_hasher import CredentialHasher

__all__ = ["CredentialHasher"]

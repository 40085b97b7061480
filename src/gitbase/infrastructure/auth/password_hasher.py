"""Password hashing utility using Argon2.

Provides password hashing and verification using the Argon2id algorithm.
User records written before hashing was introduced hold plaintext
passwords; those still verify (in constant time) and report that they need
a rehash so the caller can upgrade them on the next successful login.
"""

import hmac

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

ARGON2_PREFIX = "$argon2"


class CredentialHasher:
    """Hash and verify user credentials.

    Args:
        hasher: Argon2 hasher to use. Defaults to argon2-cffi's recommended
            parameters; tests pass cheaper ones.
    """

    def __init__(self, hasher: PasswordHasher | None = None) -> None:
        self._hasher = hasher or PasswordHasher()

    @staticmethod
    def is_hashed(stored: str) -> bool:
        return stored.startswith(ARGON2_PREFIX)

    def hash(self, password: str) -> str:
        """Hash a password using Argon2id.

        Example:
            >>> CredentialHasher().hash("SecureP@ss123!").startswith("$argon2id$")
            True
        """
        return self._hasher.hash(password)

    def verify(self, password: str, stored: str) -> bool:
        """Verify a password against a stored hash (or legacy plaintext).

        Args:
            password: The plaintext password to verify.
            stored: The stored credential to verify against.

        Returns:
            True if the password matches, False otherwise.
        """
        if not self.is_hashed(stored):
            return hmac.compare_digest(password.encode("utf-8"), stored.encode("utf-8"))
        try:
            return self._hasher.verify(stored, password)
        except (VerificationError, InvalidHashError):
            return False

    def needs_rehash(self, stored: str) -> bool:
        """Check if a stored credential should be rehashed.

        This should be called after successful password verification.
        """
        if not self.is_hashed(stored):
            return True
        try:
            return self._hasher.check_needs_rehash(stored)
        except InvalidHashError:
            return True

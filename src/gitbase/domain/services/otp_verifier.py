"""One-time password issuing and verification.

Two verifiers are provided. ``PermissiveOTPVerifier`` accepts any code; it
stands in for a real delivery channel and logs a warning every time it is
used. ``InMemoryOTPVerifier`` issues six-digit codes with a TTL and checks
them once.
"""

import hashlib
import hmac
import secrets
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable

from gitbase.core.logging import get_logger

logger = get_logger(__name__)


class OTPVerifier(ABC):
    """Issues and checks one-time passwords per (email, purpose)."""

    @abstractmethod
    def issue(self, email: str, purpose: str) -> str:
        """Create a code for ``email`` and return it for delivery."""
        ...

    @abstractmethod
    def verify(self, email: str, purpose: str, code: str) -> bool:
        """Check a code. A successful check consumes it."""
        ...


class PermissiveOTPVerifier(OTPVerifier):
    """Accepts every code. Not suitable for production use."""

    def issue(self, email: str, purpose: str) -> str:
        logger.warning("OTP delivery is not configured; issuing placeholder code", purpose=purpose)
        return "000000"

    def verify(self, email: str, purpose: str, code: str) -> bool:
        logger.warning("OTP verification is not enforced; accepting code", purpose=purpose)
        return True


@dataclass
class _IssuedCode:
    code_hash: str
    expires_at: float


class InMemoryOTPVerifier(OTPVerifier):
    """Six-digit codes kept in process memory.

    Args:
        ttl_seconds: Lifetime of an issued code (default: 10 minutes).
        clock: Time source, injectable for tests.
    """

    DIGITS = 6

    def __init__(self, ttl_seconds: float = 600, clock: Callable[[], float] = time.monotonic) -> None:
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._codes: dict[tuple[str, str], _IssuedCode] = {}

    @staticmethod
    def _hash(code: str) -> str:
        return hashlib.sha256(code.encode("utf-8")).hexdigest()

    def issue(self, email: str, purpose: str) -> str:
        code = f"{secrets.randbelow(10 ** self.DIGITS):0{self.DIGITS}d}"
        self._codes[(email, purpose)] = _IssuedCode(
            code_hash=self._hash(code),
            expires_at=self._clock() + self.ttl_seconds,
        )
        return code

    def verify(self, email: str, purpose: str, code: str) -> bool:
        issued = self._codes.get((email, purpose))
        if issued is None:
            return False
        if issued.expires_at <= self._clock():
            del self._codes[(email, purpose)]
            return False
        if not hmac.compare_digest(issued.code_hash, self._hash(code)):
            return False
        del self._codes[(email, purpose)]
        return True

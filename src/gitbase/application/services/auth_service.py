"""Service for registration, login and password reset.

User records live in the ``users`` collection of a ``CollectionStore``.
Sessions are kept in process memory and are lost when the process exits.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Awaitable, Callable

from gitbase.core.config import Settings, get_settings
from gitbase.core.exceptions import (
    GitBaseError,
    InvalidCredentialsError,
    InvalidOTPError,
    UserAlreadyExistsError,
    UserNotFoundError,
)
from gitbase.core.logging import get_logger
from gitbase.domain.entities.session import Session
from gitbase.domain.services.id_generator import generate_id
from gitbase.domain.services.otp_verifier import OTPVerifier, PermissiveOTPVerifier
from gitbase.infrastructure.auth.password_hasher import CredentialHasher
from gitbase.infrastructure.persistence.collection_store import CollectionStore

logger = get_logger(__name__)

OTPSender = Callable[[str, str, str], Awaitable[None]]

LOGIN_PURPOSE = "login"
PASSWORD_RESET_PURPOSE = "password_reset"


def public_user(user: dict[str, Any]) -> dict[str, Any]:
    """Copy of a user record without its password."""
    return {key: value for key, value in user.items() if key != "password"}


class AuthService:
    """Service for handling user authentication business logic."""

    def __init__(
        self,
        store: CollectionStore,
        *,
        hasher: CredentialHasher | None = None,
        otp_verifier: OTPVerifier | None = None,
        otp_sender: OTPSender | None = None,
        session_ttl: timedelta = timedelta(hours=24),
        enforce_session_expiry: bool = False,
        users_collection: str = "users",
    ) -> None:
        """Initialize the auth service.

        Args:
            store: Collection store holding the user records.
            hasher: Credential hasher (default: Argon2id).
            otp_verifier: One-time password verifier (default: accepts any code).
            otp_sender: Coroutine delivering ``(email, purpose, code)`` to the
                user. Without one, issued codes are not delivered.
            session_ttl: Lifetime recorded on new sessions.
            enforce_session_expiry: Whether ``get_session`` drops expired
                sessions. Off by default: sessions never expire.
            users_collection: Collection holding the user records.
        """
        self.store = store
        self.hasher = hasher or CredentialHasher()
        self.otp_verifier = otp_verifier or PermissiveOTPVerifier()
        self.otp_sender = otp_sender
        self.session_ttl = session_ttl
        self.enforce_session_expiry = enforce_session_expiry
        self.users_collection = users_collection
        self._sessions: dict[str, Session] = {}

    @classmethod
    def from_settings(cls, store: CollectionStore, settings: Settings | None = None) -> "AuthService":
        """Build the service with session options taken from settings."""
        settings = settings or get_settings()
        return cls(
            store,
            session_ttl=timedelta(hours=settings.session_ttl_hours),
            enforce_session_expiry=settings.enforce_session_expiry,
        )

    async def _find_user(self, email: str) -> dict[str, Any] | None:
        return await self.store.find_one(self.users_collection, {"email": email})

    async def _require_user(self, email: str) -> dict[str, Any]:
        user = await self._find_user(email)
        if user is None:
            raise UserNotFoundError(email)
        return user

    def _start_session(self, user: dict[str, Any], metadata: dict[str, Any] | None) -> str:
        session = Session.start(user, ttl=self.session_ttl, metadata=metadata)
        self._sessions[session.token] = session
        logger.info("Session created", user_id=session.user_id, session_id=session.id)
        return session.token

    async def _deliver_otp(self, email: str, purpose: str, code: str) -> None:
        if self.otp_sender is None:
            logger.warning("No OTP sender configured; code not delivered", purpose=purpose)
            return
        await self.otp_sender(email, purpose, code)

    async def register(
        self,
        email: str,
        password: str,
        profile: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Create a user record with default roles, permissions and plan.

        ``roles``, ``permissions``, ``plan`` and ``subdomain`` in ``profile``
        override the defaults.

        Returns:
            The stored user record, without its password.

        Raises:
            UserAlreadyExistsError: If a user with ``email`` exists.
        """
        profile = profile or {}
        if await self._find_user(email) is not None:
            raise UserAlreadyExistsError(email)

        user = {
            "id": generate_id(),
            "email": email,
            "password": self.hasher.hash(password),
            "verified": True,
            "roles": profile.get("roles", ["user"]),
            "permissions": profile.get("permissions", ["read", "write"]),
            "plan": profile.get("plan", "free"),
            "authMethod": "email",
            "createdAt": datetime.now(timezone.utc).isoformat(),
            "profile": profile,
            "subdomain": profile.get("subdomain", ""),
        }
        stored = await self.store.insert(self.users_collection, user)
        logger.info("User registered", user_id=stored["id"])
        return public_user(stored)

    async def login(
        self,
        email: str,
        password: str,
        metadata: dict[str, Any] | None = None,
    ) -> str:
        """Check credentials and start a session.

        Returns:
            The session token.

        Raises:
            InvalidCredentialsError: If the user is unknown or the password is wrong.
        """
        user = await self._find_user(email)
        stored = (user or {}).get("password") or ""
        if user is None or not stored or not self.hasher.verify(password, stored):
            logger.info("Login failed: invalid credentials")
            raise InvalidCredentialsError()

        if self.hasher.needs_rehash(stored):
            try:
                await self.store.update(
                    self.users_collection, user["id"], {"password": self.hasher.hash(password)}
                )
            except GitBaseError as e:
                logger.warning("Could not upgrade password hash", user_id=user["id"], error=str(e))

        return self._start_session(user, metadata)

    async def request_login_otp(self, email: str) -> None:
        """Issue a login code for ``email`` and hand it to the OTP sender.

        Raises:
            UserNotFoundError: If no user has ``email``.
        """
        await self._require_user(email)
        code = self.otp_verifier.issue(email, LOGIN_PURPOSE)
        await self._deliver_otp(email, LOGIN_PURPOSE, code)

    async def verify_login_otp(
        self,
        email: str,
        otp: str,
        metadata: dict[str, Any] | None = None,
    ) -> str:
        """Start a session after a one-time password check.

        Raises:
            UserNotFoundError: If no user has ``email``.
            InvalidOTPError: If the verifier rejects ``otp``.
        """
        user = await self._require_user(email)
        if not self.otp_verifier.verify(email, LOGIN_PURPOSE, otp):
            raise InvalidOTPError()
        return self._start_session(user, metadata)

    async def request_password_reset(self, email: str) -> None:
        """Issue a password reset code for ``email``.

        Raises:
            UserNotFoundError: If no user has ``email``.
        """
        user = await self._require_user(email)
        code = self.otp_verifier.issue(email, PASSWORD_RESET_PURPOSE)
        logger.info("Password reset requested", user_id=user["id"])
        await self._deliver_otp(email, PASSWORD_RESET_PURPOSE, code)

    async def reset_password(self, email: str, otp: str, new_password: str) -> None:
        """Replace a user's password and end their sessions.

        Raises:
            UserNotFoundError: If no user has ``email``.
            InvalidOTPError: If the verifier rejects ``otp``.
        """
        user = await self._require_user(email)
        if not self.otp_verifier.verify(email, PASSWORD_RESET_PURPOSE, otp):
            raise InvalidOTPError()

        await self.store.update(
            self.users_collection, user["id"], {"password": self.hasher.hash(new_password)}
        )
        revoked = self.destroy_user_sessions(user["id"])
        logger.info("Password reset completed", user_id=user["id"], sessions_revoked=revoked)

    def get_session(self, token: str) -> Session | None:
        """Look up a session by token.

        ``expires_at`` is only checked when ``enforce_session_expiry`` is on.
        """
        session = self._sessions.get(token)
        if session is None:
            return None
        if self.enforce_session_expiry and session.is_expired():
            del self._sessions[token]
            logger.info("Session expired", user_id=session.user_id, session_id=session.id)
            return None
        return session

    def destroy_session(self, token: str) -> None:
        self._sessions.pop(token, None)

    def destroy_user_sessions(self, user_id: str) -> int:
        """Remove every session of a user.

        Returns:
            Number of sessions removed.
        """
        tokens = [token for token, session in self._sessions.items() if session.user_id == user_id]
        for token in tokens:
            del self._sessions[token]
        return len(tokens)

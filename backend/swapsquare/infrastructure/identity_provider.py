"""Local Identity Provider: in-process email/password authentication.

Invariants:
    - Emails are matched case-insensitively; ids are opaque and never reused
    - Passwords are stored only as salted PBKDF2-HMAC-SHA256 digests
    - Every failure raises AuthError with a user-presentable message
    - Listeners fire once per session transition: sign in/up -> UserRef,
      sign out -> None; listener exceptions propagate to the caller

Design Decisions:
    - In-memory account table: stands in for a hosted provider behind the
      IdentityProvider protocol; accounts are lost on restart
    - hmac.compare_digest for digest comparison: constant time
"""

import hashlib
import hmac
import logging
import re
import secrets
from collections.abc import Callable
from dataclasses import dataclass

from swapsquare.core.domain_types import UserId
from swapsquare.core.entities import UserRef
from swapsquare.core.errors import AuthError
from swapsquare.core.repository_protocols import AuthListener

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
_PBKDF2_ITERATIONS = 240_000
MIN_PASSWORD_LENGTH = 6


@dataclass(frozen=True)
class _Account:
    user: UserRef
    salt: bytes
    digest: bytes


def _hash_password(password: str, salt: bytes) -> bytes:
    return hashlib.pbkdf2_hmac(
        "sha256", password.encode("utf-8"), salt, _PBKDF2_ITERATIONS,
    )


class LocalIdentityProvider:
    """Email/password accounts held in process memory."""

    def __init__(self):
        self._accounts: dict[str, _Account] = {}
        self._signed_in: set[str] = set()
        self._listeners: list[AuthListener] = []

    async def register(self, email: str, password: str) -> UserRef:
        """Create an account and sign it in."""
        key = self._normalize_email(email)
        if len(password or "") < MIN_PASSWORD_LENGTH:
            raise AuthError(
                f"Password must be at least {MIN_PASSWORD_LENGTH} characters",
            )
        if key in self._accounts:
            raise AuthError("Email already in use")

        salt = secrets.token_bytes(16)
        user = UserRef(id=UserId(f"u_{secrets.token_hex(12)}"), email=key)
        self._accounts[key] = _Account(user, salt, _hash_password(password, salt))
        logger.info("Account registered", extra={"user_id": user.id})
        await self._sign_in(user)
        return user

    async def authenticate(self, email: str, password: str) -> UserRef:
        """Verify credentials and sign the user in."""
        key = self._normalize_email(email)
        account = self._accounts.get(key)
        if account is None or not hmac.compare_digest(
            account.digest, _hash_password(password or "", account.salt),
        ):
            raise AuthError("Invalid email or password")
        await self._sign_in(account.user)
        return account.user

    async def sign_out(self, user_id: str) -> None:
        if user_id not in self._signed_in:
            return
        self._signed_in.discard(user_id)
        logger.info("Signed out", extra={"user_id": user_id})
        await self._notify(None)

    def on_auth_change(self, callback: AuthListener) -> Callable[[], None]:
        """Register a listener; returns a callable that unregisters it."""
        self._listeners.append(callback)

        def unsubscribe() -> None:
            if callback in self._listeners:
                self._listeners.remove(callback)

        return unsubscribe

    async def _sign_in(self, user: UserRef) -> None:
        self._signed_in.add(user.id)
        logger.info("Signed in", extra={"user_id": user.id})
        await self._notify(user)

    async def _notify(self, user: UserRef | None) -> None:
        for listener in list(self._listeners):
            await listener(user)

    @staticmethod
    def _normalize_email(email: str) -> str:
        key = (email or "").strip().lower()
        if not _EMAIL_RE.match(key):
            raise AuthError("Invalid email address")
        return key

"""Local user registration, login and email verification."""

import logging
import secrets
from dataclasses import replace
from typing import Optional

from ..models import OperationResult, SessionContext, User
from .catalog_store import CatalogStore
from .password_hasher import PasswordHasher, Pbkdf2PasswordHasher

logger = logging.getLogger(__name__)


class AuthError(Exception):
    """Raised (and returned in results) when credentials or codes are rejected."""
    pass


def normalize_email(email: str) -> str:
    return email.strip().lower()


def generate_code() -> str:
    """Four digit verification code."""
    return str(1000 + secrets.randbelow(9000))


class AuthService:
    """Manages local users. Store failures propagate as LocalWriteFailed."""

    def __init__(self, store: CatalogStore, hasher: Optional[PasswordHasher] = None):
        self._store = store
        self._hasher = hasher or Pbkdf2PasswordHasher()

    async def register(self, user: User) -> OperationResult[User]:
        """Store a new user with a hashed password.

        Args:
            user: User to register. `password` holds the plaintext.

        Returns:
            OperationResult with the stored user (id assigned), or a failure
            if the email is already registered.
        """
        email = normalize_email(user.email)
        if await self._store.users.email_exists(email):
            return OperationResult.failure(AuthError(f"Email {email} is already registered"))

        stored = await self._store.users.upsert(
            replace(user, email=email, password=self._hasher.hash(user.password))
        )
        logger.info(f"Registered user {stored.id} ({email})")
        return OperationResult.success(stored)

    async def login(self, email: str, password: str) -> OperationResult[SessionContext]:
        """Check credentials and return the session for the user.

        The email must have been verified.
        """
        email = normalize_email(email)
        user = await self._store.users.get_by_email(email)
        if user is None or not self._hasher.verify(password, user.password):
            logger.info(f"Rejected login for {email}")
            return OperationResult.failure(AuthError("Invalid credentials"))
        if not user.is_email_verified:
            return OperationResult.failure(AuthError(f"Email {email} is not verified"))

        return OperationResult.success(SessionContext(user_id=user.id, email=user.email))

    async def email_exists(self, email: str) -> bool:
        return await self._store.users.email_exists(normalize_email(email))

    async def generate_verification_code(self, email: str) -> OperationResult[str]:
        """Create and store a new verification code for the user.

        Delivering the code to the user is up to the caller.
        """
        email = normalize_email(email)
        code = generate_code()
        if not await self._store.users.set_verification_code(email, code):
            return OperationResult.failure(AuthError(f"No user with email {email}"))
        return OperationResult.success(code)

    async def verify_email(self, email: str) -> OperationResult[bool]:
        email = normalize_email(email)
        if not await self._store.users.mark_email_verified(email):
            return OperationResult.failure(AuthError(f"No user with email {email}"))
        logger.info(f"Email {email} verified")
        return OperationResult.success(True)

    async def verify_reset_code(self, email: str, code: str) -> OperationResult[bool]:
        user = await self._store.users.get_by_email(normalize_email(email))
        if user is None or user.verification_code is None or user.verification_code != code.strip():
            return OperationResult.failure(AuthError("Incorrect code"))
        return OperationResult.success(True)

    async def update_password(self, email: str, new_password: str) -> OperationResult[bool]:
        email = normalize_email(email)
        updated = await self._store.users.update_password(email, self._hasher.hash(new_password))
        if not updated:
            return OperationResult.failure(AuthError(f"No user with email {email}"))
        logger.info(f"Password updated for {email}")
        return OperationResult.success(True)

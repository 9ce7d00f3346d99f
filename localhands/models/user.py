"""User model and roles."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Optional


class UserRole(str, Enum):
    CLIENT = "CLIENT"
    SELLER = "SELLER"


@dataclass
class User:
    """A registered user of the marketplace.

    `password` holds the hash produced by a PasswordHasher, never plaintext.
    `id` is None until the local store assigns one on insert.
    """

    name: str
    last_name: str
    email: str
    password: str
    role: UserRole = UserRole.CLIENT
    phone: str = ""
    address: str = ""
    photo_url: Optional[str] = None
    is_email_verified: bool = False
    verification_code: Optional[str] = None
    id: Optional[int] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def is_seller(self) -> bool:
        return self.role == UserRole.SELLER

"""Seller model.

A seller shares its identifier with the user that owns it. The id is not a
foreign key to some other row: seller N *is* user N acting as a seller.
"""

from dataclasses import dataclass
from typing import Optional

from localhands.models.user import User


@dataclass
class Seller:
    """Seller profile, keyed by the owning user's id."""

    id: int
    name: str
    lastname: str
    email: str
    phone: str
    address: str
    entrepreneurship: str
    photo_url: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @classmethod
    def for_user(cls, user: User, entrepreneurship: str, address: str) -> "Seller":
        """Build the seller profile of an existing user, reusing its id."""
        if user.id is None:
            raise ValueError("Cannot build a seller profile for a user without an id")
        return cls(
            id=user.id,
            name=user.name,
            lastname=user.last_name,
            email=user.email,
            phone=user.phone,
            address=address,
            entrepreneurship=entrepreneurship,
            photo_url=user.photo_url,
        )


@dataclass(frozen=True)
class SellerPatch:
    """Editable subset of a seller, sent on PATCH and PUT."""

    name: str
    lastname: str
    phone: str
    address: str
    entrepreneurship: str
    photo_url: Optional[str] = None

    @classmethod
    def from_seller(cls, seller: Seller) -> "SellerPatch":
        return cls(
            name=seller.name,
            lastname=seller.lastname,
            phone=seller.phone,
            address=seller.address,
            entrepreneurship=seller.entrepreneurship,
            photo_url=seller.photo_url,
        )

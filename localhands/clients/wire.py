"""Wire models for the remote catalog REST API.

Payloads are camelCase JSON objects. Integer fields are parsed leniently:
a number, a numeric string or null are accepted, anything else becomes None.
"""

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, ValidationError, field_serializer, field_validator
from pydantic.alias_generators import to_camel

from localhands.errors import InvalidPayload
from localhands.models import Favorite, Product, Seller, SellerPatch, User, UserRole

logger = logging.getLogger(__name__)


def lenient_int(value: Any) -> Optional[int]:
    """Coerce a JSON value to int, returning None for anything unparseable."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value) if value.is_integer() else None
    if isinstance(value, str):
        try:
            return int(value.strip())
        except ValueError:
            return None
    return None


class WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class ProductWire(WireModel):
    id: Optional[int] = None
    name: str
    description: str = ""
    producer: str = ""
    category: str = ""
    images: List[str]
    price: Decimal
    location: str = ""
    owner_id: Optional[int] = None
    created_at: Optional[int] = None  # Epoch millis

    @field_validator("id", "owner_id", "created_at", mode="before")
    @classmethod
    def _lenient_ints(cls, value):
        return lenient_int(value)

    @field_serializer("price")
    def _price_as_number(self, price: Decimal) -> float:
        return float(price)


class SellerWire(WireModel):
    id: Optional[int] = None
    name: str
    lastname: str
    email: str
    phone: str = ""
    address: str = ""
    entrepreneurship: str
    photo_url: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None

    @field_validator("id", mode="before")
    @classmethod
    def _lenient_id(cls, value):
        return lenient_int(value)


class SellerPatchWire(WireModel):
    name: str
    lastname: str
    phone: str
    address: str
    entrepreneurship: str
    photo_url: Optional[str] = None


class UserWire(WireModel):
    """Public user shape. The password hash never leaves the device."""

    id: Optional[int] = None
    name: str
    last_name: str
    email: str
    phone: str = ""
    address: str = ""
    role: UserRole = UserRole.CLIENT
    photo_url: Optional[str] = None

    @field_validator("id", mode="before")
    @classmethod
    def _lenient_id(cls, value):
        return lenient_int(value)


class FavoriteWire(WireModel):
    user_id: int
    product_id: int

    @field_validator("user_id", "product_id", mode="before")
    @classmethod
    def _lenient_ids(cls, value):
        return lenient_int(value)


def _millis(value: datetime) -> int:
    return int(value.timestamp() * 1000)


def _from_millis(value: Optional[int]) -> datetime:
    if value is None:
        return datetime.now(timezone.utc)
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)


def _validate(model: type, payload: Any):
    try:
        return model.model_validate(payload)
    except ValidationError as e:
        raise InvalidPayload(f"Invalid {model.__name__} payload: {e}", payload) from e


def product_to_wire(product: Product) -> dict:
    return ProductWire(
        id=product.id,
        name=product.name,
        description=product.description,
        producer=product.producer,
        category=product.category,
        images=list(product.images),
        price=product.price,
        location=product.location,
        owner_id=product.owner_id,
        created_at=_millis(product.created_at),
    ).to_json()


def product_from_wire(payload: Any) -> Product:
    wire = _validate(ProductWire, payload)
    if wire.id is None:
        raise InvalidPayload("Product payload has no usable id", payload)
    try:
        return Product(
            id=wire.id,
            name=wire.name,
            description=wire.description,
            producer=wire.producer,
            category=wire.category,
            images=wire.images,
            price=wire.price,
            location=wire.location,
            owner_id=wire.owner_id,
            created_at=_from_millis(wire.created_at),
        )
    except ValueError as e:
        raise InvalidPayload(str(e), payload) from e


def seller_to_wire(seller: Seller) -> dict:
    return SellerWire(
        id=seller.id,
        name=seller.name,
        lastname=seller.lastname,
        email=seller.email,
        phone=seller.phone,
        address=seller.address,
        entrepreneurship=seller.entrepreneurship,
        photo_url=seller.photo_url,
        latitude=seller.latitude,
        longitude=seller.longitude,
    ).to_json()


def seller_from_wire(payload: Any) -> Seller:
    wire = _validate(SellerWire, payload)
    if wire.id is None:
        raise InvalidPayload("Seller payload has no usable id", payload)
    return Seller(
        id=wire.id,
        name=wire.name,
        lastname=wire.lastname,
        email=wire.email,
        phone=wire.phone,
        address=wire.address,
        entrepreneurship=wire.entrepreneurship,
        photo_url=wire.photo_url,
        latitude=wire.latitude,
        longitude=wire.longitude,
    )


def seller_patch_to_wire(patch: SellerPatch) -> dict:
    return SellerPatchWire(
        name=patch.name,
        lastname=patch.lastname,
        phone=patch.phone,
        address=patch.address,
        entrepreneurship=patch.entrepreneurship,
        photo_url=patch.photo_url,
    ).to_json()


def user_to_wire(user: User) -> dict:
    return UserWire(
        id=user.id,
        name=user.name,
        last_name=user.last_name,
        email=user.email,
        phone=user.phone,
        address=user.address,
        role=user.role,
        photo_url=user.photo_url,
    ).to_json()


def user_from_wire(payload: Any) -> User:
    wire = _validate(UserWire, payload)
    # Remote users carry no credentials; the local store keeps its own hash
    return User(
        id=wire.id,
        name=wire.name,
        last_name=wire.last_name,
        email=wire.email,
        password="",
        role=wire.role,
        phone=wire.phone,
        address=wire.address,
        photo_url=wire.photo_url,
    )


def favorite_to_wire(favorite: Favorite) -> dict:
    return FavoriteWire(user_id=favorite.user_id, product_id=favorite.product_id).to_json()


def favorite_from_wire(payload: Any) -> Favorite:
    wire = _validate(FavoriteWire, payload)
    return Favorite(user_id=wire.user_id, product_id=wire.product_id)

"""Product model for the local catalog."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from typing import List, Optional

MIN_IMAGES = 1
MAX_IMAGES = 10


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Product:
    """A product listed by a seller.

    `producer` is the owning seller's entrepreneurship name, copied onto the
    product so listings can be rendered without a join.
    """

    id: int
    name: str
    description: str
    producer: str
    category: str
    images: List[str]
    price: Decimal
    location: str
    owner_id: Optional[int] = None  # None = public product with no seller yet
    created_at: datetime = field(default_factory=_utc_now)

    def __post_init__(self):
        if not MIN_IMAGES <= len(self.images) <= MAX_IMAGES:
            raise ValueError(
                f"Product {self.id} must have between {MIN_IMAGES} and {MAX_IMAGES} images, "
                f"got {len(self.images)}"
            )
        if not isinstance(self.price, Decimal):
            self.price = Decimal(str(self.price))

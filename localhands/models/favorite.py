from dataclasses import dataclass


@dataclass(frozen=True)
class Favorite:
    user_id: int
    product_id: int

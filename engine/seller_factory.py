"""
Seller Factory.
"""

from typing import Any

from sellers.base import Seller
from sellers.fixed import FixedSeller
from sellers.inventory import InventorySeller
from sellers.random_seller import RandomSeller

SELLER_TYPES = ("Random", "Fixed", "Inventory")


def create_seller(
    seller_type: str,
    player_id: int,
    seed: int | None = None,
    **kwargs: Any,
) -> Seller:
    """
    Seller instance

    Args:
        seller_type: One of SELLER_TYPES (case-insensitive)
        player_id: 0-based player index
        seed: Seed for policies with private randomness
        **kwargs: Policy-specific parameters (seats, price, target_seats)

    Raises:
        ValueError: If seller_type is unknown
    """
    key = seller_type.lower()
    if key == "random":
        return RandomSeller(player_id, seed=seed, **kwargs)
    elif key == "fixed":
        return FixedSeller(player_id, **kwargs)
    elif key == "inventory":
        return InventorySeller(player_id, **kwargs)
    raise ValueError(f"Unknown seller type: {seller_type!r} (known: {SELLER_TYPES})")

"""
Fixed seller: same seat order and same price every game.
"""

from typing import Any

from engine.actions import action_for_price, action_for_seats
from engine.state import AirlineSeatsState
from sellers.base import Seller


class FixedSeller(Seller):
    """Buys `seats` once and charges `price` every round."""

    def __init__(self, player_id: int, seats: int = 10, price: int = 60, **kwargs: Any) -> None:
        super().__init__(player_id)
        # Validates against the menus up front
        self.seat_action = action_for_seats(seats)
        self.price_action = action_for_price(price)
        self.seats = seats
        self.price = price

    def choose_seats(self, state: AirlineSeatsState) -> int:
        return self.seat_action

    def choose_price(self, state: AirlineSeatsState) -> int:
        return self.price_action

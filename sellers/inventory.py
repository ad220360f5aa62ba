"""
Inventory-aware seller.

Buys a target inventory up front, then each round compares the seats it has
left per remaining round with the sales it would expect at an even market
split. Plenty of stock => undercut; running dry => price high to slow sales
and avoid late purchases.

Only uses what the seller can observe: its own inventory, the round counter,
and the published demand constants (not the hidden market scale draw).
"""

from typing import Any

from engine.accounting import seats_remaining
from engine.actions import PRICE_MENU, action_for_price, action_for_seats
from engine.demand import BASE_DEMAND, MARKET_SCALE_HIGH, MARKET_SCALE_LOW
from engine.state import AirlineSeatsState
from sellers.base import Seller

# Stock-to-expected-sales ratios at which the seller steps down the price menu
RATIO_THRESHOLDS = (2.0, 1.25, 0.75, 0.25)


class InventorySeller(Seller):
    """Prices by remaining inventory per remaining round."""

    def __init__(self, player_id: int, target_seats: int = 15, **kwargs: Any) -> None:
        super().__init__(player_id)
        self.seat_action = action_for_seats(target_seats)
        self.target_seats = target_seats

    def choose_seats(self, state: AirlineSeatsState) -> int:
        return self.seat_action

    def choose_price(self, state: AirlineSeatsState) -> int:
        rounds_left = state.max_rounds - state.round
        remaining = seats_remaining(state, self.player_id)
        if remaining <= 0:
            return action_for_price(PRICE_MENU[-1])

        ratio = (remaining / rounds_left) / self.expected_sales(state.num_players)
        # Highest stock ratio maps to the cheapest price
        for price, threshold in zip(PRICE_MENU, RATIO_THRESHOLDS):
            if ratio >= threshold:
                return action_for_price(price)
        return action_for_price(PRICE_MENU[-1])

    @staticmethod
    def expected_sales(num_players: int) -> float:
        """Seats per round at an even split, mid-menu price and mid-range market scale."""
        mid_price = PRICE_MENU[len(PRICE_MENU) // 2]
        mid_scale = (MARKET_SCALE_LOW + MARKET_SCALE_HIGH) / 2
        return (BASE_DEMAND + mid_price * mid_scale) / num_players

"""
Random seller.

Picks uniformly from the legal menu at every decision. Serves as the
zero-intelligence baseline for tournaments.
"""

from typing import Any

import numpy as np

from engine.state import AirlineSeatsState
from sellers.base import Seller


class RandomSeller(Seller):
    """Uniform over legal actions, using its own generator."""

    def __init__(self, player_id: int, seed: int | None = None, **kwargs: Any) -> None:
        """
        Args:
            player_id: 0-based player index
            seed: Seed for the policy's private generator
            **kwargs: Ignored extra arguments
        """
        super().__init__(player_id)
        self.rng = np.random.default_rng(seed)

    def choose_seats(self, state: AirlineSeatsState) -> int:
        return self._pick(state)

    def choose_price(self, state: AirlineSeatsState) -> int:
        return self._pick(state)

    def _pick(self, state: AirlineSeatsState) -> int:
        actions = state.legal_actions()
        return int(actions[self.rng.integers(0, len(actions))])

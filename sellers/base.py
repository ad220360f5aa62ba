"""
Abstract base class for airline seller policies.

A seller is asked for a decision twice per game phase type:
1. SEAT_BUYING: how many seats to buy up front (once per game)
2. PRICE_SETTING: which price to charge this round (once per round)

Policies return engine action ids. They never draw from the game's random
stream; any randomness comes from the policy's own generator.
"""

from abc import ABC, abstractmethod

from engine.actions import Phase
from engine.state import AirlineSeatsState


class Seller(ABC):
    """
    Abstract base class for all seller policies.

    Attributes:
        player_id: 0-based seat in the game
        total_return: Cumulative return across games played
        games_played: Number of finished games recorded
    """

    def __init__(self, player_id: int) -> None:
        """
        Initialize a seller.

        Args:
            player_id: 0-based player index

        Raises:
            ValueError: If player_id < 0
        """
        if player_id < 0:
            raise ValueError(f"player_id must be >= 0, got {player_id}")
        self.player_id = player_id
        self.total_return = 0.0
        self.games_played = 0

    def act(self, state: AirlineSeatsState) -> int:
        """
        Choose an action for the current decision node.

        Raises:
            ValueError: If it is not this seller's turn
        """
        if state.current_player() != self.player_id:
            raise ValueError(
                f"Seller {self.player_id} asked to act on player "
                f"{state.current_player()}'s turn"
            )
        if state.phase is Phase.SEAT_BUYING:
            return self.choose_seats(state)
        return self.choose_price(state)

    @abstractmethod
    def choose_seats(self, state: AirlineSeatsState) -> int:
        """Return a SeatBuying action id."""

    @abstractmethod
    def choose_price(self, state: AirlineSeatsState) -> int:
        """Return a PriceSetting action id."""

    def end_game(self, game_return: float) -> None:
        """Record the final return of a finished game."""
        self.total_return += game_return
        self.games_played += 1

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(player_id={self.player_id})"

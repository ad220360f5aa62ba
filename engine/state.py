"""
Game state and phase/turn state machine for the airline seats game.

Per-game protocol:

    InitialConditions (chance: draw c1)
      -> SeatBuying    (each player once, in index order)
      -> PriceSetting  (each player once, in index order)
      -> DemandSimulation (chance: split demand, round += 1)
      -> PriceSetting -> ... -> terminal after max_rounds demand steps

A state only carries value data (history). The random stream belongs to the
game, so cloning never draws and advancing any clone past a chance node
consumes the game's shared stream.
"""

import logging
from typing import TYPE_CHECKING

import numpy as np

from engine import accounting
from engine.actions import (
    CHANCE_ACTION,
    CHANCE_PLAYER,
    PRICE_ACTIONS,
    SEAT_ACTIONS,
    TERMINAL_PLAYER,
    Phase,
    action_to_string,
    price_for_action,
    seats_for_action,
)
from engine.demand import allocate_demand, sample_market_scale
from engine.errors import InvalidActionError

if TYPE_CHECKING:
    from engine.demand import DemandOutcome
    from engine.game import AirlineSeatsGame

logger = logging.getLogger(__name__)


class AirlineSeatsState:
    """
    One point in an airline seats game.

    Attributes:
        game: Owning game (holds config and the shared random stream)
        num_players: Number of sellers
        max_rounds: Demand steps before the game ends
        bought_seats: Seats bought by each player at SeatBuying
        sold: Seats sold per player per completed round
        prices: Price per player per round (may be one longer mid-round)
        c1: Market scale factor (0.0 until InitialConditions is resolved)
        round: Completed DemandSimulation steps
        phase: Current protocol phase
        last_demand: Outcome of the most recent demand step (debugging only)
    """

    def __init__(self, game: "AirlineSeatsGame") -> None:
        self.game = game
        self.num_players = game.num_players()
        self.max_rounds = game.max_rounds()

        self.bought_seats: list[int] = [0] * self.num_players
        self.sold: list[list[int]] = [[] for _ in range(self.num_players)]
        self.prices: list[list[int]] = [[] for _ in range(self.num_players)]
        self.c1 = 0.0
        self.round = 0
        self.phase = Phase.INITIAL_CONDITIONS
        self._current_player = CHANCE_PLAYER
        self._history: list[tuple[int, int]] = []
        self.last_demand: "DemandOutcome | None" = None

    # =========================================================================
    # TURN CURSOR
    # =========================================================================

    def current_player(self) -> int:
        """Acting player, CHANCE_PLAYER at chance nodes, TERMINAL_PLAYER at the end."""
        if self.is_terminal():
            return TERMINAL_PLAYER
        return self._current_player

    def current_phase(self) -> Phase:
        return self.phase

    def is_terminal(self) -> bool:
        return self.round >= self.max_rounds

    def is_chance_node(self) -> bool:
        return not self.is_terminal() and self.phase.is_chance

    def legal_actions(self) -> list[int]:
        """Legal action ids for the current phase (empty once terminal)."""
        if self.is_terminal():
            return []
        if self.phase.is_chance:
            return [CHANCE_ACTION]
        if self.phase is Phase.SEAT_BUYING:
            return list(SEAT_ACTIONS)
        return list(PRICE_ACTIONS)

    def chance_outcomes(self) -> list[tuple[int, float]]:
        """The single deterministic chance outcome, with probability 1."""
        if not self.is_chance_node():
            raise ValueError(f"Not a chance node (phase {self.phase.value})")
        return [(CHANCE_ACTION, 1.0)]

    def action_to_string(self, action: int) -> str:
        return action_to_string(self.phase, action)

    def history(self) -> list[tuple[int, int]]:
        """Applied actions as (player, action) pairs, oldest first."""
        return list(self._history)

    # =========================================================================
    # ACTION APPLICATION
    # =========================================================================

    def apply_action(self, action: int) -> None:
        """
        Validate and apply one action, advancing phase and turn.

        Args:
            action: Action id from legal_actions()

        Raises:
            InvalidActionError: If action is not legal here (state untouched)
            ComputationError: If demand allocation hits a degenerate market
        """
        legal = self.legal_actions()
        # bool is an int subclass and 1.0 == 1, so membership alone is not enough
        is_action_id = isinstance(action, (int, np.integer)) and not isinstance(action, bool)
        if not is_action_id or action not in legal:
            phase_name = "Terminal" if self.is_terminal() else self.phase.value
            raise InvalidActionError(action, legal, phase_name)
        action = int(action)

        player = self._current_player
        if self.phase is Phase.INITIAL_CONDITIONS:
            self._apply_initial_conditions()
        elif self.phase is Phase.SEAT_BUYING:
            self._apply_seat_buying(action)
        elif self.phase is Phase.PRICE_SETTING:
            self._apply_price_setting(action)
        else:
            self._apply_demand_simulation()
        self._history.append((player, action))

    def _apply_initial_conditions(self) -> None:
        self.c1 = sample_market_scale(self.game.random_stream)
        logger.debug(f"Market scale c1={self.c1:.5f}")
        self.phase = Phase.SEAT_BUYING
        self._current_player = 0

    def _apply_seat_buying(self, action: int) -> None:
        self.bought_seats[self._current_player] = seats_for_action(action)
        self._current_player += 1
        if self._current_player >= self.num_players:
            self._current_player = 0
            self.phase = Phase.PRICE_SETTING

    def _apply_price_setting(self, action: int) -> None:
        self.prices[self._current_player].append(price_for_action(action))
        self._current_player += 1
        if self._current_player >= self.num_players:
            self._current_player = CHANCE_PLAYER
            self.phase = Phase.DEMAND_SIMULATION

    def _apply_demand_simulation(self) -> None:
        round_prices = [self.prices[p][-1] for p in range(self.num_players)]
        # Computed before any mutation so a ComputationError leaves the state intact
        outcome = allocate_demand(round_prices, self.c1, self.game.random_stream)

        for p, seats in enumerate(outcome.sold):
            self.sold[p].append(seats)
        self.last_demand = outcome
        self.round += 1
        logger.debug(
            f"Round {self.round}: prices={list(outcome.prices)} "
            f"demand={outcome.total_demand:.2f} sold={list(outcome.sold)}"
        )

        if self.is_terminal():
            self._current_player = TERMINAL_PLAYER
        else:
            self.phase = Phase.PRICE_SETTING
            self._current_player = 0

    # =========================================================================
    # VALUATION
    # =========================================================================

    def returns(self) -> list[float]:
        """Final PnL per player; zeros for any non-terminal state."""
        return accounting.returns(self)

    def rewards(self) -> list[float]:
        """Reward of the most recent transition, per player."""
        return accounting.transition_rewards(self)

    def running_pnl(self, through_round: int | None = None) -> list[float]:
        return accounting.running_pnl(self, through_round)

    # =========================================================================
    # COPY / PERSISTENCE
    # =========================================================================

    def clone(self) -> "AirlineSeatsState":
        """Pure value copy of the history. Never touches the random stream."""
        other = AirlineSeatsState.__new__(AirlineSeatsState)
        other.game = self.game
        other.num_players = self.num_players
        other.max_rounds = self.max_rounds
        other.bought_seats = list(self.bought_seats)
        other.sold = [list(s) for s in self.sold]
        other.prices = [list(p) for p in self.prices]
        other.c1 = self.c1
        other.round = self.round
        other.phase = self.phase
        other._current_player = self._current_player
        other._history = list(self._history)
        other.last_demand = self.last_demand
        return other

    def serialize(self) -> str:
        """Self-describing string including the game's current RNG position."""
        return self.game.serialize_state(self)

    # =========================================================================
    # VIEWS
    # =========================================================================

    def information_state_string(self, player: int) -> str:
        """
        What `player` knows: round, phase, its own inventory and sales, and
        prices that have been revealed (completed rounds plus its own bid).
        """
        self._check_player(player)
        lines = [
            f"Player: {player}",
            f"Round: {self.round}/{self.max_rounds}",
            f"Phase: {'Terminal' if self.is_terminal() else self.phase.value}",
            f"Bought: {self.bought_seats[player]}",
            f"Sold: {self.sold[player]}",
        ]
        for p in range(self.num_players):
            lines.append(f"Prices[{p}]: {self._visible_prices(player, p)}")
        return "\n".join(lines)

    def information_state_tensor(self, player: int) -> np.ndarray:
        """
        Raw (unnormalized) information state vector for `player`.

        Layout: [is_my_turn, own bought seats, round,
                 sold (num_players x max_rounds, own row only),
                 visible prices (num_players x max_rounds)]
        """
        self._check_player(player)
        n, rounds = self.num_players, self.max_rounds
        values = np.zeros(3 + 2 * n * rounds, dtype=np.float32)

        values[0] = 1.0 if self.current_player() == player else 0.0
        values[1] = self.bought_seats[player]
        values[2] = self.round

        sold_block = values[3 : 3 + n * rounds].reshape(n, rounds)
        own_sold = self.sold[player]
        sold_block[player, : len(own_sold)] = own_sold

        price_block = values[3 + n * rounds :].reshape(n, rounds)
        for p in range(n):
            visible = self._visible_prices(player, p)
            price_block[p, : len(visible)] = visible

        return values

    def observation_string(self, player: int) -> str:
        return self.information_state_string(player)

    def observation_tensor(self, player: int) -> np.ndarray:
        return self.information_state_tensor(player)

    def _visible_prices(self, viewer: int, player: int) -> list[int]:
        if viewer == player:
            return list(self.prices[player])
        return list(self.prices[player][: self.round])

    def _check_player(self, player: int) -> None:
        if not 0 <= player < self.num_players:
            raise ValueError(f"player must be in [0, {self.num_players}), got {player}")

    def __str__(self) -> str:
        if self.is_terminal():
            cursor = "Terminal"
        elif self.phase.is_chance:
            cursor = f"{self.phase.value} (chance)"
        else:
            cursor = f"{self.phase.value} (player {self._current_player})"
        lines = [
            f"Round {self.round}/{self.max_rounds} | {cursor} | c1={self.c1:.4f}",
        ]
        for p in range(self.num_players):
            lines.append(
                f"  Player {p}: bought={self.bought_seats[p]} "
                f"remaining={accounting.seats_remaining(self, p)} "
                f"sold={self.sold[p]} prices={self.prices[p]}"
            )
        return "\n".join(lines)

    def __repr__(self) -> str:
        return (
            f"AirlineSeatsState(round={self.round}, phase={self.phase.value}, "
            f"player={self.current_player()})"
        )

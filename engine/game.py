"""
Game instance for the airline seats simulation.

The game owns the configuration and the single RandomStream shared by every
state it creates. States hold only history, so exact replay of a branch needs
the stream position captured alongside it (see capture_branch / serialize).
"""

import logging
from dataclasses import dataclass
from typing import Any, Mapping

from engine.actions import NUM_DISTINCT_ACTIONS
from engine.codec import deserialize_state, serialize_state
from engine.random_stream import RandomStream
from engine.state import AirlineSeatsState

logger = logging.getLogger(__name__)

MIN_PLAYERS = 2
MAX_PLAYERS = 4
MAX_ROUNDS = 10
DEFAULT_PLAYERS = 2

# Nominal utility range advertised to search code (not a hard bound on returns)
MIN_UTILITY = -1000.0
MAX_UTILITY = 5000.0


@dataclass(frozen=True)
class GameConfig:
    """
    Immutable game parameters.

    Attributes:
        num_players: Number of competing sellers (2-4)
        max_rounds: Demand steps per game
        rng_seed: Seed for the shared random stream (None = wall clock)
    """

    num_players: int = DEFAULT_PLAYERS
    max_rounds: int = MAX_ROUNDS
    rng_seed: int | None = None

    def __post_init__(self) -> None:
        if not MIN_PLAYERS <= self.num_players <= MAX_PLAYERS:
            raise ValueError(
                f"num_players must be in [{MIN_PLAYERS}, {MAX_PLAYERS}], "
                f"got {self.num_players}"
            )
        if self.max_rounds < 1:
            raise ValueError(f"max_rounds must be >= 1, got {self.max_rounds}")

    @classmethod
    def from_params(cls, params: Mapping[str, Any]) -> "GameConfig":
        """
        Build a config from a parameter mapping (dict or omegaconf DictConfig).

        Accepts "players"/"num_players", "max_rounds" and "seed"/"rng_seed".
        A negative seed means "use the wall clock".
        """
        num_players = params.get("num_players", params.get("players", DEFAULT_PLAYERS))
        max_rounds = params.get("max_rounds", MAX_ROUNDS)
        seed = params.get("rng_seed", params.get("seed"))
        if seed is not None and int(seed) < 0:
            seed = None
        return cls(
            num_players=int(num_players),
            max_rounds=int(max_rounds),
            rng_seed=None if seed is None else int(seed),
        )


@dataclass(frozen=True)
class BranchPoint:
    """A state snapshot paired with the stream position needed to replay it."""

    state: AirlineSeatsState
    rng_state: str


class AirlineSeatsGame:
    """
    Factory and owner for airline seats states.

    Attributes:
        config: Immutable game parameters
        random_stream: Stream shared by every state of this game
    """

    def __init__(self, config: GameConfig | None = None) -> None:
        self.config = config if config is not None else GameConfig()
        self.random_stream = RandomStream(self.config.rng_seed)
        logger.info(
            f"New airline seats game: {self.config.num_players} players, "
            f"{self.config.max_rounds} rounds, seed {self.random_stream.seed}"
        )

    # =========================================================================
    # STATES
    # =========================================================================

    def new_initial_state(self) -> AirlineSeatsState:
        """Fresh state at InitialConditions, round 0."""
        return AirlineSeatsState(self)

    def serialize_state(self, state: AirlineSeatsState) -> str:
        return serialize_state(state)

    def deserialize_state(self, text: str) -> AirlineSeatsState:
        """
        Rebuild a serialized state and move the shared stream to its position.

        Raises:
            MalformedStateError: If `text` does not match the persisted layout
        """
        return deserialize_state(self, text)

    def capture_branch(self, state: AirlineSeatsState) -> BranchPoint:
        """Snapshot `state` together with the current stream position."""
        return BranchPoint(state=state.clone(), rng_state=self.random_stream.export_state())

    def resume_branch(self, branch: BranchPoint) -> AirlineSeatsState:
        """Rewind the stream to the branch's position and return a fresh clone."""
        self.random_stream.import_state(branch.rng_state)
        return branch.state.clone()

    # =========================================================================
    # RNG CONTROL
    # =========================================================================

    def get_rng_state(self) -> str:
        return self.random_stream.export_state()

    def set_rng_state(self, rng_state: str) -> None:
        self.random_stream.import_state(rng_state)

    # =========================================================================
    # GAME FACTS
    # =========================================================================

    def num_players(self) -> int:
        return self.config.num_players

    def max_rounds(self) -> int:
        return self.config.max_rounds

    def num_distinct_actions(self) -> int:
        return NUM_DISTINCT_ACTIONS

    def max_chance_outcomes(self) -> int:
        return 1

    def max_game_length(self) -> int:
        """Upper bound on actions: c1 draw, seat buying, then (prices + demand) per round."""
        n = self.num_players()
        return 1 + n + self.max_rounds() * (n + 1)

    def max_chance_nodes_in_history(self) -> int:
        return self.max_rounds() + 1

    def min_utility(self) -> float:
        return MIN_UTILITY

    def max_utility(self) -> float:
        return MAX_UTILITY

    def information_state_tensor_shape(self) -> list[int]:
        # turn flag + own bought seats + round + sold + prices
        return [3 + 2 * self.num_players() * self.max_rounds()]

    def observation_tensor_shape(self) -> list[int]:
        return self.information_state_tensor_shape()

    def __repr__(self) -> str:
        return (
            f"AirlineSeatsGame(num_players={self.num_players()}, "
            f"max_rounds={self.max_rounds()}, seed={self.random_stream.seed})"
        )


def new_game(config: GameConfig | Mapping[str, Any] | None = None, **params: Any) -> AirlineSeatsGame:
    """
    Create a game from a GameConfig, a parameter mapping, or keyword parameters.

    Examples:
        new_game(GameConfig(num_players=3, rng_seed=7))
        new_game({"players": 3, "seed": 7})
        new_game(players=3, seed=7)
    """
    if config is None:
        config = GameConfig.from_params(params) if params else GameConfig()
    elif not isinstance(config, GameConfig):
        config = GameConfig.from_params(config)
    return AirlineSeatsGame(config)

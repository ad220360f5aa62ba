from typing import Any, Dict, Optional, Tuple

import gymnasium as gym
import numpy as np
from gymnasium import spaces

from engine.actions import CHANCE_ACTION, MENU_SIZE, PRICE_ACTIONS, SEAT_ACTIONS, Phase
from engine.game import AirlineSeatsGame, GameConfig, MAX_ROUNDS, new_game
from engine.seller_factory import create_seller
from engine.state import AirlineSeatsState
from envs.features import ObservationGenerator
from sellers.base import Seller


class AirlineSeatsEnv(gym.Env):
    """
    Gymnasium environment for the airline seats game.

    Wraps the game engine so a single RL seller plays against policy opponents.
    Chance nodes and opponent turns are resolved inside step(); the agent only
    sees its own decision points.
    """
    metadata = {"render_modes": ["human"], "render_fps": 4}

    def __init__(self, config: Optional[Dict[str, Any]] = None, render_mode: Optional[str] = None):
        super().__init__()
        config = config or {}
        self.config = config
        self.render_mode = render_mode

        # Configuration
        self.num_players = config.get("num_players", 2)
        self.max_rounds = config.get("max_rounds", MAX_ROUNDS)
        self.rl_player = config.get("rl_player", 0)
        if not 0 <= self.rl_player < self.num_players:
            raise ValueError(f"rl_player must be in [0, {self.num_players}), got {self.rl_player}")

        # Opponent Configuration
        self.opponent_type = config.get("opponent_type", "Inventory")
        self.opponent_params = dict(config.get("opponent_params", {}))

        # Action Space: index into the current phase's menu
        # SeatBuying: buy 0/5/10/15/20, PriceSetting: price 50/55/60/65/70
        self.action_space = spaces.Discrete(MENU_SIZE)

        self.obs_gen = ObservationGenerator(self.num_players, self.max_rounds)
        self.observation_space = spaces.Box(
            low=0, high=1, shape=(self.obs_gen.feature_dim,), dtype=np.float32
        )

        # Internal State
        self.game: Optional[AirlineSeatsGame] = None
        self.state: Optional[AirlineSeatsState] = None
        self.opponents: Dict[int, Seller] = {}

    def reset(self, seed: Optional[int] = None, options: Optional[Dict] = None) -> Tuple[np.ndarray, Dict]:
        super().reset(seed=seed)

        self.game = new_game(
            GameConfig(
                num_players=self.num_players,
                max_rounds=self.max_rounds,
                rng_seed=int(self.np_random.integers(0, 2**31 - 1)),
            )
        )
        self.opponents = {
            pid: create_seller(
                self.opponent_type,
                pid,
                seed=int(self.np_random.integers(0, 100000)),
                **self.opponent_params,
            )
            for pid in range(self.num_players)
            if pid != self.rl_player
        }

        self.state = self.game.new_initial_state()
        self._advance_to_agent()

        return self._observation(), self._info()

    def step(self, action: int) -> Tuple[np.ndarray, float, bool, bool, Dict]:
        if self.state is None:
            raise RuntimeError("Call reset() before step()")
        if self.state.is_terminal():
            raise RuntimeError("Episode is over; call reset()")

        engine_action = self._map_action(int(action))
        self.state.apply_action(engine_action)
        reward = self.state.rewards()[self.rl_player]
        reward += self._advance_to_agent()

        terminated = self.state.is_terminal()
        truncated = False

        return self._observation(), float(reward), terminated, truncated, self._info()

    def action_masks(self) -> np.ndarray:
        """
        Return boolean mask of valid actions.
        Every menu entry is legal at each of the agent's decision points.
        """
        mask = np.ones(MENU_SIZE, dtype=bool)
        if self.state is not None and self.state.is_terminal():
            mask[:] = False
        return mask

    def render(self) -> None:
        if self.render_mode == "human" and self.state is not None:
            print(self.state)

    def _map_action(self, action: int) -> int:
        """Map a menu index to the engine action id for the current phase."""
        if not 0 <= action < MENU_SIZE:
            raise ValueError(f"action must be in [0, {MENU_SIZE}), got {action}")
        if self.state.phase is Phase.SEAT_BUYING:
            return SEAT_ACTIONS[action]
        return PRICE_ACTIONS[action]

    def _advance_to_agent(self) -> float:
        """Resolve chance nodes and opponent turns; return the agent's accumulated reward."""
        reward = 0.0
        while not self.state.is_terminal() and self.state.current_player() != self.rl_player:
            if self.state.is_chance_node():
                self.state.apply_action(CHANCE_ACTION)
            else:
                opponent = self.opponents[self.state.current_player()]
                self.state.apply_action(opponent.act(self.state))
            reward += self.state.rewards()[self.rl_player]
        return reward

    def _observation(self) -> np.ndarray:
        return self.obs_gen.generate(self.state, self.rl_player)

    def _info(self) -> Dict[str, Any]:
        info: Dict[str, Any] = {
            "round": self.state.round,
            "phase": "Terminal" if self.state.is_terminal() else self.state.phase.value,
        }
        if self.state.is_terminal():
            info["returns"] = self.state.returns()
        return info

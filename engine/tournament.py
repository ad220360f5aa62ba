"""
Tournament Engine.

Plays many airline seats games between configured seller policies.
"""

import logging
from pathlib import Path
from typing import Sequence

import numpy as np
import pandas as pd
from omegaconf import DictConfig, OmegaConf

from engine.accounting import late_seats
from engine.actions import CHANCE_ACTION, Phase
from engine.event_logger import EventLogger
from engine.game import GameConfig, new_game
from engine.seller_factory import create_seller
from engine.state import AirlineSeatsState
from sellers.base import Seller

logger = logging.getLogger(__name__)


def play_game(
    state: AirlineSeatsState,
    sellers: Sequence[Seller],
    event_logger: EventLogger | None = None,
    game_index: int = 0,
) -> AirlineSeatsState:
    """
    Drive `state` to the end, resolving chance nodes and asking sellers to act.

    Args:
        state: Starting state (advanced in place)
        sellers: One seller per player, indexed by player id
        event_logger: Optional JSONL event sink
        game_index: Game number used in logged events

    Returns:
        The terminal state
    """
    if len(sellers) != state.num_players:
        raise ValueError(
            f"sellers list length ({len(sellers)}) must equal "
            f"num_players ({state.num_players})"
        )

    step = len(state.history())
    while not state.is_terminal():
        player = state.current_player()
        phase = state.phase
        if state.is_chance_node():
            action = CHANCE_ACTION
        else:
            action = sellers[player].act(state)
        label = state.action_to_string(action)
        state.apply_action(action)

        if event_logger is not None:
            event_logger.log_transition(
                game=game_index,
                step=step,
                round=state.round,
                phase=phase.value,
                player=player,
                action=action,
                label=label,
            )
            if phase is Phase.DEMAND_SIMULATION and state.last_demand is not None:
                event_logger.log_round_end(
                    game=game_index,
                    round=state.round,
                    prices=list(state.last_demand.prices),
                    sold=list(state.last_demand.sold),
                    total_demand=state.last_demand.total_demand,
                    running_pnl=state.running_pnl(),
                )
        step += 1

    if event_logger is not None:
        event_logger.log_game_end(game_index, state.bought_seats, state.returns())
    return state


class Tournament:
    """
    Manages the execution of a tournament.
    """

    def __init__(self, config: DictConfig):
        self.config = config
        self.logger = logging.getLogger(__name__)
        self.results: list[dict] = []

        # Event logger for per-transition JSONL output (optional)
        self.event_logger: EventLogger | None = None
        if config.get("log_events", False):
            log_dir = Path(config.get("log_dir", "logs"))
            exp_id = config.get("experiment_id", config.experiment.get("name", "exp"))
            event_log_path = log_dir / f"{exp_id}_events.jsonl"
            self.event_logger = EventLogger(event_log_path)
            self.logger.info(f"Event logging enabled: {event_log_path}")

    def run(self) -> pd.DataFrame:
        """Run the tournament and return one row per player per game."""
        seller_types = list(self.config.sellers.types)
        seller_params = self.config.sellers.get("params", None) or {}
        base_seed = self.config.game.get("rng_seed", None)
        if base_seed is None or base_seed < 0:
            # One entropy draw per tournament; per-game seeds are base_seed + g
            base_seed = int(np.random.SeedSequence().entropy % 2**31)
            self.logger.info(f"Tournament base seed from entropy: {base_seed}")
        seller_seed = self.config.experiment.get("seller_seed", 0)
        num_games = self.config.experiment.num_games

        # Create Sellers
        sellers: list[Seller] = []
        for player_id, seller_type in enumerate(seller_types):
            params = seller_params.get(seller_type, None) or {}
            if isinstance(params, DictConfig):
                params = OmegaConf.to_container(params, resolve=True)
            sellers.append(
                create_seller(seller_type, player_id, seed=seller_seed + player_id, **params)
            )
        self.logger.info(f"Initialized {len(sellers)} sellers: {seller_types}")

        for g in range(1, num_games + 1):
            game = new_game(
                GameConfig(
                    num_players=len(sellers),
                    max_rounds=self.config.game.get("max_rounds", 10),
                    rng_seed=base_seed + g,
                )
            )
            state = play_game(game.new_initial_state(), sellers, self.event_logger, g)
            game_returns = state.returns()

            for seller, seller_type in zip(sellers, seller_types):
                pid = seller.player_id
                seller.end_game(game_returns[pid])
                self.results.append({
                    "game": g,
                    "player": pid,
                    "seller_type": seller_type,
                    "bought_seats": state.bought_seats[pid],
                    "total_sold": sum(state.sold[pid]),
                    "mean_price": sum(state.prices[pid]) / len(state.prices[pid]),
                    "late_seats": late_seats(state, pid),
                    "return": game_returns[pid],
                })

            self.logger.info(f"Game {g}: returns {[round(r, 1) for r in game_returns]}")

        # Close event logger if enabled
        if self.event_logger is not None:
            self.event_logger.close()
            self.logger.info("Event log saved")

        return pd.DataFrame(self.results)


def summarize(results: pd.DataFrame) -> pd.DataFrame:
    """Mean outcome per seller type."""
    return (
        results.groupby("seller_type")
        .agg(
            games=("game", "nunique"),
            mean_return=("return", "mean"),
            std_return=("return", "std"),
            mean_sold=("total_sold", "mean"),
            mean_late_seats=("late_seats", "mean"),
        )
        .sort_values("mean_return", ascending=False)
    )

# tests/conftest.py
"""Minimal shared fixtures for test suite."""

import pytest

from engine.actions import CHANCE_ACTION, action_for_price, action_for_seats
from engine.game import GameConfig, new_game


@pytest.fixture
def seed():
    """Fixed seed for reproducibility."""
    return 2139


@pytest.fixture
def game(seed):
    """Two-player game with a fixed seed."""
    return new_game(GameConfig(num_players=2, rng_seed=seed))


@pytest.fixture
def state(game):
    """Fresh initial state of the two-player game."""
    return game.new_initial_state()


@pytest.fixture
def advance():
    """Helper that drives a state through setup and whole rounds."""
    return _advance


def _advance(state, seats, prices_per_round):
    """
    Drive a state through InitialConditions, SeatBuying and whole rounds.

    Args:
        state: State at InitialConditions
        seats: Seats each player buys
        prices_per_round: One list of per-player prices for each round to play
    """
    state.apply_action(CHANCE_ACTION)
    for s in seats:
        state.apply_action(action_for_seats(s))
    for round_prices in prices_per_round:
        for price in round_prices:
            state.apply_action(action_for_price(price))
        state.apply_action(CHANCE_ACTION)
    return state

"""
engine - Airline Seats Game Engine

This package contains the deterministic, seeded simulation of competing
airline seat sellers: seat buying, price setting and randomized demand.

Modules:
    game: GameConfig, AirlineSeatsGame and new_game()
    state: The phase/turn state machine (AirlineSeatsState)
    demand: Price-sensitive demand allocation
    accounting: Running and final profit-and-loss
    codec: State serialization including the RNG position
    random_stream: Seeded, exportable random source
"""

from engine.errors import (
    AirlineSeatsError,
    ComputationError,
    InvalidActionError,
    MalformedStateError,
)
from engine.game import AirlineSeatsGame, BranchPoint, GameConfig, new_game
from engine.state import AirlineSeatsState

__version__ = "1.0.0"

__all__ = [
    "AirlineSeatsError",
    "AirlineSeatsGame",
    "AirlineSeatsState",
    "BranchPoint",
    "ComputationError",
    "GameConfig",
    "InvalidActionError",
    "MalformedStateError",
    "new_game",
]

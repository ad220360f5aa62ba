"""
Demand allocation for the airline seats market.

Each round, every seller's price is turned into a market power
(price ** PRICE_ELASTICITY). Total demand shrinks as the power-weighted
average price rises, and is split across sellers by share of power with a
small symmetric noise term per seller.

RandomStream consumption is part of the contract: the powers are computed
first (no randomness), then exactly one uniform draw is taken per player in
index order. Identical seeds reproduce identical sales only if this order is
preserved.
"""

import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from engine.errors import ComputationError
from engine.random_stream import RandomStream, uniform_draws

# Price elasticity exponent. Negative: higher price => lower market power.
PRICE_ELASTICITY = -50
# Noise amplitude in percent (noise lies in [-R/200, R/200)).
NOISE_AMPLITUDE = 20
# Demand intercept for a whole market.
BASE_DEMAND = 36.0
# c1 = low + u * (high - low); both ends negative so demand falls with price.
MARKET_SCALE_LOW = -0.24
MARKET_SCALE_HIGH = -0.293


@dataclass(frozen=True)
class DemandOutcome:
    """Result of one DemandSimulation step."""

    prices: tuple[int, ...]
    powers: tuple[float, ...]
    noise: tuple[float, ...]
    shares: tuple[float, ...]
    total_demand: float
    sold: tuple[int, ...]


def round_half_away_from_zero(value: float) -> int:
    """Round to the nearest integer, ties away from zero."""
    if value >= 0:
        return int(math.floor(value + 0.5))
    return -int(math.floor(-value + 0.5))


def sample_market_scale(stream: RandomStream) -> float:
    """Draw the per-game market scale factor c1 (exactly one draw)."""
    u = stream.next_uniform()
    return MARKET_SCALE_LOW + u * (MARKET_SCALE_HIGH - MARKET_SCALE_LOW)


def market_powers(prices: Sequence[int]) -> np.ndarray:
    """Price-elasticity weights, one per seller."""
    return np.asarray(prices, dtype=np.float64) ** PRICE_ELASTICITY


def allocate_demand(
    prices: Sequence[int],
    c1: float,
    stream: RandomStream,
) -> DemandOutcome:
    """
    Split one round of market demand across sellers.

    Args:
        prices: Current-round price of each player, in player order
        c1: Market scale factor drawn at InitialConditions
        stream: The game's shared random stream

    Returns:
        DemandOutcome with per-player seats sold (not clamped; may in
        principle be negative)

    Raises:
        ComputationError: If total market power is zero or not finite.
            No random draw is consumed in that case.
    """
    if len(prices) == 0:
        raise ComputationError("Demand allocation needs at least one price")

    powers = market_powers(prices)
    power_sum = float(np.sum(powers))
    if power_sum == 0.0 or not math.isfinite(power_sum):
        raise ComputationError(
            f"Total market power is {power_sum} for prices {list(prices)}"
        )

    draws = uniform_draws(stream, len(prices))
    noise = (draws - 0.5) * NOISE_AMPLITUDE / 100.0

    total_demand = BASE_DEMAND + power_sum ** (1.0 / PRICE_ELASTICITY) * c1
    shares = powers / power_sum
    adjusted = (1.0 + noise) * shares

    sold = tuple(round_half_away_from_zero(float(total_demand * s)) for s in adjusted)

    return DemandOutcome(
        prices=tuple(int(p) for p in prices),
        powers=tuple(float(p) for p in powers),
        noise=tuple(float(n) for n in noise),
        shares=tuple(float(s) for s in shares),
        total_demand=float(total_demand),
        sold=sold,
    )

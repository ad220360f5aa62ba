"""
Profit-and-loss accounting for airline seat sellers.

Sellers pay INITIAL_PURCHASE_PRICE per seat up front. Every round they earn
sold * price regardless of inventory (sales beyond inventory are backorders).
Once inventory runs out, each extra seat sold must be bought at the higher
LATE_PURCHASE_PRICE.
"""

from typing import TYPE_CHECKING, Sequence

from engine.actions import Phase

if TYPE_CHECKING:
    from engine.state import AirlineSeatsState

INITIAL_PURCHASE_PRICE = 50
LATE_PURCHASE_PRICE = 80


def player_pnl(
    bought_seats: int,
    sold: Sequence[int],
    prices: Sequence[int],
    through_round: int,
) -> float:
    """
    Accumulate one player's PnL over rounds [0, through_round).

    Args:
        bought_seats: Seats purchased at SeatBuying
        sold: Seats sold per round
        prices: Price set per round
        through_round: Number of completed rounds to include

    Returns:
        Profit and loss including the upfront inventory cost
    """
    pnl = -float(bought_seats * INITIAL_PURCHASE_PRICE)
    seats_remaining = bought_seats

    for r in range(through_round):
        pnl += sold[r] * prices[r]
        if seats_remaining > 0:
            seats_remaining -= sold[r]
            if seats_remaining < 0:
                pnl -= -seats_remaining * LATE_PURCHASE_PRICE
        else:
            pnl -= sold[r] * LATE_PURCHASE_PRICE

    return pnl


def running_pnl(state: "AirlineSeatsState", through_round: int | None = None) -> list[float]:
    """
    PnL of every player through a completed round.

    Args:
        state: Game state to value
        through_round: Rounds to include (default: all completed rounds)

    Raises:
        ValueError: If through_round is outside [0, state.round]
    """
    if through_round is None:
        through_round = state.round
    if not 0 <= through_round <= state.round:
        raise ValueError(
            f"through_round must be in [0, {state.round}], got {through_round}"
        )

    return [
        player_pnl(state.bought_seats[p], state.sold[p], state.prices[p], through_round)
        for p in range(state.num_players)
    ]


def returns(state: "AirlineSeatsState") -> list[float]:
    """Final PnL per player; all zeros unless the state is terminal."""
    if not state.is_terminal():
        return [0.0] * state.num_players
    return running_pnl(state, state.max_rounds)


def transition_rewards(state: "AirlineSeatsState") -> list[float]:
    """
    Reward of the transition that produced `state`.

    Rewards are running-PnL deltas, so they sum to returns() over a full game:
    - after a DemandSimulation step every player gets this round's PnL change
    - after a SeatBuying action the buyer is charged for its inventory
    - every other transition is worth zero
    """
    n = state.num_players
    rewards = [0.0] * n

    completed_demand_step = state.round > 0 and (
        state.is_terminal()
        or (state.phase is Phase.PRICE_SETTING and state.current_player() == 0)
    )
    if completed_demand_step:
        after = running_pnl(state, state.round)
        before = running_pnl(state, state.round - 1)
        return [a - b for a, b in zip(after, before)]

    buyer = None
    if state.phase is Phase.SEAT_BUYING and state.current_player() > 0:
        buyer = state.current_player() - 1
    elif state.phase is Phase.PRICE_SETTING and state.round == 0 and state.current_player() == 0:
        buyer = n - 1
    if buyer is not None:
        rewards[buyer] = -float(state.bought_seats[buyer] * INITIAL_PURCHASE_PRICE)

    return rewards


def seats_remaining(state: "AirlineSeatsState", player: int) -> int:
    """Bought seats minus seats sold so far (negative once oversold)."""
    return state.bought_seats[player] - sum(state.sold[player])


def late_seats(state: "AirlineSeatsState", player: int) -> int:
    """Seats that had to be bought at the late purchase price so far."""
    return max(0, -seats_remaining(state, player))

"""
State serialization for the airline seats game.

A serialized state is seven newline-separated fields, in this order:

    1. RNG position (single-line JSON from RandomStream.export_state)
    2. round
    3. c1 (repr of the float, round-trips exactly)
    4. phase/actor marker, e.g. "PriceSetting 1" or "DemandSimulation -1"
    5. bought seats, comma-separated, one per player
    6. seats sold, flattened round-major (round 0 players 0..N-1, round 1 ...)
    7. prices, flattened round-major (a partial current round is allowed)

The layout is persisted, so separators and numeric formats must not change.
"""

import logging
import math
import re
from typing import TYPE_CHECKING

from engine.actions import (
    CHANCE_PLAYER,
    PRICE_MENU,
    SEAT_MENU,
    TERMINAL_PLAYER,
    Phase,
)
from engine.errors import MalformedStateError
from engine.state import AirlineSeatsState

if TYPE_CHECKING:
    from engine.game import AirlineSeatsGame

logger = logging.getLogger(__name__)

FIELD_SEPARATOR = "\n"
LIST_SEPARATOR = ","
NUM_FIELDS = 7
TERMINAL_MARKER = "Terminal"
INTEGER_PATTERN = re.compile(r"-?[0-9]+")


def serialize_state(state: AirlineSeatsState) -> str:
    """Encode `state` plus the owning game's current RNG position."""
    n = state.num_players
    if state.is_terminal():
        marker = f"{TERMINAL_MARKER} {TERMINAL_PLAYER}"
    else:
        marker = f"{state.phase.value} {state.current_player()}"

    fields = [
        state.game.random_stream.export_state(),
        str(state.round),
        repr(float(state.c1)),
        marker,
        _join(state.bought_seats),
        _join(_flatten_round_major(state.sold, n)),
        _join(_flatten_round_major(state.prices, n)),
    ]
    return FIELD_SEPARATOR.join(fields)


def deserialize_state(game: "AirlineSeatsGame", text: str) -> AirlineSeatsState:
    """
    Rebuild a state produced by serialize_state() and restore the RNG position.

    The game's stream is only touched after every other field has been
    validated, so a failed call changes nothing.

    Raises:
        MalformedStateError: On any deviation from the field grammar
    """
    fields = text.split(FIELD_SEPARATOR)
    if len(fields) != NUM_FIELDS:
        raise MalformedStateError(f"Expected {NUM_FIELDS} fields, got {len(fields)}")

    rng_blob, round_field, c1_field, marker_field, bought_field, sold_field, price_field = fields
    n = game.num_players()
    max_rounds = game.max_rounds()

    current_round = _parse_int(round_field, "round")
    if not 0 <= current_round <= max_rounds:
        raise MalformedStateError(f"round {current_round} outside [0, {max_rounds}]")

    try:
        c1 = float(c1_field)
    except ValueError as err:
        raise MalformedStateError(f"Unparsable c1: {c1_field!r}") from err
    if not math.isfinite(c1):
        raise MalformedStateError(f"c1 must be finite, got {c1_field!r}")

    phase, actor = _parse_marker(marker_field, n)

    bought = _parse_int_list(bought_field, "bought seats")
    if len(bought) != n:
        raise MalformedStateError(f"Expected {n} bought-seat entries, got {len(bought)}")
    for seats in bought:
        if seats not in SEAT_MENU:
            raise MalformedStateError(f"Bought seats {seats} not in {SEAT_MENU}")

    sold_flat = _parse_int_list(sold_field, "sold")
    prices_flat = _parse_int_list(price_field, "prices")
    for price in prices_flat:
        if price not in PRICE_MENU:
            raise MalformedStateError(f"Price {price} not in {PRICE_MENU}")

    terminal = phase is None
    if terminal != (current_round >= max_rounds):
        raise MalformedStateError(
            f"Terminal marker inconsistent with round {current_round}/{max_rounds}"
        )
    if len(sold_flat) != current_round * n:
        raise MalformedStateError(
            f"Expected {current_round * n} sold entries for round {current_round}, "
            f"got {len(sold_flat)}"
        )
    expected_prices = _expected_price_count(phase, actor, current_round, n)
    if len(prices_flat) != expected_prices:
        raise MalformedStateError(
            f"Expected {expected_prices} price entries, got {len(prices_flat)}"
        )
    _check_pre_purchase(phase, actor, c1, bought)

    state = AirlineSeatsState(game)
    state.round = current_round
    state.c1 = c1
    state.bought_seats = bought
    state.sold = _unflatten_round_major(sold_flat, n)
    state.prices = _unflatten_round_major(prices_flat, n)
    if terminal:
        state.phase = Phase.DEMAND_SIMULATION
        state._current_player = TERMINAL_PLAYER
    else:
        state.phase = phase
        state._current_player = actor

    game.random_stream.import_state(rng_blob)
    logger.debug(f"Deserialized state at round {current_round}")
    return state


# =============================================================================
# Field helpers
# =============================================================================


def _join(values: list[int]) -> str:
    return LIST_SEPARATOR.join(str(v) for v in values)


def _flatten_round_major(per_player: list[list[int]], n: int) -> list[int]:
    flat: list[int] = []
    longest = max((len(values) for values in per_player), default=0)
    for r in range(longest):
        for p in range(n):
            if r < len(per_player[p]):
                flat.append(per_player[p][r])
    return flat


def _unflatten_round_major(flat: list[int], n: int) -> list[list[int]]:
    per_player: list[list[int]] = [[] for _ in range(n)]
    for idx, value in enumerate(flat):
        per_player[idx % n].append(value)
    return per_player


def _parse_int(text: str, name: str) -> int:
    # int() alone would also take "+5", " 5" and "1_0"
    if INTEGER_PATTERN.fullmatch(text) is None:
        raise MalformedStateError(f"Unparsable {name}: {text!r}")
    return int(text)


def _parse_int_list(text: str, name: str) -> list[int]:
    if text == "":
        return []
    return [_parse_int(item, name) for item in text.split(LIST_SEPARATOR)]


def _parse_marker(text: str, n: int) -> tuple[Phase | None, int]:
    """Returns (phase, actor); phase is None for the terminal marker."""
    parts = text.split(" ")
    if len(parts) != 2:
        raise MalformedStateError(f"Phase marker must be '<phase> <actor>', got {text!r}")
    name, actor_text = parts
    actor = _parse_int(actor_text, "actor")

    if name == TERMINAL_MARKER:
        if actor != TERMINAL_PLAYER:
            raise MalformedStateError(f"Terminal marker needs actor {TERMINAL_PLAYER}")
        return None, actor

    try:
        phase = Phase(name)
    except ValueError as err:
        raise MalformedStateError(f"Unknown phase marker: {name!r}") from err

    if phase.is_chance:
        if actor != CHANCE_PLAYER:
            raise MalformedStateError(f"{phase.value} needs actor {CHANCE_PLAYER}, got {actor}")
    elif not 0 <= actor < n:
        raise MalformedStateError(f"Actor {actor} out of range for {n} players")
    return phase, actor


def _expected_price_count(phase: Phase | None, actor: int, current_round: int, n: int) -> int:
    if phase is None:
        return current_round * n
    if phase in (Phase.INITIAL_CONDITIONS, Phase.SEAT_BUYING):
        if current_round != 0:
            raise MalformedStateError(f"{phase.value} only occurs in round 0")
        return 0
    if phase is Phase.PRICE_SETTING:
        return current_round * n + actor
    return (current_round + 1) * n


def _check_pre_purchase(phase: Phase | None, actor: int, c1: float, bought: list[int]) -> None:
    """Nothing is drawn or bought before the game reaches it."""
    if phase is Phase.INITIAL_CONDITIONS:
        if c1 != 0.0:
            raise MalformedStateError(f"c1 must be 0.0 before InitialConditions, got {c1!r}")
        pending = range(len(bought))
    elif phase is Phase.SEAT_BUYING:
        pending = range(actor, len(bought))
    else:
        return
    for p in pending:
        if bought[p] != 0:
            raise MalformedStateError(
                f"Player {p} has not bought yet but bought seats is {bought[p]}"
            )

"""
Phases, action ids and player sentinels for the airline seats game.

Action ids are stable across versions (persisted histories reference them):

    0..4  Buy 0, 5, 10, 15, 20 seats     (SeatBuying)
    5..9  Set price 50, 55, 60, 65, 70    (PriceSetting)
    0     Single chance outcome           (InitialConditions, DemandSimulation)
"""

from enum import Enum

# Player sentinels. Real players are 0-based indices.
CHANCE_PLAYER = -1
TERMINAL_PLAYER = -4

CHANCE_ACTION = 0

SEAT_STEP = 5
PRICE_BASE = 50
PRICE_STEP = 5
MENU_SIZE = 5

SEAT_ACTIONS: list[int] = list(range(0, MENU_SIZE))
PRICE_ACTIONS: list[int] = list(range(MENU_SIZE, 2 * MENU_SIZE))
NUM_DISTINCT_ACTIONS = 2 * MENU_SIZE

SEAT_MENU: list[int] = [a * SEAT_STEP for a in SEAT_ACTIONS]
PRICE_MENU: list[int] = [PRICE_BASE + (a - MENU_SIZE) * PRICE_STEP for a in PRICE_ACTIONS]


class Phase(Enum):
    """Stage of the per-round protocol. Values are the persisted markers."""

    INITIAL_CONDITIONS = "InitialConditions"
    SEAT_BUYING = "SeatBuying"
    PRICE_SETTING = "PriceSetting"
    DEMAND_SIMULATION = "DemandSimulation"

    @property
    def is_chance(self) -> bool:
        return self in (Phase.INITIAL_CONDITIONS, Phase.DEMAND_SIMULATION)


def seats_for_action(action: int) -> int:
    """Number of seats bought by a SeatBuying action."""
    if action not in SEAT_ACTIONS:
        raise ValueError(f"Not a seat-buying action: {action}")
    return action * SEAT_STEP


def price_for_action(action: int) -> int:
    """Price set by a PriceSetting action."""
    if action not in PRICE_ACTIONS:
        raise ValueError(f"Not a price-setting action: {action}")
    return PRICE_BASE + (action - MENU_SIZE) * PRICE_STEP


def action_for_seats(seats: int) -> int:
    """Inverse of seats_for_action()."""
    if seats not in SEAT_MENU:
        raise ValueError(f"No action buys {seats} seats (menu: {SEAT_MENU})")
    return SEAT_MENU.index(seats)


def action_for_price(price: int) -> int:
    """Inverse of price_for_action()."""
    if price not in PRICE_MENU:
        raise ValueError(f"No action sets price {price} (menu: {PRICE_MENU})")
    return PRICE_ACTIONS[PRICE_MENU.index(price)]


def action_to_string(phase: Phase, action: int) -> str:
    """Human-readable label for an action taken in `phase`."""
    if phase is Phase.INITIAL_CONDITIONS:
        return "InitialConditions"
    if phase is Phase.DEMAND_SIMULATION:
        return "DemandSimulation"
    if phase is Phase.SEAT_BUYING:
        return f"Buy:{seats_for_action(action)}"
    return f"SetPrice:{price_for_action(action)}"

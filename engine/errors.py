"""
Error taxonomy for the airline seats engine.

Every failure the engine can signal derives from AirlineSeatsError so callers
(search procedures, tournaments, environment wrappers) can choose their own
recovery policy. Nothing in the engine retries or substitutes defaults.
"""


class AirlineSeatsError(Exception):
    """Base class for all engine errors."""


class InvalidActionError(AirlineSeatsError):
    """
    Action is not in the legal set for the current phase.

    Always a caller bug. The state is left exactly as it was.
    """

    def __init__(self, action: int, legal_actions: list[int], phase_name: str) -> None:
        self.action = action
        self.legal_actions = list(legal_actions)
        self.phase_name = phase_name
        super().__init__(
            f"Action {action} is not valid in phase {phase_name} "
            f"(legal actions: {self.legal_actions})"
        )


class ComputationError(AirlineSeatsError):
    """Degenerate numeric condition during demand allocation (e.g. zero market power)."""


class MalformedStateError(AirlineSeatsError):
    """Serialized state does not match the expected field grammar."""

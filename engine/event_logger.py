"""
Event Logger for airline seats games.

Logs every transition, every completed round and every game result to JSONL
for post-hoc analysis of pricing behavior and market dynamics.
"""

import json
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import TextIO


@dataclass
class TransitionEvent:
    """A single applied action."""

    game: int
    step: int
    round: int
    phase: str
    player: int  # -1 for chance
    action: int
    label: str


@dataclass
class RoundEndEvent:
    """Demand outcome of one completed round."""

    game: int
    round: int
    prices: list[int]
    sold: list[int]
    total_demand: float
    running_pnl: list[float]


@dataclass
class GameEndEvent:
    """Final valuation of a finished game."""

    game: int
    bought_seats: list[int]
    returns: list[float]


class EventLogger:
    """
    Logs game events to JSONL format.

    Usage:
        logger = EventLogger(Path("logs/exp_1_events.jsonl"))
        logger.log_transition(game=1, step=0, round=0, phase="InitialConditions",
                              player=-1, action=0, label="InitialConditions")
        logger.close()
    """

    def __init__(self, output_path: Path):
        """
        Initialize the event logger.

        Args:
            output_path: Path to write JSONL file
        """
        self.output_path = output_path
        self.output_path.parent.mkdir(parents=True, exist_ok=True)
        self._file: TextIO | None = None
        self._open()

    def _open(self) -> None:
        """Open the output file for writing."""
        self._file = open(self.output_path, "w")

    def log_transition(
        self,
        game: int,
        step: int,
        round: int,
        phase: str,
        player: int,
        action: int,
        label: str,
    ) -> None:
        """Log one applied action."""
        event = TransitionEvent(
            game=game,
            step=step,
            round=round,
            phase=phase,
            player=player,
            action=action,
            label=label,
        )
        self._write_event(event)

    def log_round_end(
        self,
        game: int,
        round: int,
        prices: list[int],
        sold: list[int],
        total_demand: float,
        running_pnl: list[float],
    ) -> None:
        """Log the demand outcome of a completed round."""
        event = RoundEndEvent(
            game=game,
            round=round,
            prices=list(prices),
            sold=list(sold),
            total_demand=total_demand,
            running_pnl=list(running_pnl),
        )
        self._write_event(event)

    def log_game_end(self, game: int, bought_seats: list[int], returns: list[float]) -> None:
        """Log the final returns of a game."""
        event = GameEndEvent(game=game, bought_seats=list(bought_seats), returns=list(returns))
        self._write_event(event)

    def _write_event(self, event: TransitionEvent | RoundEndEvent | GameEndEvent) -> None:
        """Write an event to the JSONL file."""
        if self._file is None:
            return

        data = asdict(event)
        if isinstance(event, TransitionEvent):
            data["event_type"] = "transition"
        elif isinstance(event, RoundEndEvent):
            data["event_type"] = "round_end"
        else:
            data["event_type"] = "game_end"
        self._file.write(json.dumps(data) + "\n")

    def flush(self) -> None:
        """Flush the output buffer."""
        if self._file:
            self._file.flush()

    def close(self) -> None:
        """Close the output file."""
        if self._file:
            self._file.close()
            self._file = None

    def __enter__(self) -> "EventLogger":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


def load_events(log_path: Path) -> list[dict[str, object]]:
    """
    Load events from a JSONL file.

    Args:
        log_path: Path to the JSONL file

    Returns:
        List of event dictionaries
    """
    events = []
    with open(log_path) as f:
        for line in f:
            if line.strip():
                events.append(json.loads(line))
    return events

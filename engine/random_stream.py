"""
Seeded, position-addressable random source for the airline seats game.

One RandomStream belongs to one game instance. States never own a stream;
they borrow the game's stream whenever a chance node is resolved. The full
generator position can be exported as an opaque string and imported later,
which is what makes serialized states replay bit-for-bit.
"""

import json
import logging
import time

import numpy as np
from numpy.random import Generator, default_rng

from engine.errors import MalformedStateError

logger = logging.getLogger(__name__)


class RandomStream:
    """
    Uniform [0, 1) draws backed by a numpy PCG64 generator.

    Attributes:
        seed: Effective seed. A wall-clock seed is resolved to an int here
              so the run can be reproduced from the log.
    """

    def __init__(self, seed: int | None = None) -> None:
        """
        Create the stream.

        Args:
            seed: Integer seed, or None to seed from the wall clock
        """
        if seed is None:
            seed = int(time.time())
            logger.info(f"RandomStream seeded from wall clock: {seed}")
        self.seed = seed
        self._rng: Generator = default_rng(seed)

    def next_uniform(self) -> float:
        """Draw the next value in [0, 1) and advance the stream."""
        return float(self._rng.random())

    def export_state(self) -> str:
        """
        Export the exact generator position.

        Returns:
            Single-line JSON string of the numpy bit generator state
        """
        return json.dumps(self._rng.bit_generator.state, sort_keys=True)

    def import_state(self, blob: str) -> None:
        """
        Restore a position previously produced by export_state().

        Args:
            blob: Exported generator state

        Raises:
            MalformedStateError: If the blob is not a valid generator state
        """
        try:
            state = json.loads(blob)
        except json.JSONDecodeError as err:
            raise MalformedStateError(f"RNG state is not valid JSON: {err}") from err

        if not isinstance(state, dict):
            raise MalformedStateError("RNG state must be a JSON object")

        bit_generator = self._rng.bit_generator
        expected = type(bit_generator).__name__
        if state.get("bit_generator") != expected:
            raise MalformedStateError(
                f"RNG state is for {state.get('bit_generator')!r}, expected {expected!r}"
            )

        try:
            bit_generator.state = state
        except (KeyError, TypeError, ValueError) as err:
            raise MalformedStateError(f"Invalid RNG state: {err}") from err

    def clone(self) -> "RandomStream":
        """Independent stream at the same position (for parallel branch exploration)."""
        other = RandomStream(self.seed)
        other.import_state(self.export_state())
        return other

    def __repr__(self) -> str:
        return f"RandomStream(seed={self.seed})"


def uniform_draws(stream: RandomStream, count: int) -> np.ndarray:
    """Take `count` sequential draws from the stream, in order."""
    return np.array([stream.next_uniform() for _ in range(count)], dtype=np.float64)

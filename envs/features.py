import numpy as np

from engine.actions import PRICE_MENU, SEAT_MENU
from engine.state import AirlineSeatsState


class ObservationGenerator:
    """
    Generates normalized observation vectors for RL sellers.

    Features (Normalized 0-1), built from the engine's information state:
    1. Private State:
       - my_turn: 1 if the observed player is to act
       - bought_seats: initial inventory (norm by largest seat order)
       - round_progress: round / max_rounds

    2. Sales History (own row only, others stay 0):
       - sold[p, r]: seats sold (norm by max_sold, clipped)

    3. Price History (revealed prices):
       - price[p, r]: price set (norm by highest menu price)
    """

    def __init__(self, num_players: int, max_rounds: int, max_sold: float = 40.0):
        self.num_players = num_players
        self.max_rounds = max_rounds
        self.max_sold = max_sold

        # Private (3) + sold (N x R) + prices (N x R)
        self.feature_dim = 3 + 2 * num_players * max_rounds

    def generate(self, state: AirlineSeatsState, player: int) -> np.ndarray:
        """
        Generate observation vector for a specific player.

        Args:
            state: Current game state
            player: Observing player (0-based)

        Returns:
            np.ndarray: Normalized feature vector (shape=(feature_dim,), dtype=float32)
        """
        raw = state.information_state_tensor(player)
        obs = np.zeros(self.feature_dim, dtype=np.float32)
        block = self.num_players * self.max_rounds

        obs[0] = raw[0]
        obs[1] = raw[1] / max(SEAT_MENU)
        obs[2] = raw[2] / self.max_rounds
        obs[3 : 3 + block] = raw[3 : 3 + block] / self.max_sold
        obs[3 + block :] = raw[3 + block :] / max(PRICE_MENU)

        return np.clip(obs, 0.0, 1.0).astype(np.float32)

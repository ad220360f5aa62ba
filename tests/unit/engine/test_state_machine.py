# tests/unit/engine/test_state_machine.py
"""
Adversarial tests for the airline seats phase/turn state machine.

These tests verify:
1. Strict phase order and turn rotation
2. Legal action menus per phase
3. Illegal actions are rejected without mutating the state
4. Round accounting and terminal conditions
5. Clones never touch the shared random stream
"""

import numpy as np
import pytest

from engine.actions import (
    CHANCE_ACTION,
    CHANCE_PLAYER,
    PRICE_ACTIONS,
    SEAT_ACTIONS,
    TERMINAL_PLAYER,
    Phase,
    action_for_price,
    action_for_seats,
)
from engine.errors import InvalidActionError
from engine.game import GameConfig, new_game


def play_full_game(game, seats, price):
    """Play every round at a constant price for all players."""
    state = game.new_initial_state()
    state.apply_action(CHANCE_ACTION)
    for s in seats:
        state.apply_action(action_for_seats(s))
    while not state.is_terminal():
        if state.is_chance_node():
            state.apply_action(CHANCE_ACTION)
        else:
            state.apply_action(action_for_price(price))
    return state


# =============================================================================
# Test: Initial State
# =============================================================================


class TestInitialState:
    """Tests for a freshly created state."""

    def test_starts_at_initial_conditions(self, state):
        assert state.phase is Phase.INITIAL_CONDITIONS
        assert state.current_player() == CHANCE_PLAYER
        assert state.is_chance_node()
        assert state.round == 0
        assert state.c1 == 0.0

    def test_records_empty(self, state):
        assert state.bought_seats == [0, 0]
        assert state.sold == [[], []]
        assert state.prices == [[], []]
        assert state.history() == []

    def test_single_chance_action(self, state):
        assert state.legal_actions() == [CHANCE_ACTION]
        assert state.chance_outcomes() == [(CHANCE_ACTION, 1.0)]

    def test_returns_zero(self, state):
        assert state.returns() == [0.0, 0.0]


# =============================================================================
# Test: Phase Transitions
# =============================================================================


class TestPhaseTransitions:
    """Tests for the strict InitialConditions -> SeatBuying -> PriceSetting cycle."""

    def test_initial_conditions_draws_c1(self, state):
        state.apply_action(CHANCE_ACTION)
        assert state.phase is Phase.SEAT_BUYING
        assert state.current_player() == 0
        assert -0.293 <= state.c1 <= -0.24

    def test_seat_buying_menu(self, state):
        state.apply_action(CHANCE_ACTION)
        assert state.legal_actions() == SEAT_ACTIONS

    def test_seat_buying_visits_players_in_order(self):
        game = new_game(GameConfig(num_players=4, rng_seed=3))
        state = game.new_initial_state()
        state.apply_action(CHANCE_ACTION)

        visited = []
        while state.phase is Phase.SEAT_BUYING:
            visited.append(state.current_player())
            state.apply_action(action_for_seats(5 * len(visited)))

        assert visited == [0, 1, 2, 3]
        assert state.bought_seats == [5, 10, 15, 20]
        assert state.phase is Phase.PRICE_SETTING
        assert state.current_player() == 0

    def test_price_setting_visits_players_in_order(self):
        game = new_game(GameConfig(num_players=3, rng_seed=3))
        state = game.new_initial_state()
        state.apply_action(CHANCE_ACTION)
        for _ in range(3):
            state.apply_action(action_for_seats(10))

        assert state.legal_actions() == PRICE_ACTIONS
        visited = []
        while state.phase is Phase.PRICE_SETTING:
            visited.append(state.current_player())
            state.apply_action(action_for_price(60))

        assert visited == [0, 1, 2]
        assert state.phase is Phase.DEMAND_SIMULATION
        assert state.current_player() == CHANCE_PLAYER
        assert state.legal_actions() == [CHANCE_ACTION]

    def test_demand_simulation_returns_to_price_setting(self, state, advance):
        advance(state, [10, 15], [[60, 60]])
        assert state.round == 1
        assert state.phase is Phase.PRICE_SETTING
        assert state.current_player() == 0

    def test_seat_buying_happens_once(self, state, advance):
        """Later rounds never revisit SeatBuying."""
        advance(state, [10, 15], [[60, 60], [55, 65], [70, 50]])
        assert state.phase is Phase.PRICE_SETTING
        assert state.bought_seats == [10, 15]
        seat_actions = [a for _, a in state.history()[1:3]]
        assert seat_actions == [action_for_seats(10), action_for_seats(15)]
        later = [a for _, a in state.history()[3:]]
        assert not any(a in SEAT_ACTIONS and a != CHANCE_ACTION for a in later)
        assert len(state.history()) == 1 + 2 + 3 * 3

    def test_history_records_players(self, state, advance):
        advance(state, [10, 15], [[60, 65]])
        assert state.history() == [
            (CHANCE_PLAYER, CHANCE_ACTION),
            (0, action_for_seats(10)),
            (1, action_for_seats(15)),
            (0, action_for_price(60)),
            (1, action_for_price(65)),
            (CHANCE_PLAYER, CHANCE_ACTION),
        ]


# =============================================================================
# Test: Invalid Actions
# =============================================================================


class TestInvalidActions:
    """Illegal actions must raise and leave the state untouched."""

    def test_price_id_99_rejected(self, state, advance):
        advance(state, [10, 15], [[60, 60]])
        before = [list(p) for p in state.prices]

        with pytest.raises(InvalidActionError) as exc_info:
            state.apply_action(99)

        assert state.prices == before
        assert state.phase is Phase.PRICE_SETTING
        assert state.current_player() == 0
        assert exc_info.value.action == 99

    def test_seat_action_rejected_during_price_setting(self, state, advance):
        advance(state, [10, 15], [])
        with pytest.raises(InvalidActionError):
            state.apply_action(action_for_seats(5))
        assert state.prices == [[], []]

    def test_price_action_rejected_during_seat_buying(self, state):
        state.apply_action(CHANCE_ACTION)
        with pytest.raises(InvalidActionError):
            state.apply_action(action_for_price(60))
        assert state.current_player() == 0
        assert state.bought_seats == [0, 0]

    def test_player_action_rejected_at_chance_node(self, state):
        with pytest.raises(InvalidActionError):
            state.apply_action(3)
        assert state.phase is Phase.INITIAL_CONDITIONS
        assert state.history() == []

    @pytest.mark.parametrize("action", [True, False, 1.0, "1", None])
    def test_non_integer_action_rejected(self, state, action):
        """Only integer ids are actions, even when they compare equal to one."""
        state.apply_action(CHANCE_ACTION)
        with pytest.raises(InvalidActionError):
            state.apply_action(action)
        assert state.bought_seats == [0, 0]
        assert state.current_player() == 0
        assert len(state.history()) == 1

    def test_numpy_integer_action_accepted(self, state):
        state.apply_action(np.int64(CHANCE_ACTION))
        state.apply_action(np.int64(action_for_seats(15)))
        assert state.bought_seats == [15, 0]
        assert all(type(a) is int for _, a in state.history())

    def test_rejection_consumes_no_randomness(self, game, state):
        blob = game.get_rng_state()
        with pytest.raises(InvalidActionError):
            state.apply_action(42)
        assert game.get_rng_state() == blob

    def test_terminal_rejects_everything(self):
        game = new_game(GameConfig(num_players=2, max_rounds=1, rng_seed=5))
        state = play_full_game(game, [10, 10], 60)
        assert state.legal_actions() == []
        with pytest.raises(InvalidActionError):
            state.apply_action(CHANCE_ACTION)


# =============================================================================
# Test: Rounds and Termination
# =============================================================================


class TestRoundsAndTermination:
    """Tests for round accounting and the terminal condition."""

    def test_two_player_scenario_seed_2139(self, state, advance):
        """Seats {10, 15}, prices {60, 60}: one demand step, no returns yet."""
        advance(state, [10, 15], [[60, 60]])

        assert len(state.sold[0]) == 1
        assert len(state.sold[1]) == 1
        assert state.returns() == [0.0, 0.0]
        assert not state.is_terminal()

        advance_round = [action_for_price(60), action_for_price(60), CHANCE_ACTION]
        for action in advance_round:
            state.apply_action(action)
        assert len(state.sold[0]) == 2
        assert state.returns() == [0.0, 0.0]

    def test_prices_and_sold_lengths_match_round(self, state, advance):
        advance(state, [10, 15], [[60, 60], [50, 70]])
        for p in range(2):
            assert len(state.prices[p]) == len(state.sold[p]) == state.round == 2

    def test_terminal_after_max_rounds(self, game):
        state = play_full_game(game, [10, 15], 60)
        assert state.is_terminal()
        assert state.round == game.max_rounds() == 10
        assert state.current_player() == TERMINAL_PLAYER
        assert not state.is_chance_node()
        assert all(len(s) == 10 for s in state.sold)
        assert all(len(p) == 10 for p in state.prices)

    def test_not_terminal_one_step_before_end(self):
        game = new_game(GameConfig(num_players=2, max_rounds=3, rng_seed=5))
        state = game.new_initial_state()
        state.apply_action(CHANCE_ACTION)
        state.apply_action(action_for_seats(10))
        state.apply_action(action_for_seats(10))
        for _ in range(2):
            state.apply_action(action_for_price(60))
            state.apply_action(action_for_price(60))
            state.apply_action(CHANCE_ACTION)
        state.apply_action(action_for_price(60))
        state.apply_action(action_for_price(60))
        assert not state.is_terminal()
        assert state.returns() == [0.0, 0.0]

        state.apply_action(CHANCE_ACTION)
        assert state.is_terminal()

    def test_game_length_matches_bound(self, game):
        state = play_full_game(game, [10, 15], 60)
        assert len(state.history()) == game.max_game_length()

    def test_rewards_sum_to_returns(self):
        """Summed per-transition rewards equal the terminal returns."""
        game = new_game(GameConfig(num_players=3, rng_seed=17))
        state = game.new_initial_state()
        totals = [0.0, 0.0, 0.0]
        prices = [50, 60, 70]
        while not state.is_terminal():
            if state.is_chance_node():
                state.apply_action(CHANCE_ACTION)
            elif state.phase is Phase.SEAT_BUYING:
                state.apply_action(action_for_seats(5 * (state.current_player() + 1)))
            else:
                state.apply_action(action_for_price(prices[state.current_player()]))
            totals = [t + r for t, r in zip(totals, state.rewards())]

        for total, ret in zip(totals, state.returns()):
            assert total == pytest.approx(ret)

    def test_determinism_same_seed(self):
        """Fixed seed + fixed actions => bit-identical returns."""
        results = []
        for _ in range(2):
            game = new_game(GameConfig(num_players=2, rng_seed=2139))
            results.append(play_full_game(game, [10, 15], 60).returns())
        assert results[0] == results[1]


# =============================================================================
# Test: Cloning
# =============================================================================


class TestClone:
    """Clones are pure value copies; the stream is shared."""

    def test_clone_copies_history(self, state, advance):
        advance(state, [10, 15], [[60, 65]])
        copy = state.clone()
        assert copy.sold == state.sold
        assert copy.prices == state.prices
        assert copy.bought_seats == state.bought_seats
        assert copy.c1 == state.c1
        assert copy.round == state.round
        assert copy.phase is state.phase
        assert copy.current_player() == state.current_player()

    def test_clone_is_independent(self, state, advance):
        advance(state, [10, 15], [])
        copy = state.clone()
        copy.apply_action(action_for_price(70))
        assert state.prices == [[], []]
        assert copy.prices == [[70], []]

    def test_clone_does_not_draw(self, game, state, advance):
        advance(state, [10, 15], [[60, 60]])
        blob = game.get_rng_state()
        state.clone()
        assert game.get_rng_state() == blob

    def test_clones_share_stream(self, game, state, advance):
        """Two clones at the same chance node get different (sequential) draws."""
        advance(state, [10, 15], [])
        state.apply_action(action_for_price(60))
        state.apply_action(action_for_price(60))
        a = state.clone()
        b = state.clone()
        a.apply_action(CHANCE_ACTION)
        b.apply_action(CHANCE_ACTION)
        assert a.last_demand.noise != b.last_demand.noise


# =============================================================================
# Test: Views
# =============================================================================


class TestViews:
    """Debug dump and information state."""

    def test_str_contains_records(self, state, advance):
        advance(state, [10, 15], [[60, 65]])
        text = str(state)
        assert "Round 1/10" in text
        assert "Player 0: bought=10" in text
        assert "prices=[65]" in text

    def test_action_to_string(self, state):
        assert state.action_to_string(CHANCE_ACTION) == "InitialConditions"
        state.apply_action(CHANCE_ACTION)
        assert state.action_to_string(action_for_seats(20)) == "Buy:20"
        state.apply_action(action_for_seats(20))
        state.apply_action(action_for_seats(20))
        assert state.action_to_string(action_for_price(55)) == "SetPrice:55"

    def test_chance_outcomes_only_at_chance_nodes(self, state):
        state.apply_action(CHANCE_ACTION)
        with pytest.raises(ValueError):
            state.chance_outcomes()

    def test_information_state_hides_opponent_current_price(self, state, advance):
        advance(state, [10, 15], [[60, 65]])
        state.apply_action(action_for_price(50))  # player 0, round 2

        own = state.information_state_string(0)
        other = state.information_state_string(1)
        assert "Prices[0]: [60, 50]" in own
        assert "Prices[0]: [60]" in other
        assert "Bought: 15" in other

    def test_information_state_tensor_layout(self, game, state, advance):
        advance(state, [10, 15], [[60, 65]])
        tensor = state.information_state_tensor(0)

        assert tensor.shape == tuple(game.information_state_tensor_shape())
        assert tensor[0] == 1.0  # player 0 to act
        assert tensor[1] == 10
        assert tensor[2] == 1
        rounds = game.max_rounds()
        sold_block = tensor[3 : 3 + 2 * rounds].reshape(2, rounds)
        assert sold_block[0, 0] == state.sold[0][0]
        assert sold_block[1].sum() == 0  # opponent sales hidden
        price_block = tensor[3 + 2 * rounds :].reshape(2, rounds)
        assert list(price_block[:, 0]) == [60, 65]

    def test_information_state_rejects_bad_player(self, state):
        with pytest.raises(ValueError):
            state.information_state_tensor(2)

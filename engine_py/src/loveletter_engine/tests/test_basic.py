"""
Basic tests for the Love Letter round engine.
"""

import copy

import pytest

from loveletter_engine.constants import (
    DECK_COMPOSITION, DECK_SIZE, ERROR_GAME_OVER, ERROR_INVALID_PLAYERS,
    ERROR_NOT_YOUR_TURN, ERROR_OWNERSHIP, ERROR_PLAYER_ELIMINATED,
    ERROR_PLAYER_NOT_FOUND, ERROR_WRONG_PHASE, PHASE_DRAW, PHASE_PLAY,
    PHASE_ROUND_END
)
from loveletter_engine.engine import (
    draw_card, initialize_game, play_card, start_new_round
)
from loveletter_engine.errors import GameError
from loveletter_engine.shuffle import (
    CANONICAL_DECK, build_deck, shuffle_deck, validate_deck_integrity
)


def _strip_log(state):
    clone = copy.deepcopy(state)
    clone.game_log = []
    return clone


def test_initialize_two_players():
    """Two players: one burned, one dealt each, thirteen left."""
    state = initialize_game(['p1', 'p2'], ['A', 'B'], seed=7)

    assert len(state.deck) == DECK_SIZE - 2 - 1
    assert state.burned_card is not None
    assert [len(p.hand) for p in state.players] == [1, 1]
    assert state.turn_phase == PHASE_DRAW
    assert state.round_number == 1
    assert state.current_player_index == 0
    assert not state.is_game_over
    assert [p.name for p in state.players] == ['A', 'B']
    assert validate_deck_integrity(state)


def test_initialize_four_players_has_no_burn():
    state = initialize_game(['a', 'b', 'c', 'd'], ['A', 'B', 'C', 'D'], seed=1)

    assert state.burned_card is None
    assert len(state.deck) == DECK_SIZE - 4
    assert state.is_conserved()


def test_initialize_defaults_blank_names():
    state = initialize_game(['p1', 'p2', 'p3'], ['Alice', '', 'Carol'], seed=3)
    assert state.players[1].name == 'Player 2'


@pytest.mark.parametrize("ids,names", [
    (['solo'], ['Solo']),
    (['a', 'b', 'c', 'd', 'e'], ['A', 'B', 'C', 'D', 'E']),
    (['a', 'b'], ['A']),
    (['a', 'a'], ['A', 'B']),
])
def test_initialize_rejects_bad_rosters(ids, names):
    with pytest.raises(GameError) as excinfo:
        initialize_game(ids, names)
    assert excinfo.value.code == ERROR_INVALID_PLAYERS


def test_build_deck_composition():
    deck = build_deck()

    assert len(deck) == DECK_SIZE == 16
    for rank, copies in DECK_COMPOSITION.items():
        assert sum(1 for card in deck if card.rank == rank) == copies
    assert len({card.id for card in deck}) == 16
    # fixed reference order, ranks ascending
    assert [card.rank for card in deck] == sorted(card.rank for card in deck)
    assert deck[0].id == 'guard-1'
    assert deck[-1].id == 'princess-1'


def test_shuffle_is_seedable_and_leaves_reference_alone():
    first = shuffle_deck(build_deck(), seed=42)
    second = shuffle_deck(build_deck(), seed=42)

    assert first == second
    assert sorted(c.id for c in first) == sorted(c.id for c in CANONICAL_DECK)
    assert list(CANONICAL_DECK) == build_deck()


def test_same_seed_same_game():
    a = initialize_game(['p1', 'p2'], ['A', 'B'], seed=99)
    b = initialize_game(['p1', 'p2'], ['A', 'B'], seed=99)
    assert a == b


def test_draw_card():
    state = initialize_game(['p1', 'p2'], ['A', 'B'], seed=5)
    top = state.deck[-1]

    result = draw_card(state, 'p1')

    assert result.success
    new_state = result.state
    assert new_state.players[0].hand[-1] == top
    assert len(new_state.players[0].hand) == 2
    assert len(new_state.deck) == len(state.deck) - 1
    assert new_state.turn_phase == PHASE_PLAY
    assert new_state.version == state.version + 1
    # input untouched
    assert len(state.players[0].hand) == 1
    assert state.turn_phase == PHASE_DRAW


def test_draw_rejections():
    state = initialize_game(['p1', 'p2'], ['A', 'B'], seed=5)

    wrong_player = draw_card(state, 'p2')
    assert not wrong_player.success
    assert wrong_player.error_code == ERROR_NOT_YOUR_TURN

    unknown = draw_card(state, 'ghost')
    assert unknown.error_code == ERROR_PLAYER_NOT_FOUND

    drawn = draw_card(state, 'p1').state
    twice = draw_card(drawn, 'p1')
    assert twice.error_code == ERROR_WRONG_PHASE


def test_draw_by_eliminated_player(rig):
    state = rig([('p1', ['guard-1']), ('p2', ['priest-1'])], phase=PHASE_DRAW)
    state.players[0].is_eliminated = True

    result = draw_card(state, 'p1')
    assert result.error_code == ERROR_PLAYER_ELIMINATED


def test_draw_on_empty_deck_ends_round(rig):
    state = rig([('p1', ['baron-1']), ('p2', ['king-1'])], phase=PHASE_DRAW)
    # move every remaining deck card into discard piles to empty the deck
    state.players[0].discard_pile.extend(state.deck[:7])
    state.players[1].discard_pile.extend(state.deck[7:])
    state.deck = []

    result = draw_card(state, 'p1')

    assert result.success
    assert result.state.turn_phase == PHASE_ROUND_END
    assert len(result.state.players[0].hand) == 1
    assert result.state.round_winner == 'p2'
    assert result.state.players[1].tokens == 1


def test_play_moves_card_to_discard(rig):
    state = rig([('p1', ['handmaid-1', 'guard-1']), ('p2', ['priest-1'])])

    result = play_card(state, 'p1', 'handmaid-1')

    assert result.success
    new_state = result.state
    played = new_state.players[0]
    assert [c.id for c in played.discard_pile] == ['handmaid-1']
    assert [c.id for c in played.hand] == ['guard-1']
    assert new_state.is_conserved()
    # turn passes to p2, who now has to draw
    assert new_state.current_player_index == 1
    assert new_state.turn_phase == PHASE_DRAW
    assert new_state.version == state.version + 1


def test_rejected_play_leaves_state_unchanged(rig):
    state = rig([('p1', ['guard-1', 'handmaid-1']), ('p2', ['priest-1'])])

    for result in (
        play_card(state, 'p2', 'priest-1'),
        play_card(state, 'p1', 'king-1'),
        play_card(state, 'nobody', 'guard-1'),
    ):
        assert not result.success
        assert _strip_log(result.state) == _strip_log(state)
        assert len(result.state.game_log) == len(state.game_log) + 1
        assert result.state is not state

    assert play_card(state, 'p1', 'king-1').error_code == ERROR_OWNERSHIP


def test_play_in_draw_phase_is_rejected():
    state = initialize_game(['p1', 'p2'], ['A', 'B'], seed=2)
    card = state.players[0].hand[0]

    result = play_card(state, 'p1', card.id)
    assert result.error_code == ERROR_WRONG_PHASE


def test_start_new_round_keeps_tokens(rig):
    state = rig([('p1', ['king-1']), ('p2', ['guard-1'])], phase=PHASE_ROUND_END)
    state.players[0].tokens = 1
    state.players[1].tokens = 2
    state.round_winner = 'p1'
    state.players[0].is_protected = True
    state.players[1].is_eliminated = True

    result = start_new_round(state, seed=4)

    assert result.success
    new_state = result.state
    assert new_state.round_number == 2
    assert new_state.turn_phase == PHASE_DRAW
    assert new_state.round_winner is None
    assert [p.tokens for p in new_state.players] == [1, 2]
    assert all(len(p.hand) == 1 for p in new_state.players)
    assert all(not p.discard_pile for p in new_state.players)
    assert not any(p.is_protected or p.is_eliminated for p in new_state.players)
    assert len(new_state.deck) == DECK_SIZE - 2 - 1
    assert new_state.current_player_index == 0
    assert validate_deck_integrity(new_state)


def test_start_new_round_mid_round_is_rejected():
    state = initialize_game(['p1', 'p2'], ['A', 'B'], seed=8)
    result = start_new_round(state)
    assert result.error_code == ERROR_WRONG_PHASE


def test_no_actions_after_game_over(rig):
    state = rig([('p1', ['king-1']), ('p2', ['guard-1'])], phase=PHASE_ROUND_END)
    state.is_game_over = True

    assert start_new_round(state).error_code == ERROR_GAME_OVER
    assert draw_card(state, 'p1').error_code == ERROR_GAME_OVER

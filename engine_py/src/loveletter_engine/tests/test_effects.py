"""
Tests for card effects, targeting rules and fizzles.
"""

import pytest

from loveletter_engine.constants import (
    ERROR_COUNTESS_RULE, ERROR_INVALID_GUESS, ERROR_INVALID_TARGET,
    PHASE_DRAW, PHASE_ROUND_END
)
from loveletter_engine.engine import draw_card, play_card


def _ids(cards):
    return [card.id for card in cards]


# Guard

def test_guard_correct_guess_eliminates(rig):
    state = rig([('alice', ['guard-1', 'baron-1']), ('bob', ['priest-1'])])

    result = play_card(state, 'alice', 'guard-1', target_player_id='bob', guessed_rank=2)

    assert result.success
    assert not result.fizzled
    bob = result.state.players[1]
    assert bob.is_eliminated
    # eliminated players keep their card
    assert _ids(bob.hand) == ['priest-1']
    assert "Bob is out of the round (Guard guessed the Priest)." in result.state.game_log
    # last one standing takes the round
    assert result.state.turn_phase == PHASE_ROUND_END
    assert result.state.round_winner == 'alice'
    assert result.state.players[0].tokens == 1


def test_guard_wrong_guess(rig):
    state = rig([('alice', ['guard-1', 'baron-1']), ('bob', ['priest-1'])])

    result = play_card(state, 'alice', 'guard-1', target_player_id='bob', guessed_rank=3)

    assert result.success
    assert not result.state.players[1].is_eliminated
    assert "The guess is wrong." in result.state.game_log
    assert result.eliminated == []
    assert result.state.current_player_index == 1
    assert result.state.turn_phase == PHASE_DRAW


@pytest.mark.parametrize("guess", [1, 0, 9, -2, '2', 2.0, True])
def test_guard_rejects_bad_guess(rig, guess):
    state = rig([('alice', ['guard-1', 'baron-1']), ('bob', ['guard-2'])])

    result = play_card(state, 'alice', 'guard-1', target_player_id='bob', guessed_rank=guess)

    assert not result.success
    assert result.error_code == ERROR_INVALID_GUESS
    assert not result.state.players[1].is_eliminated


def test_guard_needs_a_guess(rig):
    state = rig([('alice', ['guard-1', 'baron-1']), ('bob', ['priest-1'])])

    result = play_card(state, 'alice', 'guard-1', target_player_id='bob')
    assert result.error_code == ERROR_INVALID_GUESS


def test_guard_without_target_fizzles(rig):
    state = rig([('alice', ['guard-1', 'baron-1']), ('bob', ['priest-1'])])

    result = play_card(state, 'alice', 'guard-1')

    assert result.success
    assert result.fizzled
    assert _ids(result.state.players[0].discard_pile) == ['guard-1']
    assert result.state.current_player_index == 1


@pytest.mark.parametrize("card_id,kept", [
    ('guard-1', 'baron-1'),
    ('priest-1', 'guard-1'),
    ('baron-1', 'guard-1'),
    ('king-1', 'guard-1'),
])
def test_cannot_target_self(rig, card_id, kept):
    state = rig([('alice', [card_id, kept]), ('bob', ['handmaid-1'])])

    result = play_card(state, 'alice', card_id, target_player_id='alice', guessed_rank=4)
    assert result.error_code == ERROR_INVALID_TARGET


# Priest

def test_priest_reveal_is_private(rig):
    state = rig([('alice', ['priest-1', 'guard-1']), ('bob', ['king-1'])])

    result = play_card(state, 'alice', 'priest-1', target_player_id='bob')

    assert result.success
    reveal = result.reveal
    assert reveal is not None
    assert reveal.viewer_id == 'alice'
    assert reveal.target_id == 'bob'
    assert reveal.card.id == 'king-1'
    assert "Alice looks at Bob's hand." in result.state.game_log
    assert not any('King' in line for line in result.state.game_log)


# Baron

def test_baron_lower_card_loses(rig):
    state = rig([('alice', ['baron-1', 'king-1']), ('bob', ['guard-2'])])

    result = play_card(state, 'alice', 'baron-1', target_player_id='bob')

    assert result.state.players[1].is_eliminated
    assert not result.state.players[0].is_eliminated
    assert result.state.round_winner == 'alice'


def test_baron_can_eliminate_its_player(rig):
    state = rig([('alice', ['baron-1', 'guard-1']), ('bob', ['priest-1'])])

    result = play_card(state, 'alice', 'baron-1', target_player_id='bob')

    assert result.success
    assert result.state.players[0].is_eliminated
    assert result.state.round_winner == 'bob'


def test_baron_tie(rig):
    state = rig([
        ('alice', ['baron-1', 'priest-1']),
        ('bob', ['priest-2']),
        ('carol', ['guard-1']),
    ])

    result = play_card(state, 'alice', 'baron-1', target_player_id='bob')

    assert result.success
    assert not any(p.is_eliminated for p in result.state.players)
    assert "It's a tie; nobody is eliminated." in result.state.game_log
    assert result.state.current_player_index == 1


# Handmaid

def test_handmaid_protection_lasts_until_own_turn(rig):
    state = rig(
        [('alice', ['handmaid-1', 'guard-1']), ('bob', ['guard-2'])],
        top=['priest-1', 'baron-1'],
    )

    after_handmaid = play_card(state, 'alice', 'handmaid-1').state
    assert after_handmaid.players[0].is_protected

    after_draw = draw_card(after_handmaid, 'bob').state
    assert _ids(after_draw.players[1].hand) == ['guard-2', 'priest-1']

    guard = play_card(after_draw, 'bob', 'guard-2', target_player_id='alice', guessed_rank=2)
    assert guard.success
    assert guard.fizzled
    assert "Alice is protected by the Handmaid." in guard.state.game_log
    assert not guard.state.players[0].is_eliminated

    # alice's next turn has begun, so the protection is gone
    assert guard.state.current_player_index == 0
    assert not guard.state.players[0].is_protected


def test_protected_target_fizzles_without_guess(rig):
    state = rig([('alice', ['guard-1', 'baron-1']), ('bob', ['priest-1'])])
    state.players[1].is_protected = True

    result = play_card(state, 'alice', 'guard-1', target_player_id='bob')

    assert result.success
    assert result.fizzled
    assert not result.state.players[1].is_eliminated


# Prince

def test_prince_on_princess_eliminates(rig):
    state = rig([('alice', ['prince-1', 'guard-1']), ('bob', ['princess-1'])])

    result = play_card(state, 'alice', 'prince-1', target_player_id='bob')

    bob = result.state.players[1]
    assert bob.is_eliminated
    assert _ids(bob.discard_pile) == ['princess-1']
    assert bob.hand == []
    assert result.eliminated == ['bob']
    assert result.state.round_winner == 'alice'
    assert result.state.is_conserved()


def test_prince_forces_redraw(rig):
    state = rig([('alice', ['prince-1', 'guard-1']), ('bob', ['priest-1'])], top=['king-1'])

    result = play_card(state, 'alice', 'prince-1', target_player_id='bob')

    bob = result.state.players[1]
    assert _ids(bob.discard_pile) == ['priest-1']
    assert _ids(bob.hand) == ['king-1']
    assert not bob.is_eliminated
    assert result.state.is_conserved()


def test_prince_on_self(rig):
    state = rig([('alice', ['prince-1', 'guard-1']), ('bob', ['priest-1'])], top=['countess-1'])

    result = play_card(state, 'alice', 'prince-1', target_player_id='alice')

    alice = result.state.players[0]
    assert result.success
    assert _ids(alice.discard_pile) == ['prince-1', 'guard-1']
    assert _ids(alice.hand) == ['countess-1']


def test_prince_on_empty_deck_draws_nothing(rig):
    state = rig([('alice', ['prince-1', 'guard-1']), ('bob', ['priest-1'])])
    state.players[0].discard_pile.extend(state.deck)
    state.deck = []

    result = play_card(state, 'alice', 'prince-1', target_player_id='bob')

    bob = result.state.players[1]
    assert result.success
    assert bob.hand == []
    assert _ids(bob.discard_pile) == ['priest-1']
    assert "The deck is empty; Bob draws nothing." in result.state.game_log
    assert result.state.is_conserved()


# King

def test_king_swaps_hands(rig):
    state = rig([('alice', ['king-1', 'guard-1']), ('bob', ['princess-1'])])

    result = play_card(state, 'alice', 'king-1', target_player_id='bob')

    assert _ids(result.state.players[0].hand) == ['princess-1']
    assert _ids(result.state.players[1].hand) == ['guard-1']


# Countess

@pytest.mark.parametrize("forced", ['king-1', 'prince-1'])
def test_countess_must_be_discarded(rig, forced):
    state = rig([('alice', [forced, 'countess-1']), ('bob', ['guard-1'])])

    result = play_card(state, 'alice', forced, target_player_id='bob')
    assert result.error_code == ERROR_COUNTESS_RULE

    countess = play_card(state, 'alice', 'countess-1')
    assert countess.success
    assert _ids(countess.state.players[0].hand) == [forced]


def test_countess_is_optional_without_king_or_prince(rig):
    state = rig([('alice', ['countess-1', 'guard-1']), ('bob', ['priest-1'])])

    result = play_card(state, 'alice', 'guard-1', target_player_id='bob', guessed_rank=5)

    assert result.success
    assert _ids(result.state.players[0].hand) == ['countess-1']


# Princess

def test_discarding_princess_eliminates(rig):
    state = rig([('alice', ['princess-1', 'guard-1']), ('bob', ['priest-1'])])

    result = play_card(state, 'alice', 'princess-1')

    assert result.success
    assert result.state.players[0].is_eliminated
    assert result.state.round_winner == 'bob'
    assert result.state.players[1].tokens == 1


def test_prince_holder_of_princess_forces_opponent_discard(rig):
    """Alice keeps the Princess and makes Bob swap out a Guard; the round goes on."""
    state = rig(
        [('alice', ['prince-1', 'princess-1']), ('bob', ['guard-1'])],
        top=['priest-1'],
    )

    result = play_card(state, 'alice', 'prince-1', target_player_id='bob')

    alice, bob = result.state.players
    assert result.success
    assert result.eliminated == []
    assert _ids(alice.hand) == ['princess-1']
    assert not alice.is_eliminated
    assert _ids(bob.discard_pile) == ['guard-1']
    assert _ids(bob.hand) == ['priest-1']
    assert not bob.is_eliminated
    assert result.state.current_player_index == 1
    assert result.state.turn_phase == PHASE_DRAW
    assert result.state.round_winner is None


def test_prince_on_self_while_holding_princess(rig):
    state = rig([('alice', ['prince-1', 'princess-1']), ('bob', ['guard-1'])])

    result = play_card(state, 'alice', 'prince-1', target_player_id='alice')

    alice = result.state.players[0]
    assert result.success
    assert result.eliminated == ['alice']
    assert alice.is_eliminated
    assert _ids(alice.discard_pile) == ['prince-1', 'princess-1']
    assert alice.hand == []
    assert result.state.turn_phase == PHASE_ROUND_END
    assert result.state.round_winner == 'bob'
    assert result.state.is_conserved()


def test_baron_reports_loser(rig):
    state = rig([('alice', ['baron-1', 'guard-1']), ('bob', ['priest-1'])])

    result = play_card(state, 'alice', 'baron-1', target_player_id='bob')

    assert result.eliminated == ['alice']

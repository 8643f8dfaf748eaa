"""
Shared fixtures for building rigged game states.
"""

import pytest

from loveletter_engine.constants import PHASE_PLAY
from loveletter_engine.models import GameState, Player
from loveletter_engine.shuffle import build_deck, get_card


def _rig_state(hands, top=(), discards=None, burned=None, phase=PHASE_PLAY,
               current=0, tokens=None, rules=None):
    """
    Build a state with known hands.

    Args:
        hands: [(player_id, [card ids])] in seating order
        top: card ids on top of the deck, first drawn first
        discards: {player_id: [card ids]} already discarded
        burned: card id set aside, if any
        phase: turn phase to start in
        current: index of the current player
        tokens: {player_id: tokens}
        rules: optional RuleConfig

    All remaining cards go under `top`, so the 16-card total always holds.
    """
    discards = discards or {}
    tokens = tokens or {}
    used = set(top)

    players = []
    for player_id, card_ids in hands:
        pile = discards.get(player_id, [])
        used.update(card_ids)
        used.update(pile)
        players.append(Player(
            id=player_id,
            name=player_id.capitalize(),
            hand=[get_card(c) for c in card_ids],
            discard_pile=[get_card(c) for c in pile],
            tokens=tokens.get(player_id, 0),
        ))

    burned_card = None
    if burned:
        burned_card = get_card(burned)
        used.add(burned)

    rest = [card for card in build_deck() if card.id not in used]
    deck = rest + [get_card(c) for c in reversed(top)]

    state = GameState(
        players=players,
        deck=deck,
        current_player_index=current,
        burned_card=burned_card,
        turn_phase=phase,
    )
    if rules is not None:
        state.rule_config = rules
    return state


@pytest.fixture
def rig():
    return _rig_state

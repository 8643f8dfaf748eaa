"""
Turn order and phase transitions.
"""

import logging
from typing import Optional

from .constants import (
    PHASE_DRAW, PHASE_EFFECT, PHASE_NEXT_TURN, PHASE_PLAY, PHASE_ROUND_END
)
from .models import Card, GameState

logger = logging.getLogger(__name__)


def is_round_over(state: GameState) -> bool:
    """Only one player (or none) is left standing."""
    return len(state.active_players()) <= 1


def begin_turn(state: GameState, player_index: int):
    """Hand the turn to a seat; their Handmaid protection ends here."""
    state.current_player_index = player_index
    player = state.players[player_index]
    player.is_protected = False
    state.turn_phase = PHASE_DRAW
    state.add_log(f"It's {player.name}'s turn.")


def find_next_player(state: GameState) -> Optional[int]:
    """Index of the next non-eliminated seat after the current one."""
    player_count = len(state.players)
    for offset in range(1, player_count + 1):
        index = (state.current_player_index + offset) % player_count
        if not state.players[index].is_eliminated:
            if index == state.current_player_index:
                return None
            return index
    return None


def draw_for_turn(state: GameState) -> Optional[Card]:
    """
    Draw the current player's card.

    Returns the drawn card, or None when the deck is exhausted, in which case
    the round ends and the turn is abandoned.
    """
    player = state.current_player
    if not state.deck:
        state.turn_phase = PHASE_ROUND_END
        state.add_log("The deck is empty. The round is over!")
        logger.debug(f"Deck exhausted on {player.id}'s draw")
        return None

    card = state.deck.pop()
    player.hand.append(card)
    state.turn_phase = PHASE_PLAY
    state.add_log(f"{player.name} draws a card.")
    return card


def discard_for_turn(state: GameState, card: Card):
    """Move the chosen card from hand to discard pile and enter the effect phase."""
    player = state.current_player
    player.hand.remove(card)
    player.discard_pile.append(card)
    state.turn_phase = PHASE_EFFECT
    state.add_log(f"{player.name} plays the {card.name}.")


def finish_turn(state: GameState) -> bool:
    """
    Move on after an effect has resolved.

    Returns:
        True if the round has ended and needs scoring
    """
    if is_round_over(state):
        state.turn_phase = PHASE_ROUND_END
        return True

    state.turn_phase = PHASE_NEXT_TURN
    next_index = find_next_player(state)
    if next_index is None:
        logger.warning(f"No next player found in round {state.round_number}; ending round")
        state.turn_phase = PHASE_ROUND_END
        return True

    begin_turn(state, next_index)
    return False

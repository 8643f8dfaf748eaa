# engine_py/src/loveletter_engine/scoring.py

import logging
from typing import List, Optional

from .constants import PHASE_GAME_END, PHASE_ROUND_END
from .models import GameState, Player

logger = logging.getLogger(__name__)


def _hand_rank(player: Player) -> int:
    card = player.held_card()
    return card.rank if card else 0


def _best(players: List[Player], key) -> List[Player]:
    top = max(key(p) for p in players)
    return [p for p in players if key(p) == top]


def determine_round_winner(state: GameState) -> Optional[Player]:
    """
    Pick the winner of a finished round.

    The last player standing wins outright. Otherwise the highest card wins,
    ties go to the highest discard total, and a tie on that too is a drawn
    round with no winner.

    Args:
        state: State at the end of a round

    Returns:
        The winning Player, or None for a drawn round
    """
    remaining = state.active_players()
    if not remaining:
        return None
    if len(remaining) == 1:
        return remaining[0]

    contenders = _best(remaining, _hand_rank)
    if len(contenders) > 1:
        contenders = _best(contenders, lambda p: p.discard_total())
    if len(contenders) > 1:
        return None
    return contenders[0]


def find_match_winner(state: GameState) -> Optional[Player]:
    """First player in seating order at or over the token threshold."""
    threshold = state.rule_config.get_tokens_to_win(len(state.players))
    for player in state.players:
        if player.tokens >= threshold:
            return player
    return None


def resolve_round(state: GameState) -> GameState:
    """
    Score a round that has reached the roundEnd phase.

    Awards one token to the round winner, then ends the match if anyone has
    reached the threshold for the current player count.

    Args:
        state: Working state in the roundEnd phase, updated in place

    Returns:
        The same state, scored
    """
    state.turn_phase = PHASE_ROUND_END
    winner = determine_round_winner(state)

    if winner is None:
        state.round_winner = None
        state.add_log("Perfect tie! Nobody wins a token this round.")
    else:
        winner.tokens += 1
        state.round_winner = winner.id
        if len(state.active_players()) == 1:
            state.add_log(f"{winner.name} wins the round!")
        else:
            held = winner.held_card()
            state.add_log(f"{winner.name} wins the round with the {held.name if held else 'last card'}!")

    match_winner = find_match_winner(state)
    if match_winner is not None:
        state.is_game_over = True
        state.winner = match_winner.id
        state.turn_phase = PHASE_GAME_END
        state.add_log(f"{match_winner.name} wins the match with {match_winner.tokens} tokens!")

    logger.debug(
        f"Round {state.round_number} resolved: winner={state.round_winner} "
        f"game_over={state.is_game_over}"
    )
    return state

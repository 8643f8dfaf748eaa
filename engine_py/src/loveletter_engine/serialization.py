"""
State serialization and sanitization utilities.
"""

from typing import Any, Dict, Optional

from .constants import PHASE_GAME_END, PHASE_ROUND_END
from .models import Card, GameState, Player

# Phases in which surviving hands are shown for the showdown
SHOWDOWN_PHASES = (PHASE_ROUND_END, PHASE_GAME_END)


def card_to_dict(card: Card) -> Dict[str, Any]:
    return {
        "id": card.id,
        "rank": card.rank,
        "name": card.name,
        "description": card.description,
        "effect": card.effect,
    }


def _player_to_dict(player: Player, show_hand: bool) -> Dict[str, Any]:
    data = {
        "id": player.id,
        "name": player.name,
        "hand_count": len(player.hand),
        "discard_pile": [card_to_dict(c) for c in player.discard_pile],
        "is_protected": player.is_protected,
        "is_eliminated": player.is_eliminated,
        "tokens": player.tokens,
    }
    if show_hand:
        data["hand"] = [card_to_dict(c) for c in player.hand]
    return data


def state_to_dict(state: GameState) -> Dict[str, Any]:
    """Full, unredacted snapshot. For logs, tests and trusted tooling only."""
    return {
        "version": state.version,
        "players": [_player_to_dict(p, show_hand=True) for p in state.players],
        "deck": [card_to_dict(c) for c in state.deck],
        "current_player_index": state.current_player_index,
        "burned_card": card_to_dict(state.burned_card) if state.burned_card else None,
        "is_game_over": state.is_game_over,
        "winner": state.winner,
        "round_winner": state.round_winner,
        "turn_phase": state.turn_phase,
        "round_number": state.round_number,
        "game_log": list(state.game_log),
    }


def sanitize_state(state: GameState, viewer_id: Optional[str] = None) -> Dict[str, Any]:
    """
    Sanitize game state for transmission to clients.

    Args:
        state: Game state to sanitize
        viewer_id: ID of the player viewing the state (to show their cards)

    Returns:
        Sanitized state dictionary safe for JSON transmission
    """
    showdown = state.turn_phase in SHOWDOWN_PHASES

    players = []
    for player in state.players:
        show_hand = player.id == viewer_id or (showdown and not player.is_eliminated)
        players.append(_player_to_dict(player, show_hand))

    current = state.current_player
    return {
        "version": state.version,
        "players": players,
        "deck_count": len(state.deck),
        "has_burned_card": state.burned_card is not None,
        "current_player_index": state.current_player_index,
        "current_player_id": current.id if current else None,
        "is_game_over": state.is_game_over,
        "winner": state.winner,
        "round_winner": state.round_winner,
        "turn_phase": state.turn_phase,
        "round_number": state.round_number,
        "tokens_to_win": state.rule_config.get_tokens_to_win(len(state.players)),
        "game_log": list(state.game_log),
    }

"""Love Letter rules engine and lobby relay."""

from .engine import (
    ActionResult, draw_card, initialize_game, play_card, start_new_round
)
from .errors import GameError
from .models import Card, GameState, Player, PrivateReveal

__all__ = [
    "ActionResult", "Card", "GameError", "GameState", "Player", "PrivateReveal",
    "draw_card", "initialize_game", "play_card", "start_new_round",
]

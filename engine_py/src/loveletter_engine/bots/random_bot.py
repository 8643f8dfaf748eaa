"""
Placeholder bot that plays a random legal move.
"""

import logging
import random
from typing import Optional

from ..constants import GUARD, MAX_GUESS, MIN_GUESS, PHASE_DRAW, PRINCESS
from ..models import GameState
from ..validate import get_playable_cards, get_valid_targets
from .base import BaseBot, BotAction

logger = logging.getLogger(__name__)


class RandomBot(BaseBot):
    """Draws when it must, then discards a random legal card.

    Never throws away the Princess while another card is playable and never
    aims a Guard at itself. There is no strategy beyond that.
    """

    def __init__(self, player_id: str, seed: Optional[int] = None):
        super().__init__(player_id)
        self.rng = random.Random(seed)

    def choose_action(self, state: GameState) -> Optional[BotAction]:
        if not self.is_my_turn(state):
            return None

        if state.turn_phase == PHASE_DRAW:
            return BotAction.draw()

        playable = get_playable_cards(state, self.player_id)
        if not playable:
            logger.warning(f"Bot {self.player_id} has no playable card")
            return None

        safe = [card for card in playable if card.rank != PRINCESS]
        card = self.rng.choice(safe or playable)

        targets = get_valid_targets(state, self.player_id, card)
        # prefer opponents; the Prince may still fall back to the bot itself
        opponents = [t for t in targets if t.id != self.player_id]
        target = self.rng.choice(opponents or targets) if targets else None
        if target is not None and target.id == self.player_id:
            kept = target.held_card(excluding=card.id)
            if kept is not None and kept.rank == PRINCESS:
                target = None

        guess = None
        if card.rank == GUARD and target is not None:
            guess = self.rng.randint(MIN_GUESS, MAX_GUESS)

        return BotAction.play(
            card.id,
            target_player_id=target.id if target else None,
            guessed_rank=guess
        )

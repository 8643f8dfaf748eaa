"""
Base bot interface and utilities.
"""

from abc import ABC, abstractmethod
from typing import Optional

from ..constants import PHASE_DRAW, PHASE_PLAY
from ..models import GameState


class BotAction:
    """Represents a bot action."""

    def __init__(self, action_type: str, **kwargs):
        self.type = action_type
        self.data = kwargs

    @classmethod
    def draw(cls) -> 'BotAction':
        """Create a draw action."""
        return cls('draw')

    @classmethod
    def play(
        cls,
        card_id: str,
        target_player_id: Optional[str] = None,
        guessed_rank: Optional[int] = None
    ) -> 'BotAction':
        """Create a play action."""
        return cls(
            'play',
            card_id=card_id,
            target_player_id=target_player_id,
            guessed_rank=guessed_rank
        )

    def __repr__(self):
        return f"BotAction({self.type!r}, {self.data!r})"


class BaseBot(ABC):
    """Abstract base class for bot players."""

    def __init__(self, player_id: str):
        self.player_id = player_id

    @abstractmethod
    def choose_action(self, state: GameState) -> Optional[BotAction]:
        """
        Choose an action based on the current game state.

        Args:
            state: Current game state

        Returns:
            BotAction to take, or None if no action needed
        """
        pass

    def is_my_turn(self, state: GameState) -> bool:
        """Check if it's this bot's turn."""
        current = state.current_player
        return (
            current is not None
            and current.id == self.player_id
            and not state.is_game_over
            and state.turn_phase in (PHASE_DRAW, PHASE_PLAY)
        )

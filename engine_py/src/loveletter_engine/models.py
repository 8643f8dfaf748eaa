"""Game models and data structures"""

from dataclasses import dataclass, field
from typing import List, Optional

from .constants import DECK_SIZE, PHASE_DRAW
from .rules import RuleConfig, default_rules


@dataclass(frozen=True)
class Card:
    id: str
    rank: int
    name: str
    description: str = ''
    effect: str = ''


@dataclass
class Player:
    id: str
    name: str
    hand: List[Card] = field(default_factory=list)
    discard_pile: List[Card] = field(default_factory=list)
    is_protected: bool = False
    is_eliminated: bool = False
    tokens: int = 0  # persists across rounds

    def held_card(self, excluding: Optional[str] = None) -> Optional[Card]:
        """The card the player keeps, skipping the card id being discarded."""
        for card in self.hand:
            if card.id != excluding:
                return card
        return None

    def find_card(self, card_id: str) -> Optional[Card]:
        for card in self.hand:
            if card.id == card_id:
                return card
        return None

    def has_rank(self, rank: int) -> bool:
        return any(card.rank == rank for card in self.hand)

    def discard_total(self) -> int:
        return sum(card.rank for card in self.discard_pile)

    def reset_for_round(self):
        self.hand = []
        self.discard_pile = []
        self.is_protected = False
        self.is_eliminated = False


@dataclass
class PrivateReveal:
    """A card shown to one player only (Priest)."""
    viewer_id: str
    target_id: str
    card: Card


@dataclass
class GameState:
    players: List[Player] = field(default_factory=list)
    deck: List[Card] = field(default_factory=list)  # draw pops from the end
    current_player_index: int = 0
    burned_card: Optional[Card] = None
    is_game_over: bool = False
    winner: Optional[str] = None  # player id
    round_winner: Optional[str] = None  # player id, None on a drawn round
    turn_phase: str = PHASE_DRAW  # draw|play|effect|nextTurn|roundEnd|gameEnd
    round_number: int = 1
    game_log: List[str] = field(default_factory=list)
    version: int = 0
    rule_config: RuleConfig = field(default_factory=lambda: default_rules.model_copy())

    @property
    def current_player(self) -> Optional[Player]:
        if 0 <= self.current_player_index < len(self.players):
            return self.players[self.current_player_index]
        return None

    def get_player(self, player_id: Optional[str]) -> Optional[Player]:
        if player_id is None:
            return None
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def player_index(self, player_id: str) -> int:
        for index, player in enumerate(self.players):
            if player.id == player_id:
                return index
        return -1

    def active_players(self) -> List[Player]:
        return [p for p in self.players if not p.is_eliminated]

    def card_count(self) -> int:
        """Cards accounted for in the current round."""
        total = len(self.deck)
        total += sum(len(p.hand) + len(p.discard_pile) for p in self.players)
        if self.burned_card is not None:
            total += 1
        return total

    def is_conserved(self) -> bool:
        return self.card_count() == DECK_SIZE

    def add_log(self, message: str):
        self.game_log.append(message)

    def increment_version(self):
        self.version += 1

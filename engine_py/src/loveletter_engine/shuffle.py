"""
Deck building, shuffling and dealing utilities.
"""

import logging
import random
from typing import List, Optional, Sequence, Tuple

from .constants import (
    CARD_DESCRIPTIONS, CARD_EFFECTS, CARD_NAMES, DECK_COMPOSITION
)
from .models import Card, GameState

logger = logging.getLogger(__name__)


def _build_catalogue() -> Tuple[Card, ...]:
    cards = []
    for rank in sorted(DECK_COMPOSITION):
        prefix = CARD_NAMES[rank].lower()
        for copy_number in range(1, DECK_COMPOSITION[rank] + 1):
            cards.append(Card(
                id=f"{prefix}-{copy_number}",
                rank=rank,
                name=CARD_NAMES[rank],
                description=CARD_DESCRIPTIONS[rank],
                effect=CARD_EFFECTS[rank],
            ))
    return tuple(cards)


# Reference order: ranks ascending, copies numbered from 1
CANONICAL_DECK: Tuple[Card, ...] = _build_catalogue()


def build_deck() -> List[Card]:
    """Create the 16-card deck in its fixed reference order."""
    return list(CANONICAL_DECK)


def shuffle_deck(deck: Sequence[Card], seed: Optional[int] = None) -> List[Card]:
    """
    Shuffle a deck deterministically if seed is provided.

    Args:
        deck: Cards to shuffle (left untouched)
        seed: Optional seed for deterministic shuffling

    Returns:
        Shuffled copy of the deck
    """
    deck_copy = list(deck)

    if seed is not None:
        rng = random.Random(seed)
        rng.shuffle(deck_copy)
    else:
        random.shuffle(deck_copy)

    return deck_copy


def deal_round(state: GameState) -> GameState:
    """
    Burn a card (fewer than four players) and deal one card to each player.

    Works on the given state in place. Does nothing when the deck cannot
    cover the burn plus one card per player.

    Args:
        state: State holding a freshly shuffled deck

    Returns:
        The same state, dealt
    """
    burn = state.rule_config.should_burn(len(state.players))
    needed = len(state.players) + (1 if burn else 0)
    if len(state.deck) < needed:
        logger.warning(f"Cannot deal: deck has {len(state.deck)} cards, {needed} needed")
        return state

    state.burned_card = state.deck.pop() if burn else None

    for player in state.players:
        player.hand.append(state.deck.pop())

    return state


def setup_round(state: GameState, seed: Optional[int] = None) -> GameState:
    """
    Set up a new round by clearing round-scoped fields, shuffling and dealing.

    Tokens, seating and the round counter are left alone.

    Args:
        state: Working state to reset in place
        seed: Optional seed for deterministic shuffling

    Returns:
        Updated state with cards dealt
    """
    for player in state.players:
        player.reset_for_round()

    state.deck = shuffle_deck(build_deck(), seed)
    state.burned_card = None
    state.round_winner = None

    deal_round(state)
    logger.debug(
        f"Round {state.round_number} dealt: {len(state.deck)} cards left, "
        f"burned={state.burned_card is not None}"
    )
    return state


def validate_deck_integrity(state: GameState) -> bool:
    """
    Validate that all cards are accounted for and no duplicates exist.

    Args:
        state: Game state to validate

    Returns:
        True if deck integrity is valid
    """
    all_cards = list(state.deck)
    for player in state.players:
        all_cards.extend(player.hand)
        all_cards.extend(player.discard_pile)
    if state.burned_card is not None:
        all_cards.append(state.burned_card)

    actual_ids = [card.id for card in all_cards]
    expected_ids = {card.id for card in CANONICAL_DECK}

    return (
        len(actual_ids) == len(set(actual_ids)) and  # No duplicates
        set(actual_ids) == expected_ids  # Correct cards
    )


def get_card(card_id: str) -> Optional[Card]:
    """Look up a catalogue card by id."""
    for card in CANONICAL_DECK:
        if card.id == card_id:
            return card
    return None

"""Game constants and card catalogue"""

from typing import Dict, Tuple

# Card ranks
GUARD = 1
PRIEST = 2
BARON = 3
HANDMAID = 4
PRINCE = 5
KING = 6
COUNTESS = 7
PRINCESS = 8

CARD_NAMES: Dict[int, str] = {
    GUARD: 'Guard',
    PRIEST: 'Priest',
    BARON: 'Baron',
    HANDMAID: 'Handmaid',
    PRINCE: 'Prince',
    KING: 'King',
    COUNTESS: 'Countess',
    PRINCESS: 'Princess',
}

CARD_DESCRIPTIONS: Dict[int, str] = {
    GUARD: "Guess another player's card (not Guard).",
    PRIEST: "Look at another player's hand.",
    BARON: "Compare hands with another player.",
    HANDMAID: "You are protected until your next turn.",
    PRINCE: "Choose a player (possibly yourself) to discard their hand and draw a new card.",
    KING: "Trade hands with another player.",
    COUNTESS: "If you hold the King or the Prince, you must discard the Countess.",
    PRINCESS: "If you discard this card, you are out of the round.",
}

CARD_EFFECTS: Dict[int, str] = {
    GUARD: "If correct, that player is out of the round.",
    PRIEST: "Private information.",
    BARON: "The lower card is out of the round.",
    HANDMAID: "Temporary immunity.",
    PRINCE: "Forced discard and a fresh card.",
    KING: "Hands are exchanged.",
    COUNTESS: "Mandatory discard under condition.",
    PRINCESS: "Self-elimination when discarded.",
}

# rank -> number of copies in the deck
DECK_COMPOSITION: Dict[int, int] = {
    GUARD: 5,
    PRIEST: 2,
    BARON: 2,
    HANDMAID: 2,
    PRINCE: 2,
    KING: 1,
    COUNTESS: 1,
    PRINCESS: 1,
}
DECK_SIZE = sum(DECK_COMPOSITION.values())

# Targeting
TARGETED_RANKS: Tuple[int, ...] = (GUARD, PRIEST, BARON, PRINCE, KING)
SELF_TARGET_RANKS: Tuple[int, ...] = (PRINCE,)
COUNTESS_FORCING_RANKS: Tuple[int, ...] = (PRINCE, KING)
MIN_GUESS = PRIEST
MAX_GUESS = PRINCESS

# Player counts and match length
MIN_PLAYERS = 2
MAX_PLAYERS = 4
BURN_BELOW_PLAYERS = 4  # one card is burned when fewer players than this
TOKENS_TO_WIN: Dict[int, int] = {2: 7, 3: 5, 4: 4}
DEFAULT_TOKENS_TO_WIN = 5

# Turn phases
PHASE_DRAW = 'draw'
PHASE_PLAY = 'play'
PHASE_EFFECT = 'effect'
PHASE_NEXT_TURN = 'nextTurn'
PHASE_ROUND_END = 'roundEnd'
PHASE_GAME_END = 'gameEnd'

# Error codes
ERROR_NOT_YOUR_TURN = "NOT_YOUR_TURN"
ERROR_WRONG_PHASE = "WRONG_PHASE"
ERROR_PLAYER_NOT_FOUND = "PLAYER_NOT_FOUND"
ERROR_PLAYER_ELIMINATED = "PLAYER_ELIMINATED"
ERROR_OWNERSHIP = "OWNERSHIP"
ERROR_COUNTESS_RULE = "COUNTESS_RULE"
ERROR_INVALID_TARGET = "INVALID_TARGET"
ERROR_INVALID_GUESS = "INVALID_GUESS"
ERROR_GAME_OVER = "GAME_OVER"
ERROR_INVALID_PLAYERS = "INVALID_PLAYERS"


def card_name(rank: int) -> str:
    return CARD_NAMES.get(rank, f"Rank {rank}")

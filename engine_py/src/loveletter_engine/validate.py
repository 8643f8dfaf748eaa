"""
Action validation for draws, plays and round restarts.
"""

from typing import List, Optional, Sequence

from .constants import (
    COUNTESS, COUNTESS_FORCING_RANKS, ERROR_COUNTESS_RULE, ERROR_GAME_OVER,
    ERROR_INVALID_GUESS, ERROR_INVALID_PLAYERS, ERROR_INVALID_TARGET,
    ERROR_NOT_YOUR_TURN, ERROR_OWNERSHIP, ERROR_PLAYER_ELIMINATED,
    ERROR_PLAYER_NOT_FOUND, ERROR_WRONG_PHASE, GUARD, MAX_GUESS, MIN_GUESS,
    PHASE_DRAW, PHASE_PLAY, PHASE_ROUND_END, SELF_TARGET_RANKS, TARGETED_RANKS,
    card_name
)
from .models import Card, GameState, Player
from .rules import RuleConfig


class ValidationResult:
    """Result of action validation."""

    def __init__(
        self,
        valid: bool,
        error_code: Optional[str] = None,
        error_message: Optional[str] = None,
        card: Optional[Card] = None,
        target: Optional[Player] = None
    ):
        self.valid = valid
        self.error_code = error_code
        self.error_message = error_message
        self.card = card
        self.target = target

    @classmethod
    def success(cls, card: Optional[Card] = None, target: Optional[Player] = None) -> 'ValidationResult':
        """Create a successful validation result."""
        return cls(valid=True, card=card, target=target)

    @classmethod
    def error(cls, error_code: str, error_message: str) -> 'ValidationResult':
        """Create an error validation result."""
        return cls(valid=False, error_code=error_code, error_message=error_message)


def validate_roster(
    player_ids: Sequence[str],
    player_names: Sequence[str],
    rules: RuleConfig
) -> ValidationResult:
    """
    Validate the seating list handed to a new match.

    Args:
        player_ids: Player ids in seating order
        player_names: Display names, same length as player_ids
        rules: Rule configuration bounding the player count

    Returns:
        ValidationResult with validation outcome
    """
    if len(player_ids) != len(player_names):
        return ValidationResult.error(
            ERROR_INVALID_PLAYERS,
            f"Got {len(player_ids)} player ids but {len(player_names)} names"
        )

    if not rules.validate_player_count(len(player_ids)):
        return ValidationResult.error(
            ERROR_INVALID_PLAYERS,
            f"Love Letter needs {rules.min_players}-{rules.max_players} players "
            f"(got {len(player_ids)})"
        )

    if len(set(player_ids)) != len(player_ids):
        return ValidationResult.error(
            ERROR_INVALID_PLAYERS,
            "Player ids must be unique"
        )

    return ValidationResult.success()


def _validate_turn_owner(state: GameState, player_id: str, phase: str) -> ValidationResult:
    if state.is_game_over:
        return ValidationResult.error(ERROR_GAME_OVER, "The match is over")

    player = state.get_player(player_id)
    if not player:
        return ValidationResult.error(
            ERROR_PLAYER_NOT_FOUND,
            f"Player {player_id} is not in this game"
        )

    if player.is_eliminated:
        return ValidationResult.error(
            ERROR_PLAYER_ELIMINATED,
            f"{player.name} is out of the round"
        )

    current = state.current_player
    if current is None or current.id != player_id:
        return ValidationResult.error(
            ERROR_NOT_YOUR_TURN,
            f"It's not {player.name}'s turn"
        )

    if state.turn_phase != phase:
        return ValidationResult.error(
            ERROR_WRONG_PHASE,
            f"Cannot {'draw' if phase == PHASE_DRAW else 'play'} during the "
            f"{state.turn_phase} phase"
        )

    return ValidationResult.success()


def validate_draw(state: GameState, player_id: str) -> ValidationResult:
    """
    Validate a draw attempt.

    Args:
        state: Current game state
        player_id: ID of player attempting to draw

    Returns:
        ValidationResult with validation outcome
    """
    return _validate_turn_owner(state, player_id, PHASE_DRAW)


def violates_countess_rule(player: Player, card: Card) -> bool:
    """King or Prince may not be discarded while the Countess is held."""
    return card.rank in COUNTESS_FORCING_RANKS and player.has_rank(COUNTESS)


def is_targetable(state: GameState, target: Optional[Player]) -> bool:
    return target is not None and not target.is_eliminated and not target.is_protected


def validate_play(
    state: GameState,
    player_id: str,
    card_id: str,
    target_player_id: Optional[str] = None,
    guessed_rank: Optional[int] = None
) -> ValidationResult:
    """
    Validate a card play attempt.

    A target that is missing, eliminated or protected is not an error: the
    card still resolves and its effect fizzles. Only self-targeting and bad
    Guard guesses are rejected here.

    Args:
        state: Current game state
        player_id: ID of player attempting the play
        card_id: Card being discarded
        target_player_id: Optional target of the card effect
        guessed_rank: Rank named by a Guard

    Returns:
        ValidationResult carrying the card and resolved target on success
    """
    turn_check = _validate_turn_owner(state, player_id, PHASE_PLAY)
    if not turn_check.valid:
        return turn_check

    player = state.get_player(player_id)
    card = player.find_card(card_id)
    if card is None:
        return ValidationResult.error(
            ERROR_OWNERSHIP,
            f"{player.name} does not hold card {card_id}"
        )

    if violates_countess_rule(player, card):
        return ValidationResult.error(
            ERROR_COUNTESS_RULE,
            f"{player.name} must discard the Countess while holding the {card.name}"
        )

    if card.rank not in TARGETED_RANKS:
        return ValidationResult.success(card=card)

    if target_player_id == player_id and card.rank not in SELF_TARGET_RANKS:
        return ValidationResult.error(
            ERROR_INVALID_TARGET,
            f"The {card.name} cannot target its own player"
        )

    target = state.get_player(target_player_id)

    if card.rank == GUARD:
        if guessed_rank is not None and (
            not isinstance(guessed_rank, int) or isinstance(guessed_rank, bool)
        ):
            return ValidationResult.error(
                ERROR_INVALID_GUESS, f"Guess must be a whole rank, got {guessed_rank!r}"
            )
        if guessed_rank is not None and not (MIN_GUESS <= guessed_rank <= MAX_GUESS):
            if guessed_rank == GUARD:
                message = "Cannot guess Guard"
            else:
                message = f"Guess must be a rank from {MIN_GUESS} to {MAX_GUESS}"
            return ValidationResult.error(ERROR_INVALID_GUESS, message)
        if guessed_rank is None and is_targetable(state, target):
            return ValidationResult.error(
                ERROR_INVALID_GUESS,
                f"A Guard played at {target.name} needs a guessed rank"
            )

    return ValidationResult.success(card=card, target=target)


def validate_new_round(state: GameState) -> ValidationResult:
    """A new round may only be dealt once the current one has been scored."""
    if state.is_game_over:
        return ValidationResult.error(ERROR_GAME_OVER, "The match is over")
    if state.turn_phase != PHASE_ROUND_END:
        return ValidationResult.error(
            ERROR_WRONG_PHASE,
            f"Round {state.round_number} is still in progress ({state.turn_phase})"
        )
    return ValidationResult.success()


def get_playable_cards(state: GameState, player_id: str) -> List[Card]:
    """Cards the player may legally discard right now."""
    player = state.get_player(player_id)
    if not player or not _validate_turn_owner(state, player_id, PHASE_PLAY).valid:
        return []
    return [card for card in player.hand if not violates_countess_rule(player, card)]


def get_valid_targets(state: GameState, player_id: str, card: Card) -> List[Player]:
    """Players a card can affect; empty when its effect would fizzle."""
    if card.rank not in TARGETED_RANKS:
        return []
    targets = []
    for player in state.players:
        if player.id == player_id and card.rank not in SELF_TARGET_RANKS:
            continue
        if is_targetable(state, player):
            targets.append(player)
    return targets


def describe_guess(guessed_rank: int) -> str:
    return f"{card_name(guessed_rank)} ({guessed_rank})"

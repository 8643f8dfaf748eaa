"""Round engine: the public game API.

Every operation takes a GameState and returns an ActionResult wrapping a new
GameState. The input state is never modified.
"""

import copy
import logging
from typing import List, Optional, Sequence

from .constants import PHASE_DRAW
from .effects import apply_effect
from .errors import raise_error
from .models import GameState, Player, PrivateReveal
from .rules import RuleConfig, default_rules
from .scoring import resolve_round
from .shuffle import setup_round
from .turns import begin_turn, discard_for_turn, draw_for_turn, finish_turn
from .validate import (
    validate_draw, validate_new_round, validate_play, validate_roster
)

logger = logging.getLogger(__name__)


class ActionResult:
    """Outcome of an engine call: either accepted or rejected, always with a state."""

    def __init__(
        self,
        success: bool,
        state: GameState,
        error_code: Optional[str] = None,
        error_message: Optional[str] = None,
        fizzled: bool = False,
        reveal: Optional[PrivateReveal] = None,
        eliminated: Optional[List[str]] = None
    ):
        self.success = success
        self.state = state
        self.error_code = error_code
        self.error_message = error_message
        self.fizzled = fizzled
        self.reveal = reveal
        self.eliminated = eliminated or []  # player ids knocked out by this action

    @classmethod
    def ok(cls, state: GameState, fizzled: bool = False,
           reveal: Optional[PrivateReveal] = None,
           eliminated: Optional[List[str]] = None) -> 'ActionResult':
        return cls(success=True, state=state, fizzled=fizzled,
                   reveal=reveal, eliminated=eliminated)

    @classmethod
    def rejected(cls, state: GameState, error_code: str, error_message: str) -> 'ActionResult':
        """Reject an action: the returned state only gains a log line."""
        new_state = copy.deepcopy(state)
        new_state.add_log(f"Rejected: {error_message}")
        logger.info(f"Rejected action [{error_code}]: {error_message}")
        return cls(success=False, state=new_state,
                   error_code=error_code, error_message=error_message)

    def __repr__(self):
        if self.success:
            return f"ActionResult(success=True, fizzled={self.fizzled})"
        return f"ActionResult(success=False, error_code={self.error_code!r})"


def initialize_game(
    player_ids: Sequence[str],
    player_names: Sequence[str],
    seed: Optional[int] = None,
    rules: Optional[RuleConfig] = None
) -> GameState:
    """
    Create a new match: build and shuffle the deck, burn, deal.

    Raises:
        GameError: if the roster is the wrong size, ids are duplicated, or
            ids and names differ in length
    """
    rules = rules or default_rules
    check = validate_roster(player_ids, player_names, rules)
    if not check.valid:
        raise_error(check.error_code, check.error_message)

    players = [
        Player(id=player_id, name=name or f"Player {index + 1}")
        for index, (player_id, name) in enumerate(zip(player_ids, player_names))
    ]
    state = GameState(players=players, rule_config=rules.model_copy())
    state.add_log("The game begins!")
    setup_round(state, seed)
    begin_turn(state, 0)

    logger.info(f"Match initialized for {len(players)} players")
    return state


def draw_card(state: GameState, player_id: str) -> ActionResult:
    """Draw for the current player. An empty deck ends the round instead."""
    check = validate_draw(state, player_id)
    if not check.valid:
        return ActionResult.rejected(state, check.error_code, check.error_message)

    new_state = copy.deepcopy(state)
    card = draw_for_turn(new_state)
    if card is None:
        resolve_round(new_state)

    new_state.increment_version()
    return ActionResult.ok(new_state)


def play_card(
    state: GameState,
    player_id: str,
    card_id: str,
    target_player_id: Optional[str] = None,
    guessed_rank: Optional[int] = None
) -> ActionResult:
    """Discard a card from the current player's hand and resolve its effect."""
    check = validate_play(state, player_id, card_id, target_player_id, guessed_rank)
    if not check.valid:
        return ActionResult.rejected(state, check.error_code, check.error_message)

    new_state = copy.deepcopy(state)
    actor = new_state.get_player(player_id)
    card = actor.find_card(card_id)
    target = new_state.get_player(check.target.id) if check.target else None

    discard_for_turn(new_state, card)
    outcome = apply_effect(new_state, actor, card, target, guessed_rank)

    if finish_turn(new_state):
        resolve_round(new_state)

    new_state.increment_version()
    return ActionResult.ok(
        new_state,
        fizzled=outcome.fizzled,
        reveal=outcome.reveal,
        eliminated=outcome.eliminated
    )


def start_new_round(state: GameState, seed: Optional[int] = None) -> ActionResult:
    """Deal the next round, keeping tokens. Only valid after a round has been scored."""
    check = validate_new_round(state)
    if not check.valid:
        return ActionResult.rejected(state, check.error_code, check.error_message)

    new_state = copy.deepcopy(state)
    previous_winner = new_state.round_winner
    new_state.round_number += 1
    new_state.turn_phase = PHASE_DRAW
    new_state.add_log(f"Round {new_state.round_number} begins!")
    setup_round(new_state, seed)

    starter = 0
    if new_state.rule_config.winner_starts_round and previous_winner:
        starter = max(new_state.player_index(previous_winner), 0)
    begin_turn(new_state, starter)

    new_state.increment_version()
    return ActionResult.ok(new_state)

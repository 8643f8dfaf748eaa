"""
Card effects implementation.

Every resolver works on the engine's working copy of the state, which the
caller has already deep-copied. The played card has been moved to the
actor's discard pile before the resolver runs.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional

from .constants import (
    BARON, COUNTESS, GUARD, HANDMAID, KING, PRIEST, PRINCE, PRINCESS
)
from .models import Card, GameState, Player, PrivateReveal
from .validate import describe_guess

logger = logging.getLogger(__name__)


@dataclass
class EffectOutcome:
    """What a resolved card did, beyond the state changes themselves."""
    fizzled: bool = False
    eliminated: List[str] = field(default_factory=list)
    reveal: Optional[PrivateReveal] = None


def eliminate(state: GameState, player: Player, outcome: EffectOutcome, reason: str):
    """Knock a player out of the round."""
    player.is_eliminated = True
    player.is_protected = False
    outcome.eliminated.append(player.id)
    state.add_log(f"{player.name} is out of the round ({reason}).")


def _resolve_target(
    state: GameState,
    actor: Player,
    card: Card,
    target: Optional[Player],
    outcome: EffectOutcome
) -> Optional[Player]:
    """Return the target if the effect can land, otherwise log the fizzle."""
    if target is None:
        state.add_log(f"The {card.name} has no target and has no effect.")
    elif target.is_eliminated:
        state.add_log(f"{target.name} is already out; the {card.name} has no effect.")
    elif target.is_protected:
        state.add_log(f"{target.name} is protected by the Handmaid.")
    else:
        return target
    outcome.fizzled = True
    logger.debug(f"{card.name} fizzled for {actor.id}")
    return None


def apply_guard(state, actor, card, target, guessed_rank, outcome):
    """Guess the target's card; a correct guess eliminates them."""
    target = _resolve_target(state, actor, card, target, outcome)
    if target is None:
        return

    state.add_log(f"{actor.name} guesses {target.name} holds a {describe_guess(guessed_rank)}.")
    held = target.held_card()
    if held is not None and held.rank == guessed_rank:
        eliminate(state, target, outcome, f"Guard guessed the {held.name}")
    else:
        state.add_log("The guess is wrong.")


def apply_priest(state, actor, card, target, guessed_rank, outcome):
    """Show the target's card to the actor only."""
    target = _resolve_target(state, actor, card, target, outcome)
    if target is None:
        return

    held = target.held_card()
    state.add_log(f"{actor.name} looks at {target.name}'s hand.")
    if held is not None:
        outcome.reveal = PrivateReveal(viewer_id=actor.id, target_id=target.id, card=held)


def apply_baron(state, actor, card, target, guessed_rank, outcome):
    """Compare hands; the strictly lower card is eliminated."""
    target = _resolve_target(state, actor, card, target, outcome)
    if target is None:
        return

    state.add_log(f"{actor.name} compares hands with {target.name}.")
    actor_card = actor.held_card()
    target_card = target.held_card()
    actor_rank = actor_card.rank if actor_card else 0
    target_rank = target_card.rank if target_card else 0

    if actor_rank < target_rank:
        eliminate(state, actor, outcome, "lost the Baron comparison")
    elif actor_rank > target_rank:
        eliminate(state, target, outcome, "lost the Baron comparison")
    else:
        state.add_log("It's a tie; nobody is eliminated.")


def apply_handmaid(state, actor, card, target, guessed_rank, outcome):
    actor.is_protected = True
    state.add_log(f"{actor.name} is protected until their next turn.")


def apply_prince(state, actor, card, target, guessed_rank, outcome):
    """Target discards their hand and draws a replacement."""
    target = _resolve_target(state, actor, card, target, outcome)
    if target is None:
        return

    discarded = target.held_card()
    if discarded is None:
        state.add_log(f"{target.name} has no card to discard.")
        return

    target.hand.remove(discarded)
    target.discard_pile.append(discarded)
    state.add_log(f"{target.name} discards the {discarded.name}.")

    if discarded.rank == PRINCESS:
        eliminate(state, target, outcome, "discarded the Princess")
    elif state.deck:
        target.hand.append(state.deck.pop())
        state.add_log(f"{target.name} draws a new card.")
    else:
        state.add_log(f"The deck is empty; {target.name} draws nothing.")


def apply_king(state, actor, card, target, guessed_rank, outcome):
    """Trade hands with the target."""
    target = _resolve_target(state, actor, card, target, outcome)
    if target is None:
        return

    actor.hand, target.hand = list(target.hand), list(actor.hand)
    state.add_log(f"{actor.name} trades hands with {target.name}.")


def apply_countess(state, actor, card, target, guessed_rank, outcome):
    pass


def apply_princess(state, actor, card, target, guessed_rank, outcome):
    eliminate(state, actor, outcome, "discarded the Princess")


EffectHandler = Callable[
    [GameState, Player, Card, Optional[Player], Optional[int], EffectOutcome], None
]

EFFECT_HANDLERS: Dict[int, EffectHandler] = {
    GUARD: apply_guard,
    PRIEST: apply_priest,
    BARON: apply_baron,
    HANDMAID: apply_handmaid,
    PRINCE: apply_prince,
    KING: apply_king,
    COUNTESS: apply_countess,
    PRINCESS: apply_princess,
}


def apply_effect(
    state: GameState,
    actor: Player,
    card: Card,
    target: Optional[Player] = None,
    guessed_rank: Optional[int] = None
) -> EffectOutcome:
    """
    Resolve the effect of a discarded card.

    Args:
        state: Working game state, updated in place
        actor: Player who discarded the card
        card: The discarded card
        target: Target player, if the card takes one
        guessed_rank: Rank named by a Guard

    Returns:
        EffectOutcome describing fizzles, eliminations and private reveals
    """
    outcome = EffectOutcome()
    handler = EFFECT_HANDLERS[card.rank]
    handler(state, actor, card, target, guessed_rank, outcome)
    return outcome

"""
State diff computation for efficient updates.
"""

from typing import Any, Dict, List, Optional

from .models import GameState
from .serialization import sanitize_state

TOP_LEVEL_FIELDS = [
    "version", "deck_count", "has_burned_card", "current_player_index",
    "current_player_id", "is_game_over", "winner", "round_winner",
    "turn_phase", "round_number", "tokens_to_win",
]

PLAYER_FIELDS = [
    "name", "hand_count", "discard_pile", "is_protected",
    "is_eliminated", "tokens", "hand",
]

# Above this many operations a full state is cheaper to send
MAX_PATCH_OPS = 20


def compute_diff(
    old_state: Optional[GameState],
    new_state: GameState,
    viewer_id: Optional[str] = None
) -> List[Dict[str, Any]]:
    """
    Compute a JSON Patch-style diff between two states.

    Args:
        old_state: Previous game state
        new_state: New game state
        viewer_id: ID of the player viewing the state

    Returns:
        List of patch operations
    """
    if old_state is None:
        # First state, no diff needed
        return []

    old_sanitized = sanitize_state(old_state, viewer_id)
    new_sanitized = sanitize_state(new_state, viewer_id)

    ops = []

    for field in TOP_LEVEL_FIELDS:
        old_value = old_sanitized.get(field)
        new_value = new_sanitized.get(field)
        if old_value != new_value:
            ops.append({"op": "replace", "path": f"/{field}", "value": new_value})

    old_players = old_sanitized["players"]
    new_players = new_sanitized["players"]
    if len(old_players) != len(new_players):
        ops.append({"op": "replace", "path": "/players", "value": new_players})
    else:
        for index, (old_player, new_player) in enumerate(zip(old_players, new_players)):
            if old_player == new_player:
                continue
            for field in PLAYER_FIELDS:
                path = f"/players/{index}/{field}"
                if field not in new_player:
                    if field in old_player:
                        ops.append({"op": "remove", "path": path})
                elif field not in old_player:
                    ops.append({"op": "add", "path": path, "value": new_player[field]})
                elif old_player[field] != new_player[field]:
                    ops.append({"op": "replace", "path": path, "value": new_player[field]})

    # The log is append-only; send only the new tail
    old_log = old_sanitized["game_log"]
    new_log = new_sanitized["game_log"]
    if new_log[:len(old_log)] == old_log:
        for entry in new_log[len(old_log):]:
            ops.append({"op": "add", "path": "/game_log/-", "value": entry})
    else:
        ops.append({"op": "replace", "path": "/game_log", "value": new_log})

    return ops


def should_send_full_state(diff_ops: List[Dict[str, Any]]) -> bool:
    """Whether a patch is large enough that a full state should be sent instead."""
    return len(diff_ops) > MAX_PATCH_OPS

"""
WebSocket event models and validation.
"""

import time
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, ValidationError

from ..constants import MAX_GUESS


class EventType(str, Enum):
    """Inbound event types."""
    CREATE_LOBBY = "create_lobby"
    JOIN = "join"
    READY = "ready"
    ADD_BOT = "add_bot"
    START = "start"
    DRAW = "draw"
    PLAY = "play"
    NEXT_ROUND = "next_round"
    REQUEST_STATE = "request_state"
    CHAT = "chat"
    LEAVE = "leave"


class OutboundEventType(str, Enum):
    """Outbound event types."""
    LOBBY_CREATED = "lobby_created"
    LOBBY_JOINED = "lobby_joined"
    LOBBY_UPDATE = "lobby_update"
    PLAYER_LEFT = "player_left"
    STATE_FULL = "state_full"
    STATE_PATCH = "state_patch"
    REVEAL = "reveal"
    ERROR = "error"
    CHAT = "chat"


class ErrorCode(str, Enum):
    """Error codes for client events."""
    INVALID_EVENT = "INVALID_EVENT"
    LOBBY_NOT_FOUND = "LOBBY_NOT_FOUND"
    LOBBY_FULL = "LOBBY_FULL"
    GAME_IN_PROGRESS = "GAME_IN_PROGRESS"
    NOT_HOST = "NOT_HOST"
    NOT_ENOUGH_PLAYERS = "NOT_ENOUGH_PLAYERS"
    ACTION_NOT_ALLOWED = "ACTION_NOT_ALLOWED"
    # engine rejections
    NOT_YOUR_TURN = "NOT_YOUR_TURN"
    WRONG_PHASE = "WRONG_PHASE"
    PLAYER_NOT_FOUND = "PLAYER_NOT_FOUND"
    PLAYER_ELIMINATED = "PLAYER_ELIMINATED"
    OWNERSHIP = "OWNERSHIP"
    COUNTESS_RULE = "COUNTESS_RULE"
    INVALID_TARGET = "INVALID_TARGET"
    INVALID_GUESS = "INVALID_GUESS"
    GAME_OVER = "GAME_OVER"
    INVALID_PLAYERS = "INVALID_PLAYERS"
    INTERNAL = "INTERNAL"


# Inbound event models
class BaseEvent(BaseModel):
    """Base event model."""
    type: EventType


class CreateLobbyEvent(BaseEvent):
    """Create a new lobby and become its host."""
    type: EventType = EventType.CREATE_LOBBY
    name: str = Field(..., min_length=1, max_length=30)


class JoinEvent(BaseEvent):
    """Join lobby event."""
    type: EventType = EventType.JOIN
    lobby_code: str = Field(..., min_length=6, max_length=6)
    name: str = Field(..., min_length=1, max_length=30)


class ReadyEvent(BaseEvent):
    """Toggle readiness."""
    type: EventType = EventType.READY
    ready: bool = True


class AddBotEvent(BaseEvent):
    """Host seats a placeholder bot."""
    type: EventType = EventType.ADD_BOT
    name: Optional[str] = Field(default=None, min_length=1, max_length=30)


class StartEvent(BaseEvent):
    """Start game event."""
    type: EventType = EventType.START


class DrawEvent(BaseEvent):
    """Draw a card."""
    type: EventType = EventType.DRAW


class PlayEvent(BaseEvent):
    """Play a card event."""
    type: EventType = EventType.PLAY
    card_id: str = Field(..., min_length=1)
    target_player_id: Optional[str] = None
    # range checks beyond this belong to the engine, which rejects a Guard guess
    guessed_rank: Optional[int] = Field(default=None, ge=0, le=MAX_GUESS)


class NextRoundEvent(BaseEvent):
    """Deal the next round."""
    type: EventType = EventType.NEXT_ROUND


class RequestStateEvent(BaseEvent):
    """Request full state event."""
    type: EventType = EventType.REQUEST_STATE


class ChatEvent(BaseEvent):
    """Chat message event."""
    type: EventType = EventType.CHAT
    text: str = Field(..., min_length=1, max_length=200)


class LeaveEvent(BaseEvent):
    """Leave the current lobby."""
    type: EventType = EventType.LEAVE


# Union type for all inbound events
InboundEvent = Union[
    CreateLobbyEvent,
    JoinEvent,
    ReadyEvent,
    AddBotEvent,
    StartEvent,
    DrawEvent,
    PlayEvent,
    NextRoundEvent,
    RequestStateEvent,
    ChatEvent,
    LeaveEvent,
]


# Outbound event models
class LobbyMemberInfo(BaseModel):
    id: str
    name: str
    is_host: bool
    is_ready: bool
    is_bot: bool


class LobbyCreatedEvent(BaseModel):
    """Lobby creation confirmation."""
    type: OutboundEventType = OutboundEventType.LOBBY_CREATED
    lobby_code: str
    player_id: str
    is_host: bool = True
    timestamp: float


class LobbyJoinedEvent(BaseModel):
    """Join success confirmation event."""
    type: OutboundEventType = OutboundEventType.LOBBY_JOINED
    lobby_code: str
    player_id: str
    is_host: bool = False
    players: List[LobbyMemberInfo]
    timestamp: float


class LobbyUpdateEvent(BaseModel):
    """Roster or readiness changed."""
    type: OutboundEventType = OutboundEventType.LOBBY_UPDATE
    lobby_code: str
    status: str
    players: List[LobbyMemberInfo]
    timestamp: float


class PlayerLeftEvent(BaseModel):
    type: OutboundEventType = OutboundEventType.PLAYER_LEFT
    player_id: str
    players: List[LobbyMemberInfo]
    timestamp: float


class StateFullEvent(BaseModel):
    """Full state event."""
    type: OutboundEventType = OutboundEventType.STATE_FULL
    state: Dict[str, Any]
    timestamp: float


class PatchOperation(BaseModel):
    """JSON Patch operation."""
    op: str = Field(..., pattern="^(replace|add|remove)$")
    path: str
    value: Optional[Any] = None


class StatePatchEvent(BaseModel):
    """State patch event."""
    type: OutboundEventType = OutboundEventType.STATE_PATCH
    version: int
    ops: List[PatchOperation]
    timestamp: float


class RevealEvent(BaseModel):
    """Private card reveal for the Priest's player."""
    type: OutboundEventType = OutboundEventType.REVEAL
    target_id: str
    card: Dict[str, Any]
    timestamp: float


class ErrorEvent(BaseModel):
    """Error event."""
    type: OutboundEventType = OutboundEventType.ERROR
    code: ErrorCode
    message: str
    timestamp: float


class ChatMessageEvent(BaseModel):
    """Chat message event."""
    type: OutboundEventType = OutboundEventType.CHAT
    player_id: str
    player_name: str
    text: str
    timestamp: float


EVENT_MAP = {
    EventType.CREATE_LOBBY: CreateLobbyEvent,
    EventType.JOIN: JoinEvent,
    EventType.READY: ReadyEvent,
    EventType.ADD_BOT: AddBotEvent,
    EventType.START: StartEvent,
    EventType.DRAW: DrawEvent,
    EventType.PLAY: PlayEvent,
    EventType.NEXT_ROUND: NextRoundEvent,
    EventType.REQUEST_STATE: RequestStateEvent,
    EventType.CHAT: ChatEvent,
    EventType.LEAVE: LeaveEvent,
}


def parse_inbound_event(data: Any) -> InboundEvent:
    """
    Parse raw event data into appropriate event model.

    Args:
        data: Decoded JSON payload from the WebSocket

    Returns:
        Parsed event model

    Raises:
        ValueError: If event type is invalid or data is malformed
    """
    if not isinstance(data, dict):
        raise ValueError("Event must be a JSON object")

    event_type = data.get("type")
    if not event_type:
        raise ValueError("Missing event type")

    try:
        event_type = EventType(event_type)
    except ValueError:
        raise ValueError(f"Invalid event type: {event_type}")

    event_class = EVENT_MAP[event_type]
    try:
        return event_class(**data)
    except ValidationError as e:
        raise ValueError(f"Invalid event data: {e.errors()[0]['msg']}")


def to_error_code(code: Optional[str]) -> ErrorCode:
    try:
        return ErrorCode(code)
    except ValueError:
        return ErrorCode.INTERNAL


def create_error_event(code: ErrorCode, message: str) -> ErrorEvent:
    """Create an error event."""
    return ErrorEvent(code=code, message=message, timestamp=time.time())


def create_lobby_created_event(lobby_code: str, player_id: str) -> LobbyCreatedEvent:
    return LobbyCreatedEvent(lobby_code=lobby_code, player_id=player_id, timestamp=time.time())


def create_lobby_joined_event(
    lobby_code: str, player_id: str, players: List[Dict[str, Any]]
) -> LobbyJoinedEvent:
    """Create a join success event."""
    return LobbyJoinedEvent(
        lobby_code=lobby_code,
        player_id=player_id,
        players=[LobbyMemberInfo(**p) for p in players],
        timestamp=time.time()
    )


def create_lobby_update_event(
    lobby_code: str, status: str, players: List[Dict[str, Any]]
) -> LobbyUpdateEvent:
    return LobbyUpdateEvent(
        lobby_code=lobby_code,
        status=status,
        players=[LobbyMemberInfo(**p) for p in players],
        timestamp=time.time()
    )


def create_player_left_event(player_id: str, players: List[Dict[str, Any]]) -> PlayerLeftEvent:
    return PlayerLeftEvent(
        player_id=player_id,
        players=[LobbyMemberInfo(**p) for p in players],
        timestamp=time.time()
    )


def create_state_full_event(state: Dict[str, Any]) -> StateFullEvent:
    """Create a full state event."""
    return StateFullEvent(state=state, timestamp=time.time())


def create_state_patch_event(version: int, ops: List[Dict]) -> StatePatchEvent:
    """Create a state patch event."""
    return StatePatchEvent(
        version=version,
        ops=[PatchOperation(**op) for op in ops],
        timestamp=time.time()
    )


def create_reveal_event(target_id: str, card: Dict[str, Any]) -> RevealEvent:
    return RevealEvent(target_id=target_id, card=card, timestamp=time.time())


def create_chat_event(player_id: str, player_name: str, text: str) -> ChatMessageEvent:
    """Create a chat message event."""
    return ChatMessageEvent(
        player_id=player_id,
        player_name=player_name,
        text=text,
        timestamp=time.time()
    )

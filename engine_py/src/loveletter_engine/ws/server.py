"""
FastAPI WebSocket relay for Love Letter lobbies.
"""

import asyncio
import logging
import os
import random
import time
import uuid
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

import orjson
from fastapi import FastAPI, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from ..bots import RandomBot
from ..constants import MAX_PLAYERS, PHASE_DRAW, PHASE_PLAY
from ..diff import compute_diff, should_send_full_state
from ..engine import ActionResult, draw_card, initialize_game, play_card, start_new_round
from ..errors import GameError
from ..models import GameState
from ..rules import RuleConfig, default_rules
from ..serialization import card_to_dict, sanitize_state
from .events import (
    AddBotEvent, ChatEvent, CreateLobbyEvent, DrawEvent, ErrorCode, JoinEvent,
    LeaveEvent, NextRoundEvent, PlayEvent, ReadyEvent, RequestStateEvent,
    StartEvent, create_chat_event, create_error_event, create_lobby_created_event,
    create_lobby_joined_event, create_lobby_update_event, create_player_left_event,
    create_reveal_event, create_state_full_event, create_state_patch_event,
    parse_inbound_event, to_error_code
)

logger = logging.getLogger(__name__)

LOBBY_CODE_ALPHABET = 'ABCDEFGHJKLMNPQRSTUVWXYZ23456789'  # no look-alike characters
LOBBY_CODE_LENGTH = 6

LOBBY_WAITING = 'waiting'
LOBBY_PLAYING = 'playing'
LOBBY_ENDED = 'ended'


def _encode(event: Any) -> str:
    if isinstance(event, BaseModel):
        event = event.model_dump(mode="json")
    return orjson.dumps(event).decode()


class ConnectionManager:
    """Tracks open WebSockets by player id."""

    def __init__(self):
        self.active_connections: Dict[str, WebSocket] = {}

    async def connect(self, websocket: WebSocket, player_id: str):
        await websocket.accept()
        self.active_connections[player_id] = websocket
        logger.info(f"Player {player_id} connected")

    def disconnect(self, player_id: str):
        if player_id in self.active_connections:
            del self.active_connections[player_id]
            logger.info(f"Player {player_id} disconnected")

    async def send(self, player_id: str, event: Any) -> bool:
        websocket = self.active_connections.get(player_id)
        if websocket is None:
            return False
        try:
            await websocket.send_text(_encode(event))
            return True
        except Exception as e:
            logger.error(f"Error sending message to {player_id}: {e}")
            self.disconnect(player_id)
            return False


@dataclass
class LobbyMember:
    id: str
    name: str
    is_host: bool = False
    is_ready: bool = False
    is_bot: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "is_host": self.is_host,
            "is_ready": self.is_ready,
            "is_bot": self.is_bot,
        }


@dataclass
class Lobby:
    code: str
    members: List[LobbyMember] = field(default_factory=list)
    status: str = LOBBY_WAITING
    state: Optional[GameState] = None
    created_at: float = field(default_factory=time.time)
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    last_sent: Dict[str, GameState] = field(default_factory=dict)  # per viewer, for diffs
    bots: Dict[str, RandomBot] = field(default_factory=dict)

    def member(self, player_id: str) -> Optional[LobbyMember]:
        for member in self.members:
            if member.id == player_id:
                return member
        return None

    def humans(self) -> List[LobbyMember]:
        return [m for m in self.members if not m.is_bot]

    def roster(self) -> List[Dict[str, Any]]:
        return [m.to_dict() for m in self.members]

    def all_ready(self) -> bool:
        return all(m.is_ready for m in self.members)


class LobbyManager:
    """Owns lobbies and routes player events to the game engine.

    All engine calls for one lobby run under that lobby's lock, so a match
    only ever sees one writer at a time.
    """

    def __init__(
        self,
        connections: ConnectionManager,
        rules: Optional[RuleConfig] = None,
        bot_delay: float = 0.8,
        max_players: int = MAX_PLAYERS,
        rng: Optional[random.Random] = None
    ):
        self.connections = connections
        self.rules = rules or default_rules
        self.bot_delay = bot_delay
        self.max_players = max_players
        # lobby codes and shuffle seeds; clients never choose either
        self.rng = rng or random.SystemRandom()
        self.lobbies: Dict[str, Lobby] = {}
        self.player_lobby: Dict[str, str] = {}
        self._bot_tasks: Dict[str, asyncio.Task] = {}

    # -- helpers -----------------------------------------------------------

    def generate_code(self) -> str:
        while True:
            code = ''.join(
                self.rng.choice(LOBBY_CODE_ALPHABET) for _ in range(LOBBY_CODE_LENGTH)
            )
            if code not in self.lobbies:
                return code

    def deal_seed(self) -> int:
        return self.rng.getrandbits(64)

    def lobby_for(self, player_id: str) -> Optional[Lobby]:
        code = self.player_lobby.get(player_id)
        return self.lobbies.get(code) if code else None

    async def send_error(self, player_id: str, code: ErrorCode, message: str):
        await self.connections.send(player_id, create_error_event(code, message))

    async def broadcast(self, lobby: Lobby, event: Any):
        for member in lobby.humans():
            await self.connections.send(member.id, event)

    async def broadcast_lobby(self, lobby: Lobby):
        await self.broadcast(
            lobby, create_lobby_update_event(lobby.code, lobby.status, lobby.roster())
        )

    async def broadcast_state(self, lobby: Lobby):
        """Send each human member their own view of the lobby's game state."""
        state = lobby.state
        if state is None:
            return
        for member in lobby.humans():
            old_state = lobby.last_sent.get(member.id)
            if old_state is None:
                event = create_state_full_event(sanitize_state(state, member.id))
            else:
                diff_ops = compute_diff(old_state, state, member.id)
                if should_send_full_state(diff_ops):
                    event = create_state_full_event(sanitize_state(state, member.id))
                else:
                    event = create_state_patch_event(state.version, diff_ops)
            if await self.connections.send(member.id, event):
                lobby.last_sent[member.id] = state

    # -- event dispatch ----------------------------------------------------

    async def handle_event(self, player_id: str, event) -> None:
        """Handle an inbound event."""
        if isinstance(event, CreateLobbyEvent):
            await self.create_lobby(player_id, event)
        elif isinstance(event, JoinEvent):
            await self.join_lobby(player_id, event)
        elif isinstance(event, ReadyEvent):
            await self.set_ready(player_id, event)
        elif isinstance(event, AddBotEvent):
            await self.add_bot(player_id, event)
        elif isinstance(event, StartEvent):
            await self.start_match(player_id, event)
        elif isinstance(event, DrawEvent):
            await self.game_action(player_id, lambda state: draw_card(state, player_id))
        elif isinstance(event, PlayEvent):
            await self.game_action(player_id, lambda state: play_card(
                state, player_id, event.card_id, event.target_player_id, event.guessed_rank
            ))
        elif isinstance(event, NextRoundEvent):
            await self.next_round(player_id, event)
        elif isinstance(event, RequestStateEvent):
            await self.request_state(player_id)
        elif isinstance(event, ChatEvent):
            await self.chat(player_id, event)
        elif isinstance(event, LeaveEvent):
            await self.leave(player_id)
        else:
            raise ValueError(f"Unhandled event type: {type(event)}")

    # -- lobby lifecycle ---------------------------------------------------

    async def create_lobby(self, player_id: str, event: CreateLobbyEvent):
        if self.lobby_for(player_id):
            await self.send_error(player_id, ErrorCode.ACTION_NOT_ALLOWED, "Already in a lobby")
            return

        lobby = Lobby(code=self.generate_code())
        lobby.members.append(LobbyMember(id=player_id, name=event.name, is_host=True))
        self.lobbies[lobby.code] = lobby
        self.player_lobby[player_id] = lobby.code

        await self.connections.send(player_id, create_lobby_created_event(lobby.code, player_id))
        await self.broadcast_lobby(lobby)
        logger.info(f"🎮 Lobby {lobby.code} created by {event.name}")

    async def join_lobby(self, player_id: str, event: JoinEvent):
        code = event.lobby_code.upper()
        lobby = self.lobbies.get(code)
        if not lobby:
            await self.send_error(player_id, ErrorCode.LOBBY_NOT_FOUND, "This lobby does not exist")
            return
        if self.lobby_for(player_id):
            await self.send_error(player_id, ErrorCode.ACTION_NOT_ALLOWED, "Already in a lobby")
            return

        async with lobby.lock:
            if len(lobby.members) >= self.max_players:
                await self.send_error(player_id, ErrorCode.LOBBY_FULL, "This lobby is full")
                return
            if lobby.status != LOBBY_WAITING:
                await self.send_error(
                    player_id, ErrorCode.GAME_IN_PROGRESS, "This game has already started"
                )
                return

            lobby.members.append(LobbyMember(id=player_id, name=event.name))
            self.player_lobby[player_id] = code

        await self.connections.send(
            player_id, create_lobby_joined_event(code, player_id, lobby.roster())
        )
        await self.broadcast_lobby(lobby)
        logger.info(f"{event.name} joined lobby {code}")

    async def set_ready(self, player_id: str, event: ReadyEvent):
        lobby = self.lobby_for(player_id)
        if not lobby or lobby.status != LOBBY_WAITING:
            await self.send_error(player_id, ErrorCode.ACTION_NOT_ALLOWED, "Not in a waiting lobby")
            return

        async with lobby.lock:
            lobby.member(player_id).is_ready = event.ready
        await self.broadcast_lobby(lobby)

        if len(lobby.members) >= self.rules.min_players and lobby.all_ready():
            await self._start(lobby, player_id)

    async def add_bot(self, player_id: str, event: AddBotEvent):
        lobby = self.lobby_for(player_id)
        if not lobby or lobby.status != LOBBY_WAITING:
            await self.send_error(player_id, ErrorCode.ACTION_NOT_ALLOWED, "Not in a waiting lobby")
            return
        if not lobby.member(player_id).is_host:
            await self.send_error(player_id, ErrorCode.NOT_HOST, "Only the host can add bots")
            return

        async with lobby.lock:
            if len(lobby.members) >= self.max_players:
                await self.send_error(player_id, ErrorCode.LOBBY_FULL, "This lobby is full")
                return
            bot_id = f"bot-{uuid.uuid4().hex[:8]}"
            name = event.name or f"Bot {len(lobby.members) + 1}"
            lobby.members.append(LobbyMember(id=bot_id, name=name, is_ready=True, is_bot=True))
            lobby.bots[bot_id] = RandomBot(bot_id)

        await self.broadcast_lobby(lobby)
        logger.info(f"Bot {name} added to lobby {lobby.code}")

    async def start_match(self, player_id: str, event: StartEvent):
        lobby = self.lobby_for(player_id)
        if not lobby or lobby.status != LOBBY_WAITING:
            await self.send_error(player_id, ErrorCode.ACTION_NOT_ALLOWED, "Not in a waiting lobby")
            return
        if not lobby.member(player_id).is_host:
            await self.send_error(player_id, ErrorCode.NOT_HOST, "Only the host can start the game")
            return
        if len(lobby.members) < self.rules.min_players:
            await self.send_error(
                player_id, ErrorCode.NOT_ENOUGH_PLAYERS,
                f"At least {self.rules.min_players} players are needed"
            )
            return
        await self._start(lobby, player_id)

    async def _start(self, lobby: Lobby, player_id: str):
        async with lobby.lock:
            if lobby.status != LOBBY_WAITING:
                return
            try:
                lobby.state = initialize_game(
                    [m.id for m in lobby.members],
                    [m.name for m in lobby.members],
                    seed=self.deal_seed(),
                    rules=self.rules
                )
            except GameError as e:
                await self.send_error(player_id, to_error_code(e.code), e.message)
                return
            lobby.status = LOBBY_PLAYING
            lobby.last_sent = {}

            await self.broadcast_lobby(lobby)
            await self.broadcast_state(lobby)
        logger.info(f"🎮 Game started in lobby {lobby.code} with {len(lobby.members)} players")
        self._schedule_bots(lobby)

    # -- game actions ------------------------------------------------------

    async def game_action(self, player_id: str, action: Callable[[GameState], ActionResult]):
        lobby = self.lobby_for(player_id)
        if not lobby or lobby.state is None or lobby.status != LOBBY_PLAYING:
            await self.send_error(player_id, ErrorCode.ACTION_NOT_ALLOWED, "No game in progress")
            return

        async with lobby.lock:
            result = action(lobby.state)
            await self._apply_result(lobby, player_id, result)
        self._schedule_bots(lobby)

    async def next_round(self, player_id: str, event: NextRoundEvent):
        await self.game_action(player_id, lambda state: start_new_round(state, self.deal_seed()))

    async def _apply_result(self, lobby: Lobby, player_id: str, result: ActionResult):
        """Install an accepted result, or report a rejection to its sender. Caller holds the lock."""
        if not result.success:
            logger.warning(f"Rejected action from {player_id} in {lobby.code}: {result.error_message}")
            await self.send_error(player_id, to_error_code(result.error_code), result.error_message)
            return

        lobby.state = result.state
        if result.state.is_game_over:
            lobby.status = LOBBY_ENDED
            logger.info(f"Match over in lobby {lobby.code}, winner {result.state.winner}")

        await self.broadcast_state(lobby)
        if result.reveal is not None:
            await self.connections.send(
                result.reveal.viewer_id,
                create_reveal_event(result.reveal.target_id, card_to_dict(result.reveal.card))
            )
        if lobby.status == LOBBY_ENDED:
            await self.broadcast_lobby(lobby)

    async def request_state(self, player_id: str):
        lobby = self.lobby_for(player_id)
        if not lobby or lobby.state is None:
            await self.send_error(player_id, ErrorCode.ACTION_NOT_ALLOWED, "No game in progress")
            return
        await self.connections.send(
            player_id, create_state_full_event(sanitize_state(lobby.state, player_id))
        )
        lobby.last_sent[player_id] = lobby.state

    async def chat(self, player_id: str, event: ChatEvent):
        lobby = self.lobby_for(player_id)
        if not lobby:
            await self.send_error(player_id, ErrorCode.ACTION_NOT_ALLOWED, "Not in a lobby")
            return
        member = lobby.member(player_id)
        await self.broadcast(lobby, create_chat_event(player_id, member.name, event.text))

    # -- bots --------------------------------------------------------------

    def _bot_to_move(self, lobby: Lobby) -> Optional[RandomBot]:
        state = lobby.state
        if lobby.status != LOBBY_PLAYING or state is None:
            return None
        if state.turn_phase not in (PHASE_DRAW, PHASE_PLAY):
            return None
        current = state.current_player
        return lobby.bots.get(current.id) if current else None

    def _schedule_bots(self, lobby: Lobby):
        if self._bot_to_move(lobby) is None:
            return
        task = self._bot_tasks.get(lobby.code)
        if task and not task.done():
            return
        self._bot_tasks[lobby.code] = asyncio.create_task(self._run_bots(lobby.code))

    async def _run_bots(self, code: str):
        """Let bots take their turns until a human (or nobody) is to move."""
        try:
            while True:
                await asyncio.sleep(self.bot_delay)
                lobby = self.lobbies.get(code)
                if lobby is None:
                    return
                async with lobby.lock:
                    bot = self._bot_to_move(lobby)
                    if bot is None:
                        return
                    action = bot.choose_action(lobby.state)
                    if action is None:
                        logger.warning(f"Bot {bot.player_id} returned no action")
                        return
                    logger.info(f"🤖 Bot {bot.player_id} chose: {action}")
                    if action.type == 'draw':
                        result = draw_card(lobby.state, bot.player_id)
                    else:
                        result = play_card(lobby.state, bot.player_id, **action.data)
                    if not result.success:
                        logger.error(f"Bot {bot.player_id} action failed: {result.error_message}")
                        return
                    await self._apply_result(lobby, bot.player_id, result)
        except asyncio.CancelledError:
            logger.info(f"Bot automation cancelled for lobby {code}")
            raise

    # -- departures and cleanup --------------------------------------------

    async def leave(self, player_id: str):
        lobby = self.lobby_for(player_id)
        self.player_lobby.pop(player_id, None)
        if not lobby:
            return

        async with lobby.lock:
            member = lobby.member(player_id)
            if member:
                lobby.members.remove(member)
            lobby.last_sent.pop(player_id, None)

            if not lobby.humans():
                self._remove_lobby(lobby.code)
                return

            if member and member.is_host:
                lobby.humans()[0].is_host = True
            if lobby.status == LOBBY_PLAYING:
                # no resume: a departure ends the match
                lobby.status = LOBBY_ENDED
                logger.info(f"Match in lobby {lobby.code} ended: {player_id} left")

        await self.broadcast(lobby, create_player_left_event(player_id, lobby.roster()))
        await self.broadcast_lobby(lobby)

    async def disconnect(self, player_id: str):
        self.connections.disconnect(player_id)
        await self.leave(player_id)

    def _remove_lobby(self, code: str):
        lobby = self.lobbies.pop(code, None)
        if lobby is None:
            return
        for member in lobby.members:
            self.player_lobby.pop(member.id, None)
        task = self._bot_tasks.pop(code, None)
        if task and not task.done():
            task.cancel()
        logger.info(f"🗑️ Lobby {code} removed")

    def sweep_stale(self, max_age: float, now: Optional[float] = None) -> List[str]:
        """Remove lobbies created more than max_age seconds ago."""
        now = time.time() if now is None else now
        stale = [code for code, lobby in self.lobbies.items() if now - lobby.created_at > max_age]
        for code in stale:
            self._remove_lobby(code)
        return stale


async def _sweep_loop(manager: LobbyManager, interval: float, max_age: float):
    while True:
        await asyncio.sleep(interval)
        removed = manager.sweep_stale(max_age)
        if removed:
            logger.info(f"Removed {len(removed)} inactive lobbies")


def create_app(manager: Optional[LobbyManager] = None) -> FastAPI:
    """Build the relay application around an injected (or fresh) LobbyManager."""
    if manager is None:
        manager = LobbyManager(
            ConnectionManager(),
            bot_delay=float(os.getenv("BOT_DELAY", "0.8"))
        )
    sweep_interval = float(os.getenv("LOBBY_SWEEP_INTERVAL", str(30 * 60)))
    max_age = float(os.getenv("LOBBY_MAX_AGE", str(2 * 60 * 60)))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        sweeper = asyncio.create_task(_sweep_loop(manager, sweep_interval, max_age))
        try:
            yield
        finally:
            sweeper.cancel()

    app = FastAPI(title="Love Letter Relay", version="1.0.0", lifespan=lifespan)
    app.state.lobby_manager = manager

    origins = os.getenv("ALLOWED_ORIGINS", "*").split(",")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[origin.strip() for origin in origins],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/")
    async def root():
        return {"message": "Love Letter relay is running", "version": "1.0.0"}

    @app.get("/health")
    async def health_check():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "lobbies": len(manager.lobbies),
            "connections": len(manager.connections.active_connections),
        }

    @app.websocket("/ws")
    async def websocket_endpoint(websocket: WebSocket):
        """Main WebSocket endpoint."""
        player_id = str(uuid.uuid4())
        await manager.connections.connect(websocket, player_id)

        try:
            while True:
                raw_data = await websocket.receive_text()
                try:
                    event = parse_inbound_event(orjson.loads(raw_data))
                except ValueError as e:
                    # orjson.JSONDecodeError is a ValueError too
                    await manager.send_error(player_id, ErrorCode.INVALID_EVENT, str(e))
                    continue

                try:
                    await manager.handle_event(player_id, event)
                except Exception:
                    logger.exception(f"Error handling {event.type.value} from {player_id}")
                    await manager.send_error(player_id, ErrorCode.INTERNAL, "Internal server error")
        except WebSocketDisconnect:
            logger.info(f"WebSocket disconnected for player {player_id}")
        finally:
            await manager.disconnect(player_id)

    return app

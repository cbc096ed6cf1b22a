"""Room lifecycle: roster, authoritative cards, the draw pool and win claims.

Cards handed out by :meth:`RoomManager.join_room` are the only ones used to
judge a bingo call. A card a client sends along with its call is a display
copy; a mismatch is logged and ignored. A dealt card stays with its player
across rounds until they join again while no game is running.
"""

from __future__ import annotations

import logging
import string
import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .card import MAX_NUMBER, Card, column_letter, generate_card
from .errors import CardNotAssignedError, GameNotActiveError, NotAuthorizedError, RoomNotFoundError
from .patterns import Pattern
from .rng import RandomSource, create_rng, derive_room_seed
from .serialize import card_hash, card_to_json
from .store import InMemoryRoomStore, RoomStore
from .transport import (
    BINGO_WINNER,
    GAME_MESSAGE,
    GAME_RESET,
    GAME_STARTED,
    NUMBER_DRAWN,
    PLAYER_JOINED,
    PLAYERS_UPDATED,
    ROOM_CREATED,
    RecordingTransport,
    Transport,
)
from .verify import find_winning_pattern

logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits
ALL_DRAWN_MESSAGE = "All numbers have been drawn!"


def full_pool() -> List[int]:
    return list(range(1, MAX_NUMBER + 1))


@dataclass
class Room:
    code: str
    host_id: str
    rng: RandomSource = field(repr=False)
    players: Dict[str, str] = field(default_factory=dict)
    cards: Dict[str, Card] = field(default_factory=dict, repr=False)
    drawn: List[int] = field(default_factory=list)
    available: List[int] = field(default_factory=full_pool, repr=False)
    active: bool = False
    winner: Optional[str] = None
    winning_pattern: Optional[str] = None

    def player_names(self) -> List[str]:
        return list(self.players.values())

    def clear_round(self) -> None:
        self.drawn.clear()
        self.available = full_pool()
        self.winner = None
        self.winning_pattern = None

    def snapshot(self) -> Dict[str, Any]:
        return {
            "roomCode": self.code,
            "host": self.players.get(self.host_id),
            "players": self.player_names(),
            "drawn": list(self.drawn),
            "remaining": len(self.available),
            "active": self.active,
            "winner": self.winner,
            "pattern": self.winning_pattern,
        }


class RoomManager:
    def __init__(
        self,
        store: Optional[RoomStore] = None,
        transport: Optional[Transport] = None,
        *,
        rng_engine: str = "py_random",
        seed: Optional[int] = None,
        code_length: int = 6,
    ):
        self.store = store if store is not None else InMemoryRoomStore()
        self.transport = transport if transport is not None else RecordingTransport()
        self.rng_engine = rng_engine
        self.seed = seed
        self.code_length = code_length
        self._code_rng = self._rng_for("*", "room-codes")
        self._lock = threading.RLock()

    def _rng_for(self, room_code: str, purpose: str) -> RandomSource:
        if self.seed is None:
            return create_rng(self.rng_engine)
        return create_rng(self.rng_engine, derive_room_seed(self.seed, room_code, purpose))

    def _new_code(self) -> str:
        while True:
            code = "".join(
                CODE_ALPHABET[self._code_rng.randint(0, len(CODE_ALPHABET) - 1)]
                for _ in range(self.code_length)
            )
            if self.store.get(code) is None:
                return code

    def _require(self, room_code: str) -> Room:
        room = self.store.get(normalize_code(room_code))
        if room is None:
            raise RoomNotFoundError()
        return room

    def _require_host(self, room_code: str, player_id: str) -> Room:
        room = self._require(room_code)
        if player_id != room.host_id:
            raise NotAuthorizedError()
        return room

    def _save(self, room: Room) -> None:
        self.store.set(room.code, room)

    def _publish(self, room: Room, event: str, payload: Dict[str, Any]) -> None:
        self.transport.publish(room.code, event, payload)

    def get_room(self, room_code: str) -> Room:
        with self._lock:
            return self._require(room_code)

    def create_room(self, player_name: str, player_id: str) -> str:
        with self._lock:
            code = self._new_code()
            room = Room(code=code, host_id=player_id, rng=self._rng_for(code, "cards"))
            room.players[player_id] = player_name
            self._save(room)
            logger.info("room %s created by %s", code, player_name)
            self._publish(room, ROOM_CREATED, {"roomCode": code, "players": room.player_names()})
            return code

    def join_room(self, room_code: str, player_name: str, player_id: str) -> Tuple[Card, List[str]]:
        with self._lock:
            room = self._require(room_code)
            room.players[player_id] = player_name
            card = room.cards.get(player_id)
            if card is None or not room.active:
                card = generate_card(room.rng)
                room.cards[player_id] = card
            self._save(room)
            logger.info("%s joined room %s (%d players)", player_name, room.code, len(room.players))
            self._publish(
                room,
                PLAYER_JOINED,
                {"players": room.player_names(), "newPlayer": player_name},
            )
            return card_to_json(card), room.player_names()

    def leave_room(self, room_code: str, player_id: str) -> None:
        with self._lock:
            room = self._require(room_code)
            name = room.players.pop(player_id, None)
            room.cards.pop(player_id, None)
            if name is None:
                return
            if not room.players:
                self.store.delete(room.code)
                logger.info("room %s closed, last player %s left", room.code, name)
                return
            if player_id == room.host_id:
                room.host_id = next(iter(room.players))
                logger.info("room %s host passed to %s", room.code, room.players[room.host_id])
            self._save(room)
            self._publish(
                room,
                PLAYERS_UPDATED,
                {"players": room.player_names(), "host": room.players[room.host_id]},
            )

    def start_game(self, room_code: str, player_id: str) -> None:
        with self._lock:
            room = self._require_host(room_code, player_id)
            room.clear_round()
            room.active = True
            self._save(room)
            logger.info("room %s game started", room.code)
            self._publish(room, GAME_STARTED, {})

    def reset_game(self, room_code: str, player_id: str) -> None:
        with self._lock:
            room = self._require_host(room_code, player_id)
            room.clear_round()
            room.active = False
            self._save(room)
            logger.info("room %s game reset", room.code)
            self._publish(room, GAME_RESET, {})

    def draw_number(self, room_code: str, player_id: str) -> Optional[int]:
        """Draw the next number, or return None once the pool is exhausted."""
        with self._lock:
            room = self._require_host(room_code, player_id)
            if not room.active:
                raise NotAuthorizedError()
            if not room.available:
                self._publish(room, GAME_MESSAGE, {"message": ALL_DRAWN_MESSAGE})
                return None
            number = room.rng.choice(room.available)
            room.available.remove(number)
            room.drawn.append(number)
            self._save(room)
            logger.debug("room %s drew %s %d", room.code, column_letter(number), number)
            self._publish(room, NUMBER_DRAWN, {"number": number, "letter": column_letter(number)})
            return number

    def call_bingo(
        self,
        room_code: str,
        player_id: str,
        player_name: Optional[str] = None,
        card: Optional[Any] = None,
    ) -> Optional[Pattern]:
        with self._lock:
            room = self._require(room_code)
            if not room.active:
                raise GameNotActiveError()
            if player_id not in room.players:
                logger.warning("room %s: bingo call from unknown player %s", room.code, player_id)
                raise NotAuthorizedError()
            name = player_name or room.players[player_id]
            authoritative = room.cards.get(player_id)
            if authoritative is None:
                logger.warning("room %s: %s called bingo without an assigned card", room.code, name)
                raise CardNotAssignedError()
            if card is not None and card != authoritative:
                logger.warning(
                    "room %s: card sent by %s differs from assigned card %s",
                    room.code,
                    name,
                    card_hash(authoritative),
                )
            pattern = find_winning_pattern(authoritative, set(room.drawn))
            if pattern is None:
                logger.warning("room %s: rejected bingo call from %s", room.code, name)
                return None
            room.active = False
            room.winner = name
            room.winning_pattern = pattern.name
            self._save(room)
            logger.info("room %s won by %s with %s", room.code, name, pattern.name)
            self._publish(room, BINGO_WINNER, {"winner": name, "pattern": pattern.name})
            return pattern


def normalize_code(room_code: str) -> str:
    return (room_code or "").strip().upper()

"""Room event fan-out.

The room manager publishes events; a transport delivers them to everyone
subscribed to the room's channel (``room-<CODE>``).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Protocol

from flask_socketio import SocketIO

logger = logging.getLogger(__name__)

ROOM_CREATED = "room-created"
PLAYER_JOINED = "player-joined"
PLAYERS_UPDATED = "players-updated"
GAME_STARTED = "game-started"
GAME_RESET = "game-reset"
NUMBER_DRAWN = "number-drawn"
GAME_MESSAGE = "game-message"
BINGO_WINNER = "bingo-winner"


def channel_name(room_code: str) -> str:
    return f"room-{room_code}"


class Transport(Protocol):
    def publish(self, room_code: str, event: str, payload: Dict[str, Any]) -> None: ...


@dataclass
class PublishedEvent:
    channel: str
    event: str
    payload: Dict[str, Any]


class RecordingTransport:
    """Keeps every published event in memory."""

    def __init__(self) -> None:
        self.events: List[PublishedEvent] = []

    def publish(self, room_code: str, event: str, payload: Dict[str, Any]) -> None:
        self.events.append(PublishedEvent(channel_name(room_code), event, dict(payload)))

    def names(self) -> List[str]:
        return [e.event for e in self.events]

    def last(self, event: str) -> PublishedEvent:
        for published in reversed(self.events):
            if published.event == event:
                return published
        raise LookupError(f"No {event!r} event was published")


class SocketIOTransport:
    def __init__(self, socketio: SocketIO):
        self.socketio = socketio

    def publish(self, room_code: str, event: str, payload: Dict[str, Any]) -> None:
        channel = channel_name(room_code)
        logger.debug("emit %s to %s", event, channel)
        self.socketio.emit(event, payload, to=channel)

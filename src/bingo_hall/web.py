"""Flask JSON API and Socket.IO channel subscriptions for bingo rooms."""

from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from flask import Flask, jsonify, request
from flask_socketio import SocketIO, join_room, leave_room

from .card import column_letter
from .errors import BadRequestError, BingoHallError, RoomNotFoundError
from .rooms import RoomManager, normalize_code
from .serialize import card_from_json
from .store import InMemoryRoomStore
from .transport import SocketIOTransport, channel_name
from .verify import find_winning_pattern, marked_values

logger = logging.getLogger(__name__)


def _payload() -> Dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise BadRequestError("Expected a JSON object body")
    return data


def _field(data: Mapping[str, Any], name: str) -> Any:
    value = data.get(name)
    if value is None or value == "":
        raise BadRequestError(f"Missing field: {name}")
    return value


def build_manager(settings: Mapping[str, Any], socketio: SocketIO) -> RoomManager:
    seed = settings.get("seed") or {}
    return RoomManager(
        InMemoryRoomStore(ttl_sec=float(settings.get("room_ttl_sec", 0) or 0)),
        SocketIOTransport(socketio),
        rng_engine=str(seed.get("engine") or "py_random"),
        seed=seed.get("value"),
        code_length=int(settings.get("room_code_length", 6)),
    )


def create_app(settings: Optional[Mapping[str, Any]] = None, manager: Optional[RoomManager] = None) -> Flask:
    settings = settings or {}
    app = Flask(__name__)
    socketio = SocketIO(app, cors_allowed_origins=settings.get("cors_origins", "*"))
    if manager is None:
        manager = build_manager(settings, socketio)
    app.extensions["bingo_rooms"] = manager

    @app.errorhandler(BingoHallError)
    def handle_domain_error(exc: BingoHallError):
        if exc.status_code >= 500:
            logger.error("request failed: %s", exc)
        return jsonify({"error": str(exc)}), exc.status_code

    @app.get("/healthz")
    def healthz():
        return jsonify({"ok": True})

    @app.post("/api/create-room")
    def create_room():
        data = _payload()
        code = manager.create_room(_field(data, "playerName"), _field(data, "playerId"))
        return jsonify({"roomCode": code, "isHost": True})

    @app.post("/api/join-room")
    def join_room_route():
        data = _payload()
        card, players = manager.join_room(
            _field(data, "roomCode"), _field(data, "playerName"), _field(data, "playerId")
        )
        return jsonify({"success": True, "card": card, "players": players})

    @app.post("/api/leave-room")
    def leave_room_route():
        data = _payload()
        manager.leave_room(_field(data, "roomCode"), _field(data, "playerId"))
        return jsonify({"success": True})

    @app.post("/api/start-game")
    def start_game():
        data = _payload()
        manager.start_game(_field(data, "roomCode"), _field(data, "playerId"))
        return jsonify({"success": True})

    @app.post("/api/reset-game")
    def reset_game():
        data = _payload()
        manager.reset_game(_field(data, "roomCode"), _field(data, "playerId"))
        return jsonify({"success": True})

    @app.post("/api/draw-number")
    def draw_number():
        data = _payload()
        number = manager.draw_number(_field(data, "roomCode"), _field(data, "playerId"))
        if number is None:
            return jsonify({"message": "All numbers drawn"})
        return jsonify({"number": number, "letter": column_letter(number)})

    @app.post("/api/bingo-called")
    def bingo_called():
        data = _payload()
        pattern = manager.call_bingo(
            _field(data, "roomCode"),
            _field(data, "playerId"),
            data.get("playerName"),
            data.get("card"),
        )
        if pattern is None:
            return jsonify({"success": False})
        return jsonify({"success": True, "pattern": pattern.name})

    @app.post("/api/check-card")
    def check_card():
        data = _payload()
        card = card_from_json(_field(data, "card"))
        if "marked" in data:
            try:
                positions = [(int(r), int(c)) for r, c in data["marked"]]
            except (TypeError, ValueError) as exc:
                raise BadRequestError("marked must be a list of [row, col] pairs") from exc
            values = marked_values(card, positions)
        else:
            drawn = data.get("drawn") or []
            if not isinstance(drawn, list) or not all(isinstance(n, int) for n in drawn):
                raise BadRequestError("drawn must be a list of integers")
            values = set(drawn)
        pattern = find_winning_pattern(card, values)
        return jsonify({"win": pattern is not None, "pattern": pattern.name if pattern else None})

    @app.get("/api/rooms/<room_code>")
    def room_state(room_code: str):
        return jsonify(manager.get_room(room_code).snapshot())

    @socketio.on("subscribe")
    def subscribe(data):
        code = normalize_code((data or {}).get("roomCode", ""))
        try:
            manager.get_room(code)
        except RoomNotFoundError as exc:
            return {"error": str(exc)}
        join_room(channel_name(code))
        return {"success": True, "channel": channel_name(code)}

    @socketio.on("unsubscribe")
    def unsubscribe(data):
        code = normalize_code((data or {}).get("roomCode", ""))
        leave_room(channel_name(code))

    return app

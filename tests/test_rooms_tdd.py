from __future__ import annotations

import logging

import pytest

from bingo_hall.card import FREE
from bingo_hall.errors import (
    CardNotAssignedError,
    GameNotActiveError,
    NotAuthorizedError,
    RoomNotFoundError,
)
from bingo_hall.rooms import ALL_DRAWN_MESSAGE, CODE_ALPHABET, RoomManager
from bingo_hall.store import InMemoryRoomStore
from bingo_hall.transport import RecordingTransport


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def manager(transport):
    return RoomManager(InMemoryRoomStore(ttl_sec=0), transport, seed=424242)


@pytest.fixture
def room(manager):
    code = manager.create_room("Host", "host-1")
    manager.join_room(code, "Ana", "p-ana")
    return code


def test_create_room_makes_host_without_card(manager, transport):
    code = manager.create_room("Host", "host-1")
    assert len(code) == 6 and all(ch in CODE_ALPHABET for ch in code)
    room = manager.get_room(code)
    assert room.host_id == "host-1"
    assert room.player_names() == ["Host"]
    assert room.cards == {}
    assert transport.last("room-created").payload == {"roomCode": code, "players": ["Host"]}
    assert transport.last("room-created").channel == f"room-{code}"


def test_room_codes_are_unique(manager):
    codes = {manager.create_room(f"h{i}", f"id{i}") for i in range(50)}
    assert len(codes) == 50


def test_seeded_managers_repeat_codes_and_cards():
    a = RoomManager(seed=7)
    b = RoomManager(seed=7)
    code_a = a.create_room("H", "h")
    code_b = b.create_room("H", "h")
    assert code_a == code_b
    assert a.join_room(code_a, "P", "p")[0] == b.join_room(code_b, "P", "p")[0]


def test_join_returns_card_and_roster(manager, transport):
    code = manager.create_room("Host", "host-1")
    card, players = manager.join_room(code.lower(), "Ana", "p-ana")
    assert card[2][2] == FREE
    assert players == ["Host", "Ana"]
    assert manager.get_room(code).cards["p-ana"] == card
    assert transport.last("player-joined").payload == {"players": ["Host", "Ana"], "newPlayer": "Ana"}


def test_join_unknown_room(manager):
    with pytest.raises(RoomNotFoundError):
        manager.join_room("NOPE00", "Ana", "p-ana")


def test_rejoin_keeps_card_once_game_started(manager, room):
    manager.start_game(room, "host-1")
    first = manager.get_room(room).cards["p-ana"]
    card, _ = manager.join_room(room, "Ana", "p-ana")
    assert card == first


def test_host_only_controls(manager, room):
    for action in (manager.start_game, manager.reset_game, manager.draw_number):
        with pytest.raises(NotAuthorizedError):
            action(room, "p-ana")


def test_draw_requires_active_game(manager, room):
    with pytest.raises(NotAuthorizedError):
        manager.draw_number(room, "host-1")


def test_draws_are_unique_and_announced(manager, room, transport):
    manager.start_game(room, "host-1")
    numbers = [manager.draw_number(room, "host-1") for _ in range(75)]
    assert sorted(numbers) == list(range(1, 76))
    assert manager.draw_number(room, "host-1") is None
    assert transport.last("game-message").payload == {"message": ALL_DRAWN_MESSAGE}
    drawn_event = [e for e in transport.events if e.event == "number-drawn"][0]
    assert drawn_event.payload["number"] == numbers[0]
    assert drawn_event.payload["letter"] in "BINGO"


def test_start_and_reset_clear_round(manager, room, transport):
    manager.start_game(room, "host-1")
    manager.draw_number(room, "host-1")
    manager.reset_game(room, "host-1")
    state = manager.get_room(room)
    assert state.active is False
    assert state.drawn == []
    assert len(state.available) == 75
    assert transport.names()[-1] == "game-reset"
    manager.start_game(room, "host-1")
    assert manager.get_room(room).active is True


def test_bingo_requires_active_game(manager, room):
    with pytest.raises(GameNotActiveError):
        manager.call_bingo(room, "p-ana", "Ana")


def test_false_bingo_keeps_game_running(manager, room, transport, caplog):
    manager.start_game(room, "host-1")
    with caplog.at_level(logging.WARNING, logger="bingo_hall.rooms"):
        assert manager.call_bingo(room, "p-ana", "Ana") is None
    assert manager.get_room(room).active is True
    assert "bingo-winner" not in transport.names()
    assert "rejected bingo call" in caplog.text


def test_valid_bingo_ends_game(manager, room, transport):
    manager.start_game(room, "host-1")
    card = manager.get_room(room).cards["p-ana"]
    state = manager.get_room(room)
    # Draw until the top row is covered.
    while not all(v in state.drawn for v in card[0]):
        manager.draw_number(room, "host-1")
    pattern = manager.call_bingo(room, "p-ana", "Ana")
    assert pattern is not None
    assert state.active is False
    assert state.winner == "Ana"
    assert transport.last("bingo-winner").payload == {"winner": "Ana", "pattern": pattern.name}
    with pytest.raises(GameNotActiveError):
        manager.call_bingo(room, "p-ana", "Ana")


def test_assigned_card_beats_submitted_card(manager, room, caplog):
    manager.start_game(room, "host-1")
    drawn = manager.get_room(room).drawn
    manager.draw_number(room, "host-1")
    forged = [
        [drawn[0]] * 5 if i == 0 else [1, 16, 31, 46, 61] for i in range(5)
    ]
    forged[2][2] = FREE
    with caplog.at_level(logging.WARNING, logger="bingo_hall.rooms"):
        assert manager.call_bingo(room, "p-ana", "Ana", forged) is None
    assert "differs from assigned card" in caplog.text


def _draw_until_covered(manager, room, values):
    state = manager.get_room(room)
    while not all(v in state.drawn for v in values):
        manager.draw_number(room, "host-1")
    return state


def test_submitted_card_never_replaces_a_missing_assignment(manager, room, sample_card):
    manager.start_game(room, "host-1")
    state = _draw_until_covered(manager, room, sample_card[0])
    with pytest.raises(CardNotAssignedError):
        manager.call_bingo(room, "host-1", card=sample_card)
    with pytest.raises(CardNotAssignedError):
        manager.call_bingo(room, "host-1", "Host")
    assert state.active is True
    assert state.winner is None


def test_unknown_player_cannot_call_bingo(manager, room, sample_card, transport):
    manager.start_game(room, "host-1")
    state = _draw_until_covered(manager, room, sample_card[0])
    with pytest.raises(NotAuthorizedError):
        manager.call_bingo(room, "stranger", "Mallory", sample_card)
    assert state.active is True
    assert "bingo-winner" not in transport.names()


def test_departed_player_loses_card(manager, room):
    manager.start_game(room, "host-1")
    assigned = manager.get_room(room).cards["p-ana"]
    manager.leave_room(room, "p-ana")
    _draw_until_covered(manager, room, assigned[0])
    with pytest.raises(NotAuthorizedError):
        manager.call_bingo(room, "p-ana", "Ana", assigned)


def test_host_wins_after_joining_for_a_card(manager, room):
    card, _players = manager.join_room(room, "Host", "host-1")
    manager.start_game(room, "host-1")
    state = _draw_until_covered(manager, room, card[0])
    assert manager.call_bingo(room, "host-1") is not None
    assert state.winner == "Host"


def test_card_carries_over_between_rounds_until_rejoin(manager, room):
    first = manager.get_room(room).cards["p-ana"]
    manager.start_game(room, "host-1")
    manager.reset_game(room, "host-1")
    manager.start_game(room, "host-1")
    assert manager.get_room(room).cards["p-ana"] == first
    manager.reset_game(room, "host-1")
    reshuffled, _players = manager.join_room(room, "Ana", "p-ana")
    assert manager.get_room(room).cards["p-ana"] == reshuffled


def test_leave_passes_host_and_closes_empty_room(manager, room, transport):
    manager.leave_room(room, "host-1")
    state = manager.get_room(room)
    assert state.host_id == "p-ana"
    assert transport.last("players-updated").payload == {"players": ["Ana"], "host": "Ana"}
    manager.leave_room(room, "nobody")
    manager.leave_room(room, "p-ana")
    with pytest.raises(RoomNotFoundError):
        manager.get_room(room)


def test_expired_rooms_are_gone(transport):
    now = [0.0]
    manager = RoomManager(InMemoryRoomStore(ttl_sec=30, clock=lambda: now[0]), transport)
    code = manager.create_room("Host", "h")
    now[0] = 29
    manager.join_room(code, "P", "p")
    now[0] = 58
    assert manager.get_room(code).player_names() == ["Host", "P"]
    now[0] = 100
    with pytest.raises(RoomNotFoundError):
        manager.get_room(code)


def test_snapshot(manager, room):
    snap = manager.get_room(room).snapshot()
    assert snap == {
        "roomCode": room,
        "host": "Host",
        "players": ["Host", "Ana"],
        "drawn": [],
        "remaining": 75,
        "active": False,
        "winner": None,
        "pattern": None,
    }

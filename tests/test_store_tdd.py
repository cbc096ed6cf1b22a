from __future__ import annotations

from bingo_hall.store import InMemoryRoomStore


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


def test_get_set_delete():
    store = InMemoryRoomStore(ttl_sec=60)
    store.set("ABC", {"x": 1})
    assert store.get("ABC") == {"x": 1}
    store.delete("ABC")
    assert store.get("ABC") is None
    store.delete("ABC")


def test_entries_expire_after_ttl():
    clock = FakeClock()
    store = InMemoryRoomStore(ttl_sec=10, clock=clock)
    store.set("ABC", 1)
    clock.now += 9.9
    assert store.get("ABC") == 1
    clock.now += 0.1
    assert store.get("ABC") is None
    assert store.keys() == []


def test_touch_and_set_refresh_deadline():
    clock = FakeClock()
    store = InMemoryRoomStore(ttl_sec=10, clock=clock)
    store.set("A", 1)
    store.set("B", 2)
    clock.now += 8
    assert store.touch("A") is True
    store.set("B", 3)
    clock.now += 8
    assert store.get("A") == 1
    assert store.get("B") == 3
    assert store.touch("missing") is False


def test_purge_expired_counts():
    clock = FakeClock()
    store = InMemoryRoomStore(ttl_sec=5, clock=clock)
    store.set("A", 1)
    clock.now += 3
    store.set("B", 2)
    clock.now += 3
    assert store.purge_expired() == 1
    assert store.keys() == ["B"]
    assert len(store) == 1


def test_zero_ttl_never_expires():
    clock = FakeClock()
    store = InMemoryRoomStore(ttl_sec=0, clock=clock)
    store.set("A", 1)
    clock.now += 10**9
    assert store.get("A") == 1

import json

from storage import (
    ACCESS_TOKEN,
    BOOKING_TIMER_START,
    USER_DATA,
    MemoryStore,
    read_access_token,
    read_timer_start,
    read_user,
)


def test_memory_store_roundtrip():
    store = MemoryStore()
    store.set_item("k", "v")
    assert store.get_item("k") == "v"
    store.remove_item("k")
    store.remove_item("k")
    assert store.get_item("k") is None
    assert len(store) == 0


def test_read_timer_start():
    assert read_timer_start(MemoryStore()) is None
    assert read_timer_start(MemoryStore({BOOKING_TIMER_START: "1700000000000"})) == 1_700_000_000_000
    assert read_timer_start(MemoryStore({BOOKING_TIMER_START: "soon"})) is None


def test_read_user_keeps_extra_fields():
    store = MemoryStore({USER_DATA: json.dumps({"display_name": "Ana", "email": "ana@example.com", "id": 7})})
    user = read_user(store)
    assert user.display_name == "Ana"
    assert user.model_dump()["id"] == 7


def test_read_user_rejects_non_object():
    assert read_user(MemoryStore({USER_DATA: "[1, 2]"})) is None


def test_read_access_token():
    assert read_access_token(MemoryStore()) is None
    assert read_access_token(MemoryStore({ACCESS_TOKEN: ""})) is None
    assert read_access_token(MemoryStore({ACCESS_TOKEN: "tok"})) == "tok"

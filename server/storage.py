# storage.py
"""
Client-side key-value storage seam.

The booking timer, dashboard sidebar and support form all read plain string
values that the browser keeps between page loads. They receive a
``KeyValueStore`` instead of touching a global, so hosts (and tests) decide
where the values actually live.
"""

import json
import logging
from typing import Dict, Optional, Protocol

from pydantic import ValidationError

from logging_utils import log_event
from models import UserProfile

logger = logging.getLogger("tripzip.storage")

# Keys shared with the rest of the booking frontend
BOOKING_TIMER_START = "booking_timer_start"
PENDING_BOOKING_DATA = "pending_booking_data"
USER_DATA = "user_data"
ACCESS_TOKEN = "access_token"


class KeyValueStore(Protocol):
    def get_item(self, key: str) -> Optional[str]: ...

    def set_item(self, key: str, value: str) -> None: ...

    def remove_item(self, key: str) -> None: ...


class MemoryStore:
    """Dict-backed store; one instance per page/session."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._items: Dict[str, str] = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self._items[key] = str(value)

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def __contains__(self, key: object) -> bool:
        return key in self._items

    def __len__(self) -> int:
        return len(self._items)


def read_timer_start(store: KeyValueStore) -> Optional[int]:
    """Start of the booking hold in epoch milliseconds, or None."""
    raw = store.get_item(BOOKING_TIMER_START)
    if raw is None:
        return None
    try:
        return int(raw)
    except ValueError:
        log_event(logger, "timer_start_unreadable", level=logging.WARNING, value=raw)
        return None


def read_user(store: KeyValueStore) -> Optional[UserProfile]:
    raw = store.get_item(USER_DATA)
    if not raw:
        return None
    try:
        return UserProfile.model_validate(json.loads(raw))
    except (ValueError, ValidationError) as e:
        # json.JSONDecodeError is a ValueError
        log_event(logger, "user_data_unreadable", level=logging.ERROR, error=str(e))
        return None


def read_access_token(store: KeyValueStore) -> Optional[str]:
    return store.get_item(ACCESS_TOKEN) or None

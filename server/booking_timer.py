# booking_timer.py
"""
Booking hold countdown.

The hold starts when the booking flow writes ``booking_timer_start`` (epoch
milliseconds) to the client store. ``BookingTimer`` turns that into a
sequence of ticks:

    IDLE      no start timestamp, nothing is shown
    RUNNING   counting down once per second
    WARNING   RUNNING with fewer whole minutes left than the threshold
    EXPIRED   terminal; countdown stopped, expiration action ran once

``tick()`` is pure arithmetic over an injected clock so it can be driven by
hand. ``start_countdown()`` is the asyncio driver a page uses: it ticks every
second, hands each tick to a render callback, and runs the expiration action
exactly once.
"""

import asyncio
import html
import inspect
import logging
import time
from enum import Enum
from typing import Awaitable, Callable, Optional, Union

from pydantic import BaseModel

from config import BOOKING_TIMER_MINUTES, BOOKING_TIMER_WARNING_MINUTES
from logging_utils import log_event
from models import Redirect
from storage import (
    BOOKING_TIMER_START,
    PENDING_BOOKING_DATA,
    KeyValueStore,
    read_timer_start,
)

logger = logging.getLogger("tripzip.timer")

MS_PER_MINUTE = 60 * 1000
EXPIRED_REDIRECT = "/flights.html"
EXPIRED_REDIRECT_DELAY_MS = 1000
EXPIRED_ALERT = "Your booking time has expired. Please search for flights again."

Clock = Callable[[], int]
ExpireAction = Callable[[], Union[Optional[Redirect], Awaitable[Optional[Redirect]]]]
RenderCallback = Callable[["TimerTick"], None]


def now_ms() -> int:
    return int(time.time() * 1000)


class TimerPhase(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    WARNING = "warning"
    EXPIRED = "expired"


class TimerTick(BaseModel):
    phase: TimerPhase
    remaining_ms: int = 0
    minutes: int = 0
    seconds: int = 0
    progress_percent: float = 0.0
    remaining_percent: float = 100.0
    # True only on the tick that crossed into EXPIRED
    expired: bool = False

    @property
    def remaining_seconds(self) -> int:
        return self.remaining_ms // 1000

    @property
    def display(self) -> str:
        if self.phase == TimerPhase.IDLE:
            return "--:--"
        return f"{self.minutes}:{self.seconds:02d}"

    @property
    def warning(self) -> bool:
        return self.phase == TimerPhase.WARNING


class BookingTimer:
    def __init__(
        self,
        store: KeyValueStore,
        duration_minutes: int = BOOKING_TIMER_MINUTES,
        warning_threshold: int = BOOKING_TIMER_WARNING_MINUTES,
        on_expire: Optional[ExpireAction] = None,
        clock: Clock = now_ms,
    ) -> None:
        self._store = store
        self.duration_minutes = duration_minutes or BOOKING_TIMER_MINUTES
        self.warning_threshold = warning_threshold or BOOKING_TIMER_WARNING_MINUTES
        self.on_expire: ExpireAction = on_expire or self.default_expire_handler
        self._clock = clock

        self.start_time: Optional[int] = None
        self.end_time: Optional[int] = None
        self.phase = TimerPhase.IDLE
        self._stopped = False
        self._last: Optional[TimerTick] = None
        self._expire_fired = False
        self._destroyed = False
        self._task: Optional["asyncio.Task[Optional[Redirect]]"] = None

        self.init()

    @property
    def total_ms(self) -> int:
        return self.duration_minutes * MS_PER_MINUTE

    @property
    def active(self) -> bool:
        return self.phase in (TimerPhase.RUNNING, TimerPhase.WARNING) and not self._stopped

    def init(self) -> TimerPhase:
        start = read_timer_start(self._store)
        if start is None:
            log_event(logger, "booking_timer_not_started")
            self.phase = TimerPhase.IDLE
            return self.phase

        self.start_time = start
        self.end_time = start + self.total_ms
        self.phase = TimerPhase.RUNNING
        log_event(
            logger,
            "booking_timer_initialised",
            start_time=self.start_time,
            end_time=self.end_time,
            duration_minutes=self.duration_minutes,
        )
        return self.phase

    def tick(self, now: Optional[int] = None) -> TimerTick:
        if self.phase == TimerPhase.IDLE:
            return TimerTick(phase=TimerPhase.IDLE)
        if self.phase == TimerPhase.EXPIRED:
            return self._expired_tick(event=False)
        if self._stopped:
            return self._frozen_tick()

        now = self._clock() if now is None else now
        remaining_ms = self.end_time - now

        if remaining_ms <= 0:
            self._stopped = True
            self.phase = TimerPhase.EXPIRED
            log_event(logger, "booking_timer_expired", end_time=self.end_time)
            return self._expired_tick(event=True)

        minutes = remaining_ms // MS_PER_MINUTE
        seconds = (remaining_ms % MS_PER_MINUTE) // 1000

        elapsed = self.total_ms - remaining_ms
        progress = max(0.0, min(100.0, elapsed / self.total_ms * 100))

        phase = TimerPhase.WARNING if minutes < self.warning_threshold else TimerPhase.RUNNING
        if phase != self.phase:
            log_event(logger, "booking_timer_phase", phase=phase.value, minutes=minutes)
        self.phase = phase
        self._last = TimerTick(
            phase=phase,
            remaining_ms=remaining_ms,
            minutes=minutes,
            seconds=seconds,
            progress_percent=progress,
            remaining_percent=100 - progress,
        )
        return self._last

    def _expired_tick(self, event: bool) -> TimerTick:
        return TimerTick(
            phase=TimerPhase.EXPIRED,
            progress_percent=100.0,
            remaining_percent=0.0,
            expired=event,
        )

    def _frozen_tick(self) -> TimerTick:
        return self._last if self._last is not None else TimerTick(phase=self.phase)

    async def handle_expire(self) -> Optional[Redirect]:
        """Run the expiration action once; later calls and calls after destroy() are no-ops."""
        if self.phase != TimerPhase.EXPIRED or self._expire_fired or self._destroyed:
            return None
        self._expire_fired = True
        result = self.on_expire()
        if inspect.isawaitable(result):
            result = await result
        return result

    def default_expire_handler(self) -> Redirect:
        self._store.remove_item(PENDING_BOOKING_DATA)
        self._store.remove_item(BOOKING_TIMER_START)
        return Redirect(
            location=EXPIRED_REDIRECT,
            delay_ms=EXPIRED_REDIRECT_DELAY_MS,
            alert=EXPIRED_ALERT,
        )

    def start_countdown(
        self,
        render: Optional[RenderCallback] = None,
        interval: float = 1.0,
    ) -> Optional["asyncio.Task[Optional[Redirect]]"]:
        """Schedule the once-per-second loop on the running event loop."""
        if self.phase == TimerPhase.IDLE:
            return None
        if self._task is None:
            self._task = asyncio.create_task(self._countdown(render, interval))
        return self._task

    async def _countdown(
        self, render: Optional[RenderCallback], interval: float
    ) -> Optional[Redirect]:
        while True:
            tick = self.tick()
            if render is not None:
                render(tick)
            if tick.expired:
                return await self.handle_expire()
            if self._stopped or self.phase == TimerPhase.EXPIRED:
                return None
            await asyncio.sleep(interval)

    def destroy(self) -> None:
        self._stopped = True
        self._destroyed = True
        if self._task is not None and not self._task.done():
            self._task.cancel()
        log_event(logger, "booking_timer_destroyed", phase=self.phase.value)


def begin_hold(store: KeyValueStore, now: Optional[int] = None) -> int:
    start = now_ms() if now is None else now
    store.set_item(BOOKING_TIMER_START, str(start))
    return start


def clear_timer(store: KeyValueStore) -> None:
    store.remove_item(BOOKING_TIMER_START)


def has_active_timer(store: KeyValueStore) -> bool:
    return store.get_item(BOOKING_TIMER_START) is not None


def get_remaining_time(
    store: KeyValueStore,
    duration_minutes: int = BOOKING_TIMER_MINUTES,
    now: Optional[int] = None,
) -> int:
    """Milliseconds left in the hold; 0 when there is none or it has run out."""
    start = read_timer_start(store)
    if start is None:
        return 0
    now = now_ms() if now is None else now
    return max(0, start + duration_minutes * MS_PER_MINUTE - now)


# ---------------------------------------------------------------------
# HTML adapter

_CARD_CLASSES = {
    TimerPhase.RUNNING: "bg-white rounded-lg shadow-lg overflow-hidden border-2 border-orange-100",
    TimerPhase.WARNING: "bg-white rounded-lg shadow-lg overflow-hidden border-2 border-red-500 animate-pulse",
    TimerPhase.EXPIRED: "bg-white rounded-lg shadow-lg overflow-hidden border-2 border-red-600",
}

_STATUS_TEXT = {
    TimerPhase.RUNNING: ("Complete your booking before time expires", "text-xs text-gray-600 text-center"),
    TimerPhase.WARNING: ("⚠️ Hurry! Your booking time is running out!", "text-xs text-red-600 font-bold text-center"),
    TimerPhase.EXPIRED: ("⏰ Time Expired! Redirecting...", "text-xs text-red-600 font-bold text-center"),
}


def render_timer_card(tick: TimerTick) -> str:
    """Markup for the timer card; empty for an idle timer (card hidden)."""
    if tick.phase == TimerPhase.IDLE:
        return ""

    status, status_class = _STATUS_TEXT[tick.phase]
    return (
        f'<div id="timer-card" class="{_CARD_CLASSES[tick.phase]}">'
        '<div class="bg-gradient-to-r from-orange-50 to-red-50 px-4 py-3 border-b border-orange-200">'
        '<div class="flex items-center justify-between">'
        '<span class="text-sm font-semibold text-gray-700">Time Remaining</span>'
        f'<div id="timer-display" class="text-2xl font-bold text-red-600 tracking-wider">{tick.display}</div>'
        "</div></div>"
        '<div class="bg-gray-100 h-2 relative overflow-hidden">'
        f'<div id="timer-progress-bar" class="h-full" style="width: {tick.remaining_percent:.2f}%"></div>'
        "</div>"
        '<div class="px-4 py-2 bg-white">'
        f'<p id="timer-status-text" class="{status_class}">{html.escape(status)}</p>'
        "</div></div>"
    )

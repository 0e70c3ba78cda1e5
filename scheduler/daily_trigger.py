import asyncio
import logging
import traceback
from datetime import datetime, time, timedelta, tzinfo
from typing import Any, Awaitable, Callable, Optional

from utils.time_utils import utcnow

logger = logging.getLogger("recipe_service")

# Pause after firing so jitter cannot land the next computation just before
# the boundary that was already served.
SAFETY_DELAY_SECONDS = 60


def next_occurrence(now: datetime, at: time, tz: tzinfo) -> datetime:
    """
    Next instant strictly after `now` whose wall-clock time in `tz` is `at`.

    The offset is resolved from the wall-clock fields on every call, so zones
    with daylight-saving transitions get the right offset for the target day.
    """
    local_now = now.astimezone(tz)
    candidate = datetime.combine(local_now.date(), at, tzinfo=tz)
    if candidate <= local_now:
        candidate = datetime.combine(local_now.date() + timedelta(days=1), at, tzinfo=tz)
    return candidate


class DailyTrigger:
    """
    Fires `callback` once a day at `at` in `tz`, then re-arms.

    A failing callback is logged and the trigger re-arms anyway.
    """

    def __init__(
        self,
        name: str,
        at: time,
        tz: tzinfo,
        callback: Callable[[], Awaitable[Any]],
        safety_delay: float = SAFETY_DELAY_SECONDS,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.name = name
        self.at = at
        self.tz = tz
        self.callback = callback
        self.safety_delay = safety_delay
        self.clock = clock or utcnow
        self.running = False
        self._stop_event = asyncio.Event()

    async def start(self):
        """Runs the trigger loop until stop() is called or the task is cancelled."""
        if self.running:
            return

        self.running = True
        self._stop_event.clear()
        logger.info(f"Trigger '{self.name}' started for {self.at:%H:%M} ({self.tz}).")

        while self.running:
            now = self.clock()
            next_run = next_occurrence(now, self.at, self.tz)
            delay = (next_run - now).total_seconds()
            logger.info(f"Trigger '{self.name}' armed for {next_run.isoformat()} (in {delay:.0f}s)")

            if await self._wait(delay):
                break
            await self.fire()
            if await self._wait(self.safety_delay):
                break

        self.running = False
        logger.info(f"Trigger '{self.name}' stopped.")

    def stop(self):
        self.running = False
        self._stop_event.set()

    async def fire(self):
        logger.info(f"Trigger '{self.name}' firing.")
        try:
            await self.callback()
        except Exception as e:
            logger.error(f"Trigger '{self.name}' callback failed: {e}")
            logger.error(traceback.format_exc())

    async def _wait(self, seconds: float) -> bool:
        """Sleeps for `seconds`. Returns True when stop() interrupted the wait."""
        if seconds <= 0:
            return self._stop_event.is_set()
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=seconds)
            return True
        except asyncio.TimeoutError:
            return False

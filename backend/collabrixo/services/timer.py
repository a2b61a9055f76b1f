"""
Shared countdown timer.

The timer collection holds at most one record in practice: `save` updates
the first one or creates it when none exists.
"""

from __future__ import annotations

from datetime import datetime, timedelta
from typing import Optional, Tuple

from loguru import logger

from collabrixo.core.errors import FormValidationError
from collabrixo.models.timer import TimeLeft, Timer
from collabrixo.services.forms.base import Clock, utcnow
from collabrixo.services.store import READ_UPDATE_ANY, RemoteStore

_DAY = timedelta(days=1)
_HOUR = timedelta(hours=1)
_MINUTE = timedelta(minutes=1)


def time_left(target: Optional[datetime], now: datetime) -> Optional[TimeLeft]:
    """Whole days/hours/minutes until `target`; None once it has passed."""
    if target is None:
        return None
    difference = target - now
    if difference <= timedelta(0):
        return None
    return TimeLeft(
        days=difference // _DAY,
        hours=(difference % _DAY) // _HOUR,
        minutes=(difference % _HOUR) // _MINUTE,
    )


class TimerService:
    def __init__(self, store: RemoteStore, collection: str, clock: Clock = utcnow) -> None:
        self.store = store
        self.collection = collection
        self.clock = clock

    async def load(self) -> Optional[Timer]:
        documents = await self.store.list(self.collection)
        return Timer.model_validate(documents[0]) if documents else None

    async def save(self, target: datetime, active: bool) -> Timer:
        existing = await self.load()
        now = self.clock().isoformat()
        data = {"targetDate": target.isoformat(), "isActive": active, "updatedAt": now}
        if existing is not None and existing.id:
            document = await self.store.update(self.collection, existing.id, data)
        else:
            document = await self.store.create(
                self.collection, {**data, "createdAt": now}, READ_UPDATE_ANY
            )
        return Timer.model_validate(document)

    async def start(self, target: Optional[datetime] = None) -> Timer:
        if target is None:
            timer = await self.load()
            target = timer.target_date if timer else None
        if target is None:
            raise FormValidationError({"targetDate": "Pick a target date before starting the timer"})
        return await self.save(target, True)

    async def stop(self) -> Optional[Timer]:
        timer = await self.load()
        if timer is None or timer.target_date is None:
            return timer
        return await self.save(timer.target_date, False)

    async def tick(self) -> Tuple[Optional[Timer], Optional[TimeLeft]]:
        """Current timer and remaining time; an expired active timer is switched off."""
        timer = await self.load()
        if timer is None or not timer.is_active:
            return timer, None
        left = time_left(timer.target_date, self.clock())
        if left is None:
            logger.info("Countdown reached {}; deactivating", timer.target_date)
            timer = await self.save(timer.target_date, False) if timer.target_date else timer
        return timer, left

from typing import Optional

from fastapi import APIRouter, Depends

from collabrixo.core.context import AppContext
from collabrixo.core.errors import ServiceUnavailable
from collabrixo.core.security import get_configured_context, get_store
from collabrixo.models.base import FormSchema, UtcDatetime
from collabrixo.models.timer import TimeLeft, Timer, TimerFields
from collabrixo.services.store import RemoteStore
from collabrixo.services.timer import TimerService

router = APIRouter(prefix="/timer", tags=["Timer"])


class StartRequest(FormSchema):
    target_date: Optional[UtcDatetime] = None


def get_timer_service(
    context: AppContext = Depends(get_configured_context),
    store: RemoteStore = Depends(get_store),
) -> TimerService:
    collection = context.settings.APPWRITE_TIMER_COLLECTION_ID
    if not collection:
        raise ServiceUnavailable("The countdown timer is not configured (APPWRITE_TIMER_COLLECTION_ID).")
    return TimerService(store, collection)


def _timer_payload(timer: Optional[Timer], left: Optional[TimeLeft] = None) -> dict:
    return {
        "timer": timer.to_api() if timer else None,
        "timeLeft": left.model_dump() if left else None,
    }


@router.get("")
async def read_timer(service: TimerService = Depends(get_timer_service)) -> dict:
    """Current countdown; an expired active timer is switched off on read."""
    timer, left = await service.tick()
    return _timer_payload(timer, left)


@router.put("")
async def save_timer(body: TimerFields, service: TimerService = Depends(get_timer_service)) -> dict:
    await service.save(body.target_date, body.is_active)
    return _timer_payload(*await service.tick())


@router.post("/start")
async def start_timer(
    body: Optional[StartRequest] = None,
    service: TimerService = Depends(get_timer_service),
) -> dict:
    await service.start(body.target_date if body else None)
    return _timer_payload(*await service.tick())


@router.post("/stop")
async def stop_timer(service: TimerService = Depends(get_timer_service)) -> dict:
    return _timer_payload(await service.stop())

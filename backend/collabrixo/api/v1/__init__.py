from fastapi import APIRouter

from .auth import router as auth_router
from .live import router as live_router
from .meetings import router as meetings_router
from .resources import router as resources_router
from .timeline import router as timeline_router
from .timer import router as timer_router
from .webhooks import router as webhooks_router
from .work_items import router as work_items_router

router = APIRouter()
router.include_router(auth_router)
router.include_router(work_items_router)
router.include_router(meetings_router)
router.include_router(resources_router)
router.include_router(timeline_router)
router.include_router(timer_router)
router.include_router(live_router)
router.include_router(webhooks_router)

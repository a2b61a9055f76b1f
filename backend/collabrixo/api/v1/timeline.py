from typing import Any, Dict

from fastapi import APIRouter, Body, Depends

from collabrixo.api.v1.common import action_response, form_response, require_confirmation
from collabrixo.core.context import AppContext
from collabrixo.core.security import get_configured_context, get_store
from collabrixo.models.timeline import TimelineEvent
from collabrixo.services.cards import RecordCard
from collabrixo.services.forms import TimelineEventForm
from collabrixo.services.store import RemoteStore

router = APIRouter(prefix="/timeline", tags=["Journey"])


@router.post("", status_code=201)
async def create_event(
    body: Dict[str, Any] = Body(...),
    context: AppContext = Depends(get_configured_context),
    store: RemoteStore = Depends(get_store),
) -> dict:
    """Add a milestone; `tags` may be a list or a comma-separated string."""
    form = TimelineEventForm(store, context.settings.APPWRITE_TIMELINE_COLLECTION_ID)
    return form_response(await form.submit(body))


@router.patch("/{event_id}")
async def update_event(
    event_id: str,
    body: Dict[str, Any] = Body(...),
    context: AppContext = Depends(get_configured_context),
    store: RemoteStore = Depends(get_store),
) -> dict:
    collection = context.settings.APPWRITE_TIMELINE_COLLECTION_ID
    current = TimelineEvent.model_validate(await store.get(collection, event_id))
    form = TimelineEventForm(store, collection, initial=current)
    return form_response(await form.submit(form.merged(body)))


@router.delete("/{event_id}")
async def delete_event(
    event_id: str,
    confirm: bool = False,
    context: AppContext = Depends(get_configured_context),
    store: RemoteStore = Depends(get_store),
) -> dict:
    require_confirmation(confirm, "event")
    collection = context.settings.APPWRITE_TIMELINE_COLLECTION_ID
    current = TimelineEvent.model_validate(await store.get(collection, event_id))
    card = RecordCard(store, collection, current, label="event", registry=context.in_flight)
    return action_response(await card.delete(confirmed=True))

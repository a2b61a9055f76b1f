from fastapi import APIRouter, Depends, Request

from collabrixo.api.v1.common import action_response, form_response, read_submission, require_confirmation
from collabrixo.core.context import AppContext
from collabrixo.core.security import get_configured_context, get_store
from collabrixo.models.meeting import Meeting
from collabrixo.services.cards import RecordCard
from collabrixo.services.forms import MeetingForm
from collabrixo.services.store import RemoteStore

router = APIRouter(prefix="/meetings", tags=["Meetings"])


@router.post("", status_code=201)
async def create_meeting(
    request: Request,
    context: AppContext = Depends(get_configured_context),
    store: RemoteStore = Depends(get_store),
) -> dict:
    """Schedule a meeting; every attached file is uploaded and referenced."""
    raw, uploads = await read_submission(request, context.settings.MAX_UPLOAD_BYTES)
    form = MeetingForm(
        store,
        context.settings.APPWRITE_MEETING_COLLECTION_ID,
        max_upload_bytes=context.settings.MAX_UPLOAD_BYTES,
    )
    return form_response(await form.submit(raw, uploads))


@router.patch("/{meeting_id}")
async def update_meeting(
    meeting_id: str,
    request: Request,
    context: AppContext = Depends(get_configured_context),
    store: RemoteStore = Depends(get_store),
) -> dict:
    collection = context.settings.APPWRITE_MEETING_COLLECTION_ID
    current = Meeting.model_validate(await store.get(collection, meeting_id))
    raw, uploads = await read_submission(request, context.settings.MAX_UPLOAD_BYTES)
    form = MeetingForm(store, collection, initial=current, max_upload_bytes=context.settings.MAX_UPLOAD_BYTES)
    return form_response(await form.submit(form.merged(raw), uploads))


@router.delete("/{meeting_id}")
async def delete_meeting(
    meeting_id: str,
    confirm: bool = False,
    context: AppContext = Depends(get_configured_context),
    store: RemoteStore = Depends(get_store),
) -> dict:
    require_confirmation(confirm, "meeting")
    collection = context.settings.APPWRITE_MEETING_COLLECTION_ID
    current = Meeting.model_validate(await store.get(collection, meeting_id))
    card = RecordCard(store, collection, current, label="meeting", registry=context.in_flight)
    return action_response(await card.delete(confirmed=True))


@router.get("/{meeting_id}/attachments")
async def meeting_attachments(
    meeting_id: str,
    context: AppContext = Depends(get_configured_context),
    store: RemoteStore = Depends(get_store),
) -> dict:
    """Download URLs for the meeting's files."""
    collection = context.settings.APPWRITE_MEETING_COLLECTION_ID
    current = Meeting.model_validate(await store.get(collection, meeting_id))
    card = RecordCard(store, collection, current, label="meeting")
    return {"id": meeting_id, "attachments": card.attachment_urls()}

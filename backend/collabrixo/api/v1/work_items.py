from fastapi import APIRouter, Depends, Request

from collabrixo.api.v1.common import action_response, form_response, read_submission, require_confirmation
from collabrixo.core.context import AppContext
from collabrixo.core.security import get_configured_context, get_store
from collabrixo.models.work_item import WorkItem
from collabrixo.services.cards import RecordCard
from collabrixo.services.forms import WorkItemForm
from collabrixo.services.store import RemoteStore

router = APIRouter(prefix="/work-items", tags=["Work items"])


@router.post("", status_code=201)
async def create_work_item(
    request: Request,
    context: AppContext = Depends(get_configured_context),
    store: RemoteStore = Depends(get_store),
) -> dict:
    """Create a kanban card; an optional `image` file becomes its inspiration image."""
    raw, uploads = await read_submission(request, context.settings.MAX_UPLOAD_BYTES)
    form = WorkItemForm(
        store,
        context.settings.APPWRITE_COMPONENT_COLLECTION_ID,
        max_upload_bytes=context.settings.MAX_UPLOAD_BYTES,
    )
    return form_response(await form.submit(raw, uploads))


@router.patch("/{item_id}")
async def update_work_item(
    item_id: str,
    request: Request,
    context: AppContext = Depends(get_configured_context),
    store: RemoteStore = Depends(get_store),
) -> dict:
    """Send only the fields that changed; `removeImage=true` clears the image."""
    collection = context.settings.APPWRITE_COMPONENT_COLLECTION_ID
    current = WorkItem.model_validate(await store.get(collection, item_id))
    raw, uploads = await read_submission(request, context.settings.MAX_UPLOAD_BYTES)
    form = WorkItemForm(store, collection, initial=current, max_upload_bytes=context.settings.MAX_UPLOAD_BYTES)
    return form_response(await form.submit(form.merged(raw), uploads))


@router.delete("/{item_id}")
async def delete_work_item(
    item_id: str,
    confirm: bool = False,
    context: AppContext = Depends(get_configured_context),
    store: RemoteStore = Depends(get_store),
) -> dict:
    require_confirmation(confirm, "component")
    collection = context.settings.APPWRITE_COMPONENT_COLLECTION_ID
    current = WorkItem.model_validate(await store.get(collection, item_id))
    card = RecordCard(store, collection, current, label="component", registry=context.in_flight)
    return action_response(await card.delete(confirmed=True))


@router.get("/{item_id}/image")
async def work_item_image(
    item_id: str,
    context: AppContext = Depends(get_configured_context),
    store: RemoteStore = Depends(get_store),
) -> dict:
    collection = context.settings.APPWRITE_COMPONENT_COLLECTION_ID
    current = WorkItem.model_validate(await store.get(collection, item_id))
    card = RecordCard(store, collection, current, label="component")
    return {"id": item_id, "url": card.image_url()}

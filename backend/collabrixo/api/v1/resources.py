from fastapi import APIRouter, Depends, HTTPException, Request

from collabrixo.api.v1.common import action_response, form_response, read_submission, require_confirmation
from collabrixo.core.context import AppContext
from collabrixo.core.security import get_configured_context, get_current_user, get_store
from collabrixo.models.resource import Resource
from collabrixo.models.user import User
from collabrixo.services.cards import RecordCard
from collabrixo.services.forms import ResourceForm
from collabrixo.services.store import RemoteStore

router = APIRouter(prefix="/resources", tags=["Resources"])


@router.post("", status_code=201)
async def create_resource(
    request: Request,
    context: AppContext = Depends(get_configured_context),
    store: RemoteStore = Depends(get_store),
    current_user: User = Depends(get_current_user),
) -> dict:
    """Upload a shared file (multipart `file`) with its name and description."""
    raw, uploads = await read_submission(request, context.settings.MAX_UPLOAD_BYTES)
    form = ResourceForm(
        store,
        context.settings.APPWRITE_RESOURCE_COLLECTION_ID,
        uploaded_by=current_user.display_name,
        max_upload_bytes=context.settings.MAX_UPLOAD_BYTES,
    )
    return form_response(await form.submit(raw, uploads))


@router.patch("/{resource_id}")
async def update_resource(
    resource_id: str,
    request: Request,
    context: AppContext = Depends(get_configured_context),
    store: RemoteStore = Depends(get_store),
) -> dict:
    collection = context.settings.APPWRITE_RESOURCE_COLLECTION_ID
    current = Resource.model_validate(await store.get(collection, resource_id))
    raw, uploads = await read_submission(request, context.settings.MAX_UPLOAD_BYTES)
    form = ResourceForm(store, collection, initial=current, max_upload_bytes=context.settings.MAX_UPLOAD_BYTES)
    return form_response(await form.submit(form.merged(raw), uploads))


@router.delete("/{resource_id}")
async def delete_resource(
    resource_id: str,
    confirm: bool = False,
    context: AppContext = Depends(get_configured_context),
    store: RemoteStore = Depends(get_store),
) -> dict:
    require_confirmation(confirm, "resource")
    collection = context.settings.APPWRITE_RESOURCE_COLLECTION_ID
    current = Resource.model_validate(await store.get(collection, resource_id))
    card = RecordCard(store, collection, current, label="resource", registry=context.in_flight)
    return action_response(await card.delete(confirmed=True))


@router.get("/{resource_id}/download")
async def download_resource(
    resource_id: str,
    context: AppContext = Depends(get_configured_context),
    store: RemoteStore = Depends(get_store),
) -> dict:
    collection = context.settings.APPWRITE_RESOURCE_COLLECTION_ID
    current = Resource.model_validate(await store.get(collection, resource_id))
    url = RecordCard(store, collection, current, label="resource").image_url()
    if url is None:
        raise HTTPException(status_code=404, detail="Failed to download the file")
    return {"id": resource_id, "fileName": current.file_name, "url": url}

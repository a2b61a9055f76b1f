"""
Page routes.

Each page resolves the auth gate first, then opens its list view once and
answers with the view's JSON snapshot (the browser keeps it current through
the live feed in `api/v1/live.py`).
"""

from typing import Any, Callable, Dict

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, RedirectResponse

from collabrixo.core.context import AppContext
from collabrixo.core.security import get_auth_gate, get_configured_context
from collabrixo.models.meeting import Meeting
from collabrixo.models.resource import Resource
from collabrixo.models.timeline import TimelineEvent
from collabrixo.services.auth_gate import AuthGate
from collabrixo.services.cards import RecordCard
from collabrixo.services.store import RemoteStore
from collabrixo.services.views import BoardView, ListView, ViewState

router = APIRouter(tags=["Pages"])

ViewFactory = Callable[..., ListView]


def _object_urls(store: RemoteStore, collection: str, key: str, first: bool = False):
    def decorate(item) -> Dict[str, Any]:
        urls = RecordCard(store, collection, item).attachment_urls()
        if first:
            return {key: urls[0]["url"] if urls else None}
        return {key: urls}

    return decorate


# --- view factories, shared with the live feed ---

def board_view(context: AppContext, store: RemoteStore, **kwargs: Any) -> ListView:
    collection = context.settings.APPWRITE_COMPONENT_COLLECTION_ID
    return BoardView(
        store,
        collection,
        decorate=_object_urls(store, collection, "imageUrl", first=True),
        error_message="Failed to load components. Please try refreshing the page.",
        **kwargs,
    )


def meetings_view(context: AppContext, store: RemoteStore, **kwargs: Any) -> ListView:
    collection = context.settings.APPWRITE_MEETING_COLLECTION_ID
    return ListView(
        store,
        collection,
        Meeting,
        order_by="date",
        decorate=_object_urls(store, collection, "attachmentUrls"),
        error_message="Failed to load meetings. Please try refreshing the page.",
        **kwargs,
    )


def resources_view(context: AppContext, store: RemoteStore, **kwargs: Any) -> ListView:
    collection = context.settings.APPWRITE_RESOURCE_COLLECTION_ID
    return ListView(
        store,
        collection,
        Resource,
        decorate=_object_urls(store, collection, "downloadUrl", first=True),
        error_message="Failed to load resources. Please try refreshing the page.",
        **kwargs,
    )


def journey_view(context: AppContext, store: RemoteStore, **kwargs: Any) -> ListView:
    return ListView(
        store,
        context.settings.APPWRITE_TIMELINE_COLLECTION_ID,
        TimelineEvent,
        order_by="date",
        error_message="Failed to load timeline events. Please try refreshing the page.",
        **kwargs,
    )


PAGE_VIEWS: Dict[str, ViewFactory] = {
    "board": board_view,
    "meetings": meetings_view,
    "resources": resources_view,
    "journey": journey_view,
}


async def render_page(request: Request, page: str, gate: AuthGate, context: AppContext):
    target = gate.redirect_for(request.url.path)
    if target:
        return RedirectResponse(target, status_code=303)

    view = PAGE_VIEWS[page](context, context.store(gate.session_secret))
    try:
        await view.open()
    finally:
        await view.close()

    status_code = 502 if view.state is ViewState.ERROR else 200
    content = {"page": page, "user": gate.user.model_dump() if gate.user else None, **view.snapshot()}
    return JSONResponse(content, status_code=status_code)


@router.get("/")
async def board_page(
    request: Request,
    gate: AuthGate = Depends(get_auth_gate),
    context: AppContext = Depends(get_configured_context),
):
    """Kanban board with the per-assignee summary."""
    return await render_page(request, "board", gate, context)


@router.get("/meetings")
async def meetings_page(
    request: Request,
    gate: AuthGate = Depends(get_auth_gate),
    context: AppContext = Depends(get_configured_context),
):
    return await render_page(request, "meetings", gate, context)


@router.get("/resources")
async def resources_page(
    request: Request,
    gate: AuthGate = Depends(get_auth_gate),
    context: AppContext = Depends(get_configured_context),
):
    return await render_page(request, "resources", gate, context)


@router.get("/journey")
async def journey_page(
    request: Request,
    gate: AuthGate = Depends(get_auth_gate),
    context: AppContext = Depends(get_configured_context),
):
    return await render_page(request, "journey", gate, context)


@router.get("/auth")
async def auth_page(request: Request, gate: AuthGate = Depends(get_auth_gate)):
    target = gate.redirect_for(request.url.path)
    if target:
        return RedirectResponse(target, status_code=303)
    return {"page": "auth", "state": gate.state.value}

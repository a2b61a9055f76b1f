from typing import Optional

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from collabrixo.api.pages import PAGE_VIEWS
from collabrixo.core.context import AppContext
from collabrixo.core.errors import ConfigurationError
from collabrixo.core.security import TOKEN_COOKIE, resolve_gate
from collabrixo.services.auth_gate import SIGN_IN_PATH
from loguru import logger

router = APIRouter(prefix="/live", tags=["Live"])


@router.websocket("/{page}")
async def live_feed(websocket: WebSocket, page: str, token: Optional[str] = None):
    """
    Push a page's list view to the browser.

    Every snapshot (initial fetch, change notification, client "refresh"
    message) is sent as one JSON frame holding the full list.
    """
    context: AppContext = websocket.app.state.context
    factory = PAGE_VIEWS.get(page)
    if factory is None:
        await websocket.close(code=4404)
        return

    await websocket.accept()
    missing = context.settings.missing_settings()
    if missing:
        await websocket.send_json(ConfigurationError(missing).to_api())
        await websocket.close(code=1011)
        return

    gate = await resolve_gate(context, token or websocket.cookies.get(TOKEN_COOKIE))
    if not gate.authenticated:
        await websocket.send_json({"state": gate.state.value, "redirect": SIGN_IN_PATH})
        await websocket.close(code=4401)
        return

    view = factory(context, context.store(gate.session_secret), live=True, on_render=websocket.send_json)
    logger.info("[Live] {} opened for {}", page, gate.user.email if gate.user else "?")
    try:
        await view.open()
        while True:
            message = await websocket.receive_text()
            if message.strip().lower() == "refresh":
                await view.refresh()
    except WebSocketDisconnect:
        logger.debug("[Live] {} closed", page)
    finally:
        await view.close()

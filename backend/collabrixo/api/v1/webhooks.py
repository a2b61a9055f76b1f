import json

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Request, Response

from collabrixo.core.context import AppContext
from collabrixo.core.security import get_context
from collabrixo.services.changes import parse_webhook_headers, verify_webhook_signature
from loguru import logger

router = APIRouter(prefix="/webhooks", tags=["Webhooks"])


@router.post("/appwrite", include_in_schema=False)
async def appwrite_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    context: AppContext = Depends(get_context),
):
    """
    Appwrite posts the changed document as the body; the event names
    (comma separated) arrive in `X-Appwrite-Webhook-Events`.
    We acknowledge immediately and fan out to the live views afterwards.
    """
    body = await request.body()
    header_map = parse_webhook_headers(request.headers)

    key = context.settings.APPWRITE_WEBHOOK_SIGNATURE_KEY
    if key and not verify_webhook_signature(
        context.settings.webhook_address,
        body,
        header_map.get("x-appwrite-webhook-signature", ""),
        key,
    ):
        logger.warning("[AppwriteWebhook] rejected: bad signature from {}", request.client)
        raise HTTPException(status_code=401, detail="Invalid webhook signature")

    events = [e for e in header_map.get("x-appwrite-webhook-events", "").split(",") if e.strip()]
    try:
        payload = json.loads(body) if body else {}
    except ValueError:
        payload = {}
    logger.info(
        "[AppwriteWebhook] recv webhook={} events={}",
        header_map.get("x-appwrite-webhook-id"),
        len(events),
    )
    background_tasks.add_task(context.feed.publish_events, events, payload if isinstance(payload, dict) else {})
    return Response(status_code=204)

"""
In-process change feed.

Appwrite posts a webhook for every document create/update/delete. The
webhook router turns the event names into channels and publishes them here;
list views subscribe per channel and re-fetch when notified.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import inspect
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Iterable, Union

from loguru import logger

ChangeCallback = Callable[["ChangeEvent"], Union[None, Awaitable[None]]]


@dataclass
class ChangeEvent:
    channel: str
    events: list[str] = field(default_factory=list)
    # opaque to the board; only used to trigger re-fetches
    payload: dict[str, Any] = field(default_factory=dict)


class ChangeFeed:
    def __init__(self) -> None:
        self._subscribers: dict[str, list[ChangeCallback]] = defaultdict(list)

    def subscribe(self, channel: str, callback: ChangeCallback) -> Callable[[], None]:
        self._subscribers[channel].append(callback)
        logger.debug("Subscribed to {} ({} listeners)", channel, len(self._subscribers[channel]))

        def unsubscribe() -> None:
            listeners = self._subscribers.get(channel, [])
            if callback in listeners:
                listeners.remove(callback)
            if not listeners:
                self._subscribers.pop(channel, None)

        return unsubscribe

    def listeners(self, channel: str) -> int:
        return len(self._subscribers.get(channel, ()))

    async def publish(self, event: ChangeEvent) -> int:
        """Deliver to every listener of the channel; returns how many ran."""
        delivered = 0
        for callback in list(self._subscribers.get(event.channel, ())):
            try:
                result = callback(event)
                if inspect.isawaitable(result):
                    await result
                delivered += 1
            except Exception:  # noqa: BLE001
                logger.exception("Change listener failed on {}", event.channel)
        return delivered

    async def publish_events(self, events: Iterable[str], payload: dict[str, Any] | None = None) -> int:
        events = list(events)
        delivered = 0
        for channel in sorted(channels_from_events(events)):
            delivered += await self.publish(ChangeEvent(channel=channel, events=events, payload=payload or {}))
        return delivered


def channels_from_events(events: Iterable[str]) -> set[str]:
    """
    "databases.db.collections.meetings.documents.6650f.update"
        -> "databases.db.collections.meetings.documents"
    Non-document events are ignored.
    """
    channels: set[str] = set()
    for name in events:
        parts = name.strip().split(".")
        if len(parts) >= 5 and parts[0] == "databases" and parts[2] == "collections" and parts[4] == "documents":
            channels.add(".".join(parts[:5]))
    return channels


def parse_webhook_headers(headers: Any) -> dict[str, str]:
    """Extract the handful of headers we care about (case‑insensitive)."""
    wanted = (
        "x-appwrite-webhook-id",
        "x-appwrite-webhook-name",
        "x-appwrite-webhook-events",
        "x-appwrite-webhook-project-id",
        "x-appwrite-webhook-user-id",
        "x-appwrite-webhook-signature",
    )
    return {k.lower(): v for k, v in headers.items() if k.lower() in wanted}


def webhook_signature(url: str, body: bytes, key: str) -> str:
    digest = hmac.new(key.encode(), url.encode() + body, hashlib.sha1).digest()
    return base64.b64encode(digest).decode()


def verify_webhook_signature(url: str, body: bytes, signature: str, key: str) -> bool:
    return hmac.compare_digest(webhook_signature(url, body, key), signature or "")

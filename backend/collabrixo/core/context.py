"""
Application context: everything that used to be a module-level singleton.

Created once per process by the FastAPI lifespan, torn down on shutdown and
reached from routes through `Depends(get_context)`.
"""

from __future__ import annotations

from typing import Optional

import httpx
from loguru import logger

from collabrixo.core.config import Settings
from collabrixo.core.errors import ConfigurationError
from collabrixo.services.account import AccountService
from collabrixo.services.appwrite import AppwriteClient
from collabrixo.services.cards import InFlightRegistry
from collabrixo.services.changes import ChangeFeed
from collabrixo.services.store import RemoteStore


class AppContext:
    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None) -> None:
        self.settings = settings
        self.transport = transport
        self.http: Optional[httpx.AsyncClient] = None
        self.feed = ChangeFeed()
        self.in_flight = InFlightRegistry()

    async def startup(self) -> None:
        logger.info("Initializing Appwrite client for {}", self.settings.APPWRITE_ENDPOINT)
        self.http = httpx.AsyncClient(
            base_url=self.settings.APPWRITE_ENDPOINT,
            timeout=self.settings.REMOTE_TIMEOUT_SECONDS,
            transport=self.transport,
        )
        missing = self.settings.missing_settings()
        if missing:
            logger.warning("Appwrite configuration incomplete, missing: {}", ", ".join(missing))

    async def shutdown(self) -> None:
        if self.http is not None:
            await self.http.aclose()
            self.http = None

    def require_config(self) -> None:
        missing = self.settings.missing_settings()
        if missing:
            raise ConfigurationError(missing)

    def client(self, session: Optional[str] = None) -> AppwriteClient:
        return AppwriteClient.from_settings(self.settings, self.http, session=session)

    def store(self, session: Optional[str] = None) -> RemoteStore:
        return RemoteStore.from_settings(self.settings, self.client(session), feed=self.feed)

    def account(self, session: Optional[str] = None) -> AccountService:
        return AccountService(self.client(session))

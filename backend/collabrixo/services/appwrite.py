"""
Low-level Appwrite REST client.

Every outbound call to Appwrite goes through `AppwriteClient.request`, which
adds the project/session headers and converts failures into `RemoteError`.
Tests hand in an `httpx.AsyncClient` built on `httpx.MockTransport`.
"""

from __future__ import annotations

import dataclasses
import json
from typing import Any, Optional

import httpx
from loguru import logger

from collabrixo.core.config import Settings
from collabrixo.core.errors import RemoteError, ServiceUnavailable

UNIQUE_ID = "unique()"  # Appwrite assigns the id server-side


def session_cookie_name(project_id: str) -> str:
    return f"a_session_{project_id.lower()}"


@dataclasses.dataclass(frozen=True)
class AppwriteClient:
    http: Optional[httpx.AsyncClient]
    endpoint: str
    project_id: str
    api_key: Optional[str] = None
    session: Optional[str] = None

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        http: Optional[httpx.AsyncClient],
        session: Optional[str] = None,
    ) -> "AppwriteClient":
        return cls(
            http=http,
            endpoint=settings.APPWRITE_ENDPOINT.rstrip("/"),
            project_id=settings.APPWRITE_PROJECT_ID,
            api_key=settings.APPWRITE_API_KEY,
            session=session,
        )

    def with_session(self, session: Optional[str]) -> "AppwriteClient":
        return dataclasses.replace(self, session=session)

    def headers(self) -> dict[str, str]:
        headers = {"X-Appwrite-Project": self.project_id}
        if self.api_key:
            headers["X-Appwrite-Key"] = self.api_key
        if self.session:
            headers["X-Appwrite-Session"] = self.session
        return headers

    async def request(
        self,
        method: str,
        path: str,
        *,
        raw: bool = False,
        headers: Optional[dict[str, str]] = None,
        **kwargs: Any,
    ) -> Any:
        """Send one request; returns parsed JSON (or the response when `raw`)."""
        if self.http is None:
            raise ServiceUnavailable()

        merged = self.headers()
        merged.update(headers or {})
        try:
            response = await self.http.request(method, path, headers=merged, **kwargs)
        except httpx.HTTPError as exc:
            logger.warning("Appwrite {} {} failed: {}", method, path, exc)
            raise RemoteError("Could not reach the Appwrite service. Please try again.") from exc

        if response.status_code >= 400:
            raise _remote_error(response)
        if raw:
            return response
        if response.status_code == 204 or not response.content:
            return None
        return response.json()


def _remote_error(response: httpx.Response) -> RemoteError:
    message = f"Appwrite request failed with status {response.status_code}"
    error_type = None
    try:
        body = response.json()
    except (json.JSONDecodeError, ValueError):
        body = None
    if isinstance(body, dict):
        message = body.get("message") or message
        error_type = body.get("type")
    logger.debug(
        "Appwrite error {} type={} on {} {}",
        response.status_code,
        error_type,
        response.request.method,
        response.request.url.path,
    )
    return RemoteError(message, status=response.status_code, type=error_type)

"""
Remote Store Client: documents, objects and change subscriptions.

A uniform interface over the Appwrite databases and storage REST APIs. The
store never generates document or object ids; Appwrite assigns them.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Callable, Iterable, List, Optional, Sequence
from urllib.parse import quote

from loguru import logger

from collabrixo.core.config import Settings
from collabrixo.services.appwrite import UNIQUE_ID, AppwriteClient
from collabrixo.services.changes import ChangeCallback, ChangeFeed

# Appwrite rejects single requests above 5 MB; larger files go in chunks
CHUNK_SIZE = 5 * 1024 * 1024

READ_ANY = ['read("any")']
READ_UPDATE_ANY = ['read("any")', 'update("any")']


# --- queries (Appwrite 1.5+ JSON syntax) ------------------------------------

def order_desc(attribute: str) -> str:
    return json.dumps({"method": "orderDesc", "attribute": attribute})


def equal(attribute: str, *values: Any) -> str:
    return json.dumps({"method": "equal", "attribute": attribute, "values": list(values)})


def limit(count: int) -> str:
    return json.dumps({"method": "limit", "values": [count]})


@dataclass
class Upload:
    """A file picked by the user, fully read into memory."""

    filename: str
    content: bytes
    content_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.content)


class RemoteStore:
    def __init__(
        self,
        client: AppwriteClient,
        *,
        database_id: str,
        bucket_id: str,
        feed: Optional[ChangeFeed] = None,
        page_size: int = 100,
    ) -> None:
        self.client = client
        self.database_id = database_id
        self.bucket_id = bucket_id
        self.feed = feed
        self.page_size = page_size

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        client: AppwriteClient,
        feed: Optional[ChangeFeed] = None,
    ) -> "RemoteStore":
        return cls(
            client,
            database_id=settings.APPWRITE_DATABASE_ID,
            bucket_id=settings.APPWRITE_BUCKET_ID,
            feed=feed,
        )

    def _documents(self, collection: str) -> str:
        return f"/databases/{self.database_id}/collections/{collection}/documents"

    def _files(self) -> str:
        return f"/storage/buckets/{self.bucket_id}/files"

    # ── documents ────────────────────────────────────────────────────────────

    async def list(
        self,
        collection: str,
        order_by: Optional[str] = None,
        filters: Sequence[str] = (),
    ) -> List[dict[str, Any]]:
        """Ordered documents of a collection, newest-first on `order_by`."""
        queries: List[str] = []
        if order_by:
            queries.append(order_desc(order_by))
        queries.extend(filters)
        queries.append(limit(self.page_size))

        params = [("queries[]", q) for q in queries]
        body = await self.client.request("GET", self._documents(collection), params=params)
        documents = body.get("documents", []) if body else []
        logger.debug("Listed {} documents from {}", len(documents), collection)
        return documents

    async def get(self, collection: str, document_id: str) -> dict[str, Any]:
        return await self.client.request("GET", f"{self._documents(collection)}/{document_id}")

    async def create(
        self,
        collection: str,
        fields: dict[str, Any],
        permissions: Optional[Iterable[str]] = None,
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {"documentId": UNIQUE_ID, "data": fields}
        if permissions is not None:
            payload["permissions"] = list(permissions)
        document = await self.client.request("POST", self._documents(collection), json=payload)
        logger.info("Created document {} in {}", document.get("$id"), collection)
        return document

    async def update(self, collection: str, document_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        """Partial update: attributes not in `fields` are left untouched."""
        document = await self.client.request(
            "PATCH", f"{self._documents(collection)}/{document_id}", json={"data": fields}
        )
        logger.info("Updated document {} in {} fields={}", document_id, collection, sorted(fields))
        return document

    async def delete(self, collection: str, document_id: str) -> None:
        await self.client.request("DELETE", f"{self._documents(collection)}/{document_id}")
        logger.info("Deleted document {} from {}", document_id, collection)

    # ── objects ──────────────────────────────────────────────────────────────

    async def upload_object(self, upload: Upload, permissions: Optional[Iterable[str]] = None) -> str:
        """Store a file in the bucket and return its Appwrite id."""
        data: dict[str, Any] = {"fileId": UNIQUE_ID}
        if permissions is not None:
            data["permissions[]"] = list(permissions)

        if upload.size <= CHUNK_SIZE:
            body = await self.client.request(
                "POST",
                self._files(),
                data=data,
                files={"file": (upload.filename, upload.content, upload.content_type)},
            )
            return body["$id"]

        # chunked: first chunk creates the file, later ones carry its id
        object_id: Optional[str] = None
        total = upload.size
        for start in range(0, total, CHUNK_SIZE):
            end = min(start + CHUNK_SIZE, total) - 1
            headers = {"Content-Range": f"bytes {start}-{end}/{total}"}
            if object_id:
                headers["X-Appwrite-ID"] = object_id
            body = await self.client.request(
                "POST",
                self._files(),
                headers=headers,
                data=data,
                files={"file": (upload.filename, upload.content[start:end + 1], upload.content_type)},
            )
            object_id = body["$id"]
        logger.info("Uploaded {} ({} bytes) in chunks as {}", upload.filename, total, object_id)
        return object_id

    def object_url(self, object_id: str) -> str:
        """Browser-viewable URL for a stored object."""
        if not object_id:
            raise ValueError("object id is required")
        return (
            f"{self.client.endpoint}{self._files()}/{quote(object_id, safe='')}/view"
            f"?project={quote(self.client.project_id, safe='')}"
        )

    async def delete_object(self, object_id: str) -> None:
        await self.client.request("DELETE", f"{self._files()}/{object_id}")
        logger.info("Deleted object {} from bucket {}", object_id, self.bucket_id)

    # ── realtime ─────────────────────────────────────────────────────────────

    def channel(self, collection: str) -> str:
        return f"databases.{self.database_id}.collections.{collection}.documents"

    def subscribe(self, collection: str, on_change: ChangeCallback) -> Callable[[], None]:
        """Call `on_change` on any create/update/delete in `collection`."""
        if self.feed is None:
            logger.warning("No change feed configured; {} will not update live", collection)
            return lambda: None
        return self.feed.subscribe(self.channel(collection), on_change)

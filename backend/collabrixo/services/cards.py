"""
Card actions for a single record: confirmed delete and attachment URLs.

Cards never patch a list in place; callers re-fetch their list view after a
successful delete or edit.
"""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, Hashable, Iterator, List, Optional, Set, TypeVar

from loguru import logger

from collabrixo.core.errors import ActionInFlight, CollabError, ConfirmationRequired
from collabrixo.models.base import Document
from collabrixo.models.meeting import Meeting
from collabrixo.models.resource import Resource
from collabrixo.models.work_item import WorkItem
from collabrixo.services.notices import Notice
from collabrixo.services.store import RemoteStore

D = TypeVar("D", bound=Document)


class InFlightRegistry:
    """Keys of destructive actions currently running in this process."""

    def __init__(self) -> None:
        self._keys: Set[Hashable] = set()

    def __contains__(self, key: Hashable) -> bool:
        return key in self._keys

    @contextmanager
    def hold(self, key: Hashable, message: str = "This action is already in progress.") -> Iterator[None]:
        if key in self._keys:
            raise ActionInFlight(message)
        self._keys.add(key)
        try:
            yield
        finally:
            self._keys.discard(key)


@dataclass
class ActionResult:
    ok: bool
    notices: List[Notice] = field(default_factory=list)

    def to_api(self) -> Dict[str, Any]:
        return {"ok": self.ok, "notices": [n.to_api() for n in self.notices]}


def owned_objects(document: Document) -> List[str]:
    """Storage objects that belong to a record and die with it."""
    if isinstance(document, WorkItem):
        return [document.inspiration_image] if document.inspiration_image else []
    if isinstance(document, Meeting):
        return list(document.attachments)
    if isinstance(document, Resource):
        return [document.file_id] if document.file_id else []
    return []


class RecordCard(Generic[D]):
    def __init__(
        self,
        store: RemoteStore,
        collection: str,
        document: D,
        *,
        label: str = "item",
        registry: Optional[InFlightRegistry] = None,
        objects: Callable[[Document], List[str]] = owned_objects,
    ) -> None:
        self.store = store
        self.collection = collection
        self.document = document
        self.label = label
        self.registry = registry or InFlightRegistry()
        self.objects = objects
        self.confirming = False

    @property
    def key(self) -> tuple:
        return (self.collection, self.document.id)

    @property
    def deleting(self) -> bool:
        return self.key in self.registry

    # ── delete ───────────────────────────────────────────────────────────────

    def confirmation_prompt(self) -> str:
        name = getattr(self.document, "name", None) or getattr(self.document, "title", None)
        subject = f'"{name}"' if name else f"the {self.label}"
        return f"This will permanently delete {subject} and its associated files. This action cannot be undone."

    def request_delete(self) -> str:
        self.confirming = True
        return self.confirmation_prompt()

    def cancel_delete(self) -> None:
        self.confirming = False

    async def delete(self, confirmed: bool = False) -> ActionResult:
        """Delete the document, then best-effort delete its stored objects."""
        if not (confirmed or self.confirming):
            raise ConfirmationRequired(self.confirmation_prompt())

        with self.registry.hold(self.key, f"The {self.label} is already being deleted."):
            try:
                await self.store.delete(self.collection, self.document.id)
            except CollabError as exc:
                logger.exception("Error deleting {} {}: {}", self.label, self.document.id, exc)
                return ActionResult(False, [Notice.error(f"Failed to delete the {self.label}. Please try again.")])
            finally:
                self.confirming = False

            for object_id in self.objects(self.document):
                try:
                    await self.store.delete_object(object_id)
                except CollabError as exc:
                    logger.error("Error deleting attachment {}: {}", object_id, exc)

        title = f"{self.label.capitalize()} deleted"
        return ActionResult(True, [Notice(title=title, description=f"The {self.label} has been deleted successfully.")])

    # ── attachments ──────────────────────────────────────────────────────────

    def attachment_urls(self) -> List[Dict[str, str]]:
        """Viewable URLs for the record's objects; unresolvable ones are left out."""
        urls = []
        for object_id in self.objects(self.document):
            url = self.resolve(object_id)
            if url:
                urls.append({"id": object_id, "url": url})
        return urls

    def image_url(self) -> Optional[str]:
        urls = self.attachment_urls()
        return urls[0]["url"] if urls else None

    def resolve(self, object_id: str) -> Optional[str]:
        try:
            return self.store.object_url(object_id)
        except (CollabError, ValueError) as exc:
            logger.error("Error getting file view URL for {}: {}", object_id, exc)
            return None

"""
Shared submit pipeline for every entity form.

validate -> (create | diff + update) -> attachments -> reset + completion

Validation failures raise before any remote call. Remote failures are caught,
logged and turned into an error notice; form values are kept so the user can
retry.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Awaitable, Callable, Dict, Generic, List, Optional, Sequence, Tuple, Type, TypeVar, Union

from loguru import logger
from pydantic import ValidationError

from collabrixo.core.errors import ActionInFlight, CollabError, FileTooLarge, FormValidationError
from collabrixo.models.base import Document, FormSchema
from collabrixo.services.notices import Notice
from collabrixo.services.store import READ_ANY, RemoteStore, Upload

S = TypeVar("S", bound=FormSchema)
D = TypeVar("D", bound=Document)

Completion = Callable[[Optional[Document]], Union[None, Awaitable[None]]]
Clock = Callable[[], datetime]

DEFAULT_MAX_UPLOAD_BYTES = 100 * 1024 * 1024

_TRUE = {"1", "true", "on", "yes"}


class Outcome(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    FAILED = "failed"


@dataclass
class FormResult(Generic[D]):
    outcome: Outcome
    document: Optional[D] = None
    changed: List[str] = field(default_factory=list)
    notices: List[Notice] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.outcome is not Outcome.FAILED

    def to_api(self) -> Dict[str, Any]:
        return {
            "outcome": self.outcome.value,
            "document": self.document.to_api() if self.document else None,
            "changed": self.changed,
            "notices": [n.to_api() for n in self.notices],
        }


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def field_diff(submitted: Dict[str, Any], stored: Dict[str, Any]) -> Dict[str, Any]:
    """Submitted attributes whose value differs from the stored one."""
    return {key: value for key, value in submitted.items() if stored.get(key) != value}


def field_errors(exc: ValidationError) -> Dict[str, str]:
    errors: Dict[str, str] = {}
    for error in exc.errors():
        name = ".".join(str(part) for part in error["loc"]) or "__root__"
        errors.setdefault(name, error["msg"])
    return errors


class EntityForm(Generic[S, D]):
    schema: Type[S]
    model: Type[D]
    label = "Item"
    permissions: Sequence[str] = READ_ANY
    # attributes holding storage object ids
    object_attributes: Sequence[str] = ()

    def __init__(
        self,
        store: RemoteStore,
        collection: str,
        *,
        initial: Optional[D] = None,
        on_success: Optional[Completion] = None,
        clock: Clock = utcnow,
        max_upload_bytes: int = DEFAULT_MAX_UPLOAD_BYTES,
    ) -> None:
        self.store = store
        self.collection = collection
        self.initial = initial
        self.on_success = on_success
        self.clock = clock
        self.max_upload_bytes = max_upload_bytes
        self.values: Dict[str, Any] = {}
        self.submitting = False
        self.notices: List[Notice] = []

    @property
    def editing(self) -> bool:
        return bool(self.initial and self.initial.id)

    def merged(self, raw: Dict[str, Any]) -> Dict[str, Any]:
        """Partial edit on top of the stored values; untouched fields keep theirs."""
        stored = self.initial.to_fields() if self.initial else {}
        return {**stored, **self.schema.aliased(raw)}

    def flag(self, name: str) -> bool:
        """Checkbox-style value from the submitted form ("true", "on", True...)."""
        value = self.values.get(name)
        if isinstance(value, str):
            return value.strip().lower() in _TRUE
        return bool(value)

    # ── validation ───────────────────────────────────────────────────────────

    def validate(self, raw: Dict[str, Any]) -> S:
        try:
            return self.schema.model_validate(raw)
        except ValidationError as exc:
            raise FormValidationError(field_errors(exc)) from None

    def check_uploads(self, uploads: Sequence[Upload]) -> None:
        for upload in uploads:
            if upload.size > self.max_upload_bytes:
                raise FileTooLarge("file", upload.size, self.max_upload_bytes)

    # ── submit ───────────────────────────────────────────────────────────────

    async def submit(self, raw: Dict[str, Any], uploads: Sequence[Upload] = ()) -> FormResult[D]:
        if self.submitting:
            raise ActionInFlight(f"{self.label} is already being saved.")

        self.values = dict(raw)
        fields = self.validate(raw)
        uploads = [u for u in uploads if u is not None]
        self.check_uploads(uploads)

        self.submitting = True
        try:
            if self.editing:
                result = await self._update(fields, uploads)
            else:
                result = await self._create(fields, uploads)
        except CollabError as exc:
            logger.exception("Error saving {}: {}", self.label.lower(), exc)
            notice = Notice.error(f"Failed to save {self.label.lower()}. Please try again.")
            self.notices.append(notice)
            return FormResult(Outcome.FAILED, notices=[notice])
        finally:
            self.submitting = False

        self.notices.extend(result.notices)
        self.reset()
        if result.outcome is not Outcome.UNCHANGED:
            await self._complete(result.document)
        return result

    def reset(self) -> None:
        self.values = {}

    async def _complete(self, document: Optional[D]) -> None:
        if self.on_success is None:
            return
        outcome = self.on_success(document)
        if inspect.isawaitable(outcome):
            await outcome

    async def _create(self, fields: S, uploads: Sequence[Upload]) -> FormResult[D]:
        notices: List[Notice] = []
        attachment, _ = await self.attach(uploads, notices)
        now = self.clock().isoformat()
        payload = {**fields.to_fields(), **attachment, "createdAt": now, "updatedAt": now}
        payload.update(self.extra_create_fields())
        payload = {k: v for k, v in payload.items() if v is not None}

        try:
            document = await self.store.create(self.collection, payload, self.permissions)
        except CollabError:
            await self.discard_objects(self.object_ids(attachment))
            raise
        notices.insert(0, Notice(title=f"{self.label} created"))
        return FormResult(
            Outcome.CREATED,
            document=self.model.model_validate(document),
            changed=sorted(payload),
            notices=notices,
        )

    async def _update(self, fields: S, uploads: Sequence[Upload]) -> FormResult[D]:
        stored = self.initial.to_fields()
        diff = field_diff(fields.to_fields(), stored)

        notices: List[Notice] = []
        attachment, stale = await self.attach(uploads, notices)
        diff.update(field_diff(attachment, stored))

        if not diff:
            return FormResult(Outcome.UNCHANGED, document=self.initial, notices=notices)

        changed = sorted(diff)
        diff["updatedAt"] = self.clock().isoformat()
        document = await self.store.update(self.collection, self.initial.id, diff)
        await self.discard_objects(stale)

        notices.insert(
            0, Notice(title=f"{self.label} updated", description=f"{', '.join(changed)} updated successfully")
        )
        return FormResult(
            Outcome.UPDATED,
            document=self.model.model_validate(document),
            changed=changed,
            notices=notices,
        )

    # ── attachments ──────────────────────────────────────────────────────────

    async def attach(self, uploads: Sequence[Upload], notices: List[Notice]) -> Tuple[Dict[str, Any], List[str]]:
        """Upload new objects; return (attribute values, object ids now unreferenced)."""
        return {}, []

    def object_ids(self, attributes: Dict[str, Any]) -> List[str]:
        ids: List[str] = []
        for name in self.object_attributes:
            value = attributes.get(name)
            if isinstance(value, list):
                ids.extend(value)
            elif value:
                ids.append(value)
        return ids

    def extra_create_fields(self) -> Dict[str, Any]:
        return {}

    async def upload_or_warn(self, upload: Upload, notices: List[Notice]) -> Optional[str]:
        """Upload failures never block the rest of the submission."""
        try:
            return await self.store.upload_object(upload, READ_ANY)
        except CollabError as exc:
            logger.warning("Error uploading {}: {}", upload.filename, exc)
            notices.append(Notice.warning("Failed to upload new file. Other changes will still be saved."))
            return None

    async def discard_objects(self, object_ids: Sequence[str]) -> None:
        for object_id in object_ids:
            try:
                await self.store.delete_object(object_id)
            except CollabError as exc:
                logger.error("Error deleting old attachment {}: {}", object_id, exc)

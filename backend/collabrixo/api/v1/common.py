"""
Helpers shared by the entity routers.
"""

from __future__ import annotations

from typing import Any, Dict, List, Tuple

from fastapi import HTTPException, Request
from starlette.datastructures import UploadFile

from collabrixo.core.errors import ConfirmationRequired, FileTooLarge
from collabrixo.services.cards import ActionResult
from collabrixo.services.forms import FormResult
from collabrixo.services.store import Upload


async def read_submission(request: Request, max_bytes: int) -> Tuple[Dict[str, Any], List[Upload]]:
    """Form values and picked files from a JSON or multipart body.

    Oversized files are rejected before their content is read.
    """
    content_type = request.headers.get("content-type", "")
    if not content_type.startswith(("multipart/form-data", "application/x-www-form-urlencoded")):
        try:
            body = await request.json() if await request.body() else {}
        except ValueError:
            raise HTTPException(status_code=400, detail="Expected a JSON object") from None
        if not isinstance(body, dict):
            raise HTTPException(status_code=400, detail="Expected a JSON object")
        return body, []

    form = await request.form()
    raw: Dict[str, Any] = {}
    uploads: List[Upload] = []
    for key, value in form.multi_items():
        if isinstance(value, UploadFile):
            if not value.filename:
                continue
            if value.size is not None and value.size > max_bytes:
                raise FileTooLarge("file", value.size, max_bytes)
            content = await value.read()
            uploads.append(
                Upload(
                    filename=value.filename,
                    content=content,
                    content_type=value.content_type or "application/octet-stream",
                )
            )
        elif key in raw:
            existing = raw[key]
            raw[key] = (existing if isinstance(existing, list) else [existing]) + [value]
        else:
            raw[key] = value
    return raw, uploads


def form_response(result: FormResult) -> Dict[str, Any]:
    if not result.ok:
        raise HTTPException(status_code=502, detail=result.notices[0].description)
    return result.to_api()


def action_response(result: ActionResult) -> Dict[str, Any]:
    if not result.ok:
        raise HTTPException(status_code=502, detail=result.notices[0].description)
    return result.to_api()


def require_confirmation(confirm: bool, label: str) -> None:
    """Destructive calls must be confirmed before the store is touched at all."""
    if not confirm:
        raise ConfirmationRequired(
            f"This will permanently delete the {label} and its associated files. "
            "This action cannot be undone. Repeat the request with confirm=true."
        )

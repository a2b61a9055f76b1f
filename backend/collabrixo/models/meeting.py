from __future__ import annotations

from typing import Any, List

from pydantic import Field, HttpUrl, TypeAdapter, ValidationError, field_validator

from collabrixo.models.base import Document, FormSchema, UtcDatetime

_HTTP_URL = TypeAdapter(HttpUrl)


def parse_attachment_ids(value: Any) -> List[str]:
    """Read every attachment shape older records may carry.

    Meetings have stored a single id, a comma-joined string of ids and a
    list of ids over time. All of them come back as an ordered list.
    """
    if value is None:
        return []
    if isinstance(value, str):
        return [part.strip() for part in value.split(",") if part.strip()]
    if isinstance(value, (list, tuple)):
        ids: List[str] = []
        for item in value:
            ids.extend(parse_attachment_ids(item))
        return ids
    return [str(value)]


class Meeting(Document):
    date: UtcDatetime
    agenda: str
    meet_link: str
    post_meeting_notes: str = ""
    attachments: List[str] = Field(default_factory=list)

    @field_validator("attachments", mode="before")
    @classmethod
    def _attachments(cls, value: Any) -> List[str]:
        return parse_attachment_ids(value)

    @field_validator("post_meeting_notes", mode="before")
    @classmethod
    def _notes(cls, value: Any) -> str:
        return value or ""


class MeetingFields(FormSchema):
    date: UtcDatetime
    agenda: str = Field(min_length=10)
    meet_link: str
    post_meeting_notes: str = ""

    @field_validator("meet_link")
    @classmethod
    def _meet_link(cls, value: str) -> str:
        # validate, but keep the user's spelling so diffs stay stable
        try:
            _HTTP_URL.validate_python(value)
        except ValidationError:
            raise ValueError("Please enter a valid meeting link URL") from None
        return value

    @field_validator("post_meeting_notes", mode="before")
    @classmethod
    def _notes(cls, value: Any) -> str:
        return value or ""

from __future__ import annotations

from enum import Enum
from typing import Any, List

from pydantic import Field, field_validator

from collabrixo.models.base import Document, FormSchema, Text


class TimelineStatus(str, Enum):
    COMPLETED = "completed"
    REQUIRED = "required"


def parse_tags(value: Any) -> List[str]:
    """Comma-separated string or list -> trimmed tags, empties dropped."""
    if value is None:
        return []
    if isinstance(value, str):
        value = value.split(",")
    return [str(tag).strip() for tag in value if str(tag).strip()]


class TimelineEvent(Document):
    title: str
    # free-form, e.g. "2023-12-01"; the store orders on it as a string
    date: str
    description: Text = ""
    status: TimelineStatus = TimelineStatus.REQUIRED
    tags: List[str] = Field(default_factory=list)

    @field_validator("tags", mode="before")
    @classmethod
    def _tags(cls, value: Any) -> List[str]:
        return parse_tags(value)


class TimelineEventFields(FormSchema):
    title: str = Field(min_length=1)
    date: str = Field(min_length=1)
    description: Text = ""
    status: TimelineStatus = TimelineStatus.REQUIRED
    tags: List[str] = Field(default_factory=list)

    @field_validator("tags", mode="before")
    @classmethod
    def _tags(cls, value: Any) -> List[str]:
        return parse_tags(value)

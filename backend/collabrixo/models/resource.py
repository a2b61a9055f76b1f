from __future__ import annotations

from typing import Any, Optional

from pydantic import Field, HttpUrl, TypeAdapter, ValidationError, field_validator

from collabrixo.models.base import Document, FormSchema, Text

_HTTP_URL = TypeAdapter(HttpUrl)

_UNITS = ("Bytes", "KB", "MB", "GB", "TB")


def format_file_size(size: int) -> str:
    """1536 -> "1.5 KB"; 0 -> "0 Bytes"."""
    if size <= 0:
        return "0 Bytes"
    value = float(size)
    unit = 0
    while value >= 1024 and unit < len(_UNITS) - 1:
        value /= 1024
        unit += 1
    text = f"{value:.2f}".rstrip("0").rstrip(".")
    return f"{text} {_UNITS[unit]}"


class Resource(Document):
    name: str
    description: Text = ""
    url: Optional[str] = None
    file_id: Text = ""
    file_name: Text = ""
    # stored as a decimal string
    file_size: str = "0"
    uploaded_by: str = "Unknown"

    @field_validator("file_size", mode="before")
    @classmethod
    def _file_size(cls, value: Any) -> str:
        return str(value) if value not in (None, "") else "0"

    @field_validator("uploaded_by", mode="before")
    @classmethod
    def _uploaded_by(cls, value: Any) -> str:
        return value or "Unknown"

    @property
    def size_bytes(self) -> int:
        try:
            return int(self.file_size)
        except ValueError:
            return 0

    def to_api(self) -> dict:
        data = super().to_api()
        data["fileSizeLabel"] = format_file_size(self.size_bytes)
        return data


class ResourceFields(FormSchema):
    name: str = Field(min_length=1)
    description: Text = ""
    url: Optional[str] = None

    @field_validator("url", mode="before")
    @classmethod
    def _url(cls, value: Any) -> Optional[str]:
        if not value:
            return None
        try:
            _HTTP_URL.validate_python(value)
        except ValidationError:
            raise ValueError("Please enter a valid URL") from None
        return value

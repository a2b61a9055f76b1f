from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, Dict, Optional

from pydantic import AfterValidator, AliasChoices, BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel


def _as_utc(value: datetime) -> datetime:
    # naive values come from <input type="datetime-local">; treat them as UTC
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


UtcDatetime = Annotated[datetime, AfterValidator(_as_utc)]

# Appwrite returns null for optional string attributes that were never set
Text = Annotated[str, BeforeValidator(lambda value: "" if value is None else value)]


class FormSchema(BaseModel):
    """Declarative validation schema for one entity form.

    Accepts either snake_case or the camelCase attribute names used by the
    Appwrite collections.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        str_strip_whitespace=True,
    )

    def to_fields(self) -> Dict[str, Any]:
        """Values keyed by Appwrite attribute name, JSON-ready."""
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def aliased(cls, raw: Dict[str, Any]) -> Dict[str, Any]:
        """`raw` with snake_case field names replaced by their attribute names."""
        names = {name: info.alias or name for name, info in cls.model_fields.items()}
        return {names.get(key, key): value for key, value in raw.items()}


class Document(BaseModel):
    """A record as stored in an Appwrite collection.

    `$id` is assigned by the store on creation and never changes afterwards.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    id: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices("$id", "id"),
        serialization_alias="id",
    )
    created_at: Optional[UtcDatetime] = Field(
        default=None,
        validation_alias=AliasChoices("createdAt", "$createdAt", "created_at"),
        serialization_alias="createdAt",
    )
    updated_at: Optional[UtcDatetime] = Field(
        default=None,
        validation_alias=AliasChoices("updatedAt", "$updatedAt", "updated_at"),
        serialization_alias="updatedAt",
    )

    def to_fields(self) -> Dict[str, Any]:
        """Attribute payload for the store (no `$id`)."""
        return self.model_dump(mode="json", by_alias=True, exclude={"id"})

    def to_api(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

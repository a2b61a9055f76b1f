from typing import Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class User(BaseModel):
    """Account owned by Appwrite; the board only reads it."""

    model_config = ConfigDict(extra="ignore")

    id: str = Field(validation_alias=AliasChoices("$id", "id"))
    name: str = ""
    email: str = ""

    @property
    def display_name(self) -> str:
        return self.name or self.email or "Unknown"


class Session(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str = Field(validation_alias=AliasChoices("$id", "id"))
    user_id: Optional[str] = Field(default=None, validation_alias=AliasChoices("userId", "user_id"))
    # empty unless the request carried a server API key
    secret: str = ""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel

from collabrixo.models.base import Document, FormSchema, UtcDatetime


class Timer(Document):
    target_date: Optional[UtcDatetime] = None
    is_active: bool = False


class TimerFields(FormSchema):
    target_date: UtcDatetime
    is_active: bool = True


class TimeLeft(BaseModel):
    days: int
    hours: int
    minutes: int

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import Field

from collabrixo.models.base import Document, FormSchema, Text


class Difficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


class Status(str, Enum):
    """Kanban column. Any status may follow any other."""

    TODO = "todo"
    IN_PROGRESS = "inprogress"
    DONE = "done"


class WorkItem(Document):
    name: str
    description: Text = ""
    assignee: Text = ""
    difficulty: Difficulty = Difficulty.MEDIUM
    status: Status = Status.TODO
    # object id in the storage bucket
    inspiration_image: Optional[str] = None


class WorkItemFields(FormSchema):
    name: str = Field(min_length=2, max_length=50)
    description: Text = ""
    assignee: str = Field(min_length=2)
    difficulty: Difficulty = Difficulty.MEDIUM
    status: Status = Status.TODO

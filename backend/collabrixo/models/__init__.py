from collabrixo.models.base import Document, FormSchema
from collabrixo.models.meeting import Meeting, MeetingFields
from collabrixo.models.resource import Resource, ResourceFields
from collabrixo.models.timeline import TimelineEvent, TimelineEventFields, TimelineStatus
from collabrixo.models.timer import TimeLeft, Timer, TimerFields
from collabrixo.models.user import Session, User
from collabrixo.models.work_item import Difficulty, Status, WorkItem, WorkItemFields

__all__ = [
    "Difficulty",
    "Document",
    "FormSchema",
    "Meeting",
    "MeetingFields",
    "Resource",
    "ResourceFields",
    "Session",
    "Status",
    "TimeLeft",
    "TimelineEvent",
    "TimelineEventFields",
    "TimelineStatus",
    "Timer",
    "TimerFields",
    "User",
    "WorkItem",
    "WorkItemFields",
]

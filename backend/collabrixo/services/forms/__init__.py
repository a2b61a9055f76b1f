from collabrixo.services.forms.base import EntityForm, FormResult, Outcome, field_diff
from collabrixo.services.forms.meetings import MeetingForm
from collabrixo.services.forms.resources import ResourceForm
from collabrixo.services.forms.timeline import TimelineEventForm
from collabrixo.services.forms.work_items import WorkItemForm

__all__ = [
    "EntityForm",
    "FormResult",
    "MeetingForm",
    "Outcome",
    "ResourceForm",
    "TimelineEventForm",
    "WorkItemForm",
    "field_diff",
]

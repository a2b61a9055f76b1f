from collabrixo.models.timeline import TimelineEvent, TimelineEventFields
from collabrixo.services.forms.base import EntityForm


class TimelineEventForm(EntityForm[TimelineEventFields, TimelineEvent]):
    schema = TimelineEventFields
    model = TimelineEvent
    label = "Event"

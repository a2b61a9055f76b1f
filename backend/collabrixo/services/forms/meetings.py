from __future__ import annotations

from typing import Any, Dict, List, Sequence, Tuple

from collabrixo.models.meeting import Meeting, MeetingFields
from collabrixo.services.forms.base import EntityForm
from collabrixo.services.notices import Notice
from collabrixo.services.store import Upload


class MeetingForm(EntityForm[MeetingFields, Meeting]):
    schema = MeetingFields
    model = Meeting
    label = "Meeting"
    object_attributes = ("attachments",)

    async def attach(self, uploads: Sequence[Upload], notices: List[Notice]) -> Tuple[Dict[str, Any], List[str]]:
        existing = list(self.initial.attachments) if self.initial else []
        added = []
        for upload in uploads:
            object_id = await self.upload_or_warn(upload, notices)
            if object_id:
                added.append(object_id)
        if not added:
            return ({"attachments": existing} if not self.editing else {}), []
        # new files are appended; nothing becomes unreferenced
        return {"attachments": existing + added}, []

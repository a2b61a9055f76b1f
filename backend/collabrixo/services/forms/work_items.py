from __future__ import annotations

from typing import Any, Dict, List, Sequence, Tuple

from collabrixo.models.work_item import WorkItem, WorkItemFields
from collabrixo.services.forms.base import EntityForm
from collabrixo.services.notices import Notice
from collabrixo.services.store import READ_UPDATE_ANY, Upload


class WorkItemForm(EntityForm[WorkItemFields, WorkItem]):
    """Kanban card form with an optional inspiration image."""

    schema = WorkItemFields
    model = WorkItem
    label = "Component"
    permissions = READ_UPDATE_ANY
    object_attributes = ("inspirationImage",)

    async def attach(self, uploads: Sequence[Upload], notices: List[Notice]) -> Tuple[Dict[str, Any], List[str]]:
        old_image = self.initial.inspiration_image if self.initial else None

        if uploads:
            new_image = await self.upload_or_warn(uploads[0], notices)
            if new_image is None:
                return {}, []
            return {"inspirationImage": new_image}, [old_image] if old_image else []

        if self.flag("removeImage") and old_image:
            return {"inspirationImage": None}, [old_image]
        return {}, []

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Tuple

from collabrixo.core.errors import FormValidationError
from collabrixo.models.resource import Resource, ResourceFields
from collabrixo.services.forms.base import EntityForm
from collabrixo.services.notices import Notice
from collabrixo.services.store import READ_ANY, Upload


class ResourceForm(EntityForm[ResourceFields, Resource]):
    """Shared file plus its metadata. New resources must come with a file."""

    schema = ResourceFields
    model = Resource
    label = "Resource"
    object_attributes = ("fileId",)

    def __init__(self, *args: Any, uploaded_by: Optional[str] = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.uploaded_by = uploaded_by or "Unknown"

    def check_uploads(self, uploads: Sequence[Upload]) -> None:
        super().check_uploads(uploads)
        if not self.editing and not uploads:
            raise FormValidationError({"file": "Please select a file to upload"})

    async def attach(self, uploads: Sequence[Upload], notices: List[Notice]) -> Tuple[Dict[str, Any], List[str]]:
        if not uploads:
            return {}, []
        upload = uploads[0]

        if not self.editing:
            # the file is the resource; a failed upload fails the whole create
            file_id = await self.store.upload_object(upload, READ_ANY)
        else:
            file_id = await self.upload_or_warn(upload, notices)
            if file_id is None:
                return {}, []

        old_file = self.initial.file_id if self.initial else ""
        attributes = {"fileId": file_id, "fileName": upload.filename, "fileSize": str(upload.size)}
        return attributes, [old_file] if old_file else []

    def extra_create_fields(self) -> Dict[str, Any]:
        return {"uploadedBy": self.uploaded_by}

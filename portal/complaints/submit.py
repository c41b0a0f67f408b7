"""
Anonymous complaint submission.

The form is validated locally first; nothing is sent while any field is in
error. Attachments are picked up front and checked against the per-file
size cap and the file count limit.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Sequence

from portal.api.client import ApiClient
from portal.complaints.schemas import ComplaintCategory, ComplaintDraft
from portal.config import get_settings
from portal.core.files import FileUpload, select_attachments
from portal.core.forms import FormController
from portal.core.toasts import Toaster
from portal.exceptions import ApiError, FileValidationError

logger = logging.getLogger(__name__)

MAX_ATTACHMENTS = 5

# server validation params -> draft fields
SERVER_FIELDS = {
    "contactInfo.email": "contact_email",
    "contactInfo.phone": "contact_phone",
    "location.address": "address",
    "location.city": "city",
}


class ComplaintForm:
    endpoint = "/api/anonymous/complaints"
    categories_endpoint = "/api/categories"

    def __init__(self, api: ApiClient, toaster: Optional[Toaster] = None):
        self.api = api
        self.toaster = toaster or Toaster()
        self.form: FormController[ComplaintDraft] = FormController(ComplaintDraft)
        self.categories: List[ComplaintCategory] = []
        self.attachments: List[FileUpload] = []
        self.submitting = False

    @property
    def errors(self) -> Dict[str, str]:
        return self.form.errors

    def update(self, **changes: Any) -> None:
        self.form.update(**changes)

    async def load_categories(self) -> bool:
        try:
            envelope = await self.api.get(self.categories_endpoint)
        except ApiError as exc:
            # not critical: the select just stays empty
            logger.error("Error fetching categories: %s", exc.server_message or exc.status_code)
            self.categories = []
            return False
        if not envelope.success:
            self.toaster.error("Failed to load complaint categories")
            return False
        self.categories = [ComplaintCategory.model_validate(row) for row in envelope.data or []]
        return True

    def choose_files(self, files: Sequence[FileUpload]) -> bool:
        """Replace the attachment selection; an oversized file rejects the whole pick."""
        try:
            kept, warning = select_attachments(files, MAX_ATTACHMENTS)
        except FileValidationError as exc:
            self.toaster.error(exc.message)
            return False
        if warning:
            self.toaster.warning(warning)
        self.attachments = kept
        return True

    def reset(self) -> None:
        self.form.reset()
        self.attachments = []

    def form_fields(self) -> Dict[str, Any]:
        draft = self.form.draft
        fields: Dict[str, Any] = {
            "title": draft.title,
            "description": draft.description,
            "category": draft.category,
        }
        if draft.address or draft.city:
            fields["location"] = json.dumps({
                "address": draft.address,
                "city": draft.city,
                "coordinates": {"lat": 0, "lng": 0},
            })
        if draft.contact_email or draft.contact_phone:
            fields["contactInfo"] = json.dumps({"email": draft.contact_email, "phone": draft.contact_phone})
        return fields

    def _apply_server_errors(self, errors: List[Dict[str, Any]]) -> None:
        mapped = {}
        for error in errors:
            param = error.get("param") or error.get("path") or "form"
            mapped[SERVER_FIELDS.get(param, param)] = error.get("msg", "")
        self.form.errors = mapped

    async def submit(self) -> Optional[str]:
        """Send the complaint; returns the tracking ID on success."""
        if not self.form.validate():
            self.toaster.error("Please fix the errors in the form")
            return None

        files = [f.as_multipart("attachments") for f in self.attachments]
        self.submitting = True
        try:
            envelope = await self.api.send_form("POST", self.endpoint, self.form_fields(), files)
        except ApiError as exc:
            logger.error("Error submitting complaint: %s", exc.server_message or exc.status_code)
            errors = exc.payload.get("errors")
            if exc.server_message:
                self.toaster.error(exc.server_message)
            elif errors:
                self._apply_server_errors(errors)
                self.toaster.error("Please fix the errors in the form")
            else:
                self.toaster.error("Failed to submit complaint. Please try again.")
            return None
        finally:
            self.submitting = False

        if not envelope.success:
            self.toaster.error(envelope.message or "Failed to submit complaint. Please try again.")
            return None

        self.toaster.success(envelope.message or "Complaint submitted successfully!")
        tracking_id = (envelope.data or {}).get("trackingId")
        if tracking_id:
            self.toaster.info(f"Your tracking ID: {tracking_id}", duration=get_settings().TRACKING_TOAST_SECONDS)
        self.reset()
        return tracking_id

"""
An anonymous user's own complaints: paged list, detail view with the
conversation, follow-up responses and feedback. Also the public lookup by
tracking ID, which needs no session.
"""

import logging
from typing import Any, List, Optional, Sequence

from portal.api.client import ApiClient
from portal.complaints.schemas import Complaint, FeedbackDraft, Response
from portal.config import get_settings
from portal.core.files import FileUpload, select_attachments
from portal.core.filters import PageState
from portal.core.forms import FormController
from portal.core.modals import ModalKind, ModalOrchestrator
from portal.core.store import ResourceStore
from portal.core.toasts import Toaster
from portal.exceptions import ApiError, FileValidationError

logger = logging.getLogger(__name__)

MAX_RESPONSE_ATTACHMENTS = 3


async def track_complaint(api: ApiClient, tracking_id: str) -> Complaint:
    """
    Public status lookup. Raises ValueError for a blank ID, LookupError when
    the server answers without a complaint and ApiError when the request fails.
    """
    tracking_id = (tracking_id or "").strip()
    if not tracking_id:
        raise ValueError("Please enter a tracking ID")
    envelope = await api.get(f"/api/complaints/track/{tracking_id}")
    if not envelope.success or not envelope.data:
        raise LookupError("Unable to find complaint with that tracking ID")
    return Complaint.model_validate(envelope.data)


class TrackingLookup:
    """State behind the public "track your complaint" page."""

    def __init__(self, api: ApiClient):
        self.api = api
        self.complaint: Optional[Complaint] = None
        self.error: Optional[str] = None
        self.loading = False

    async def track(self, tracking_id: str) -> bool:
        self.error = None
        self.complaint = None
        self.loading = True
        try:
            self.complaint = await track_complaint(self.api, tracking_id)
        except (ValueError, LookupError) as exc:
            self.error = str(exc)
        except ApiError as exc:
            logger.error("Error tracking complaint %s: %s", tracking_id, exc.server_message or exc.status_code)
            self.error = "Failed to fetch complaint. Please check your tracking ID and try again."
        finally:
            self.loading = False
        return self.complaint is not None


class ComplaintTracker:
    endpoint = "/api/anonymous/complaints"

    def __init__(self, api: ApiClient, toaster: Optional[Toaster] = None, page_size: Optional[int] = None):
        self.api = api
        self.toaster = toaster or Toaster()
        self.page = PageState(limit=page_size or get_settings().DEFAULT_PAGE_SIZE)
        self.store: ResourceStore[Complaint] = ResourceStore(
            lambda params: self.api.get(self.endpoint, params=params),
            Complaint.model_validate,
            error_message="Failed to fetch complaints",
        )

        self.selected: Optional[Complaint] = None
        self.responses: List[Response] = []
        self.detail_loading = False

        self.response_content = ""
        self.response_files: List[FileUpload] = []
        self.feedback: FormController[FeedbackDraft] = FormController(FeedbackDraft)
        self.submitting = False
        self.modal: ModalOrchestrator[Complaint] = ModalOrchestrator(
            (ModalKind.RESPOND, ModalKind.FEEDBACK), on_close=self._clear_modal_forms
        )

    # LIST
    @property
    def complaints(self) -> List[Complaint]:
        return self.store.items

    async def refresh(self) -> bool:
        ok = await self.store.refresh(self.page.to_params())
        if ok:
            self.page.update_from(self.store.pagination)
        else:
            # the list view shows its empty state instead of stale rows
            self.store.items = []
        return ok

    async def go_to_page(self, page: int) -> bool:
        self.page.page = self.page.clamp(page)
        return await self.refresh()

    # DETAIL
    async def view(self, complaint_id: str) -> bool:
        self.detail_loading = True
        try:
            envelope = await self.api.get(f"{self.endpoint}/{complaint_id}")
        except ApiError as exc:
            logger.error("Error fetching complaint details: %s", exc.server_message or exc.status_code)
            self.toaster.error("Failed to load complaint details")
            return False
        finally:
            self.detail_loading = False

        if not envelope.success:
            self.toaster.error("Failed to fetch complaint details")
            return False
        data = envelope.data or {}
        self.selected = Complaint.model_validate(data["complaint"])
        self.responses = [Response.model_validate(row) for row in data.get("responses") or []]
        return True

    def back_to_list(self) -> None:
        self.modal.close()
        self.selected = None
        self.responses = []

    # MODALS
    def _clear_modal_forms(self) -> None:
        self.response_content = ""
        self.response_files = []
        self.feedback.reset()

    def _require_selection(self) -> Complaint:
        if self.selected is None:
            raise RuntimeError("No complaint is open")
        return self.selected

    def open_respond(self) -> None:
        self.modal.open(ModalKind.RESPOND, self._require_selection())

    def open_feedback(self) -> None:
        complaint = self._require_selection()
        if not complaint.accepts_feedback:
            raise ValueError("Feedback can only be given on resolved or closed complaints")
        self.modal.open(ModalKind.FEEDBACK, complaint)

    def close(self) -> None:
        self.modal.close()

    # RESPONSES
    def choose_response_files(self, files: Sequence[FileUpload]) -> bool:
        try:
            kept, warning = select_attachments(files, MAX_RESPONSE_ATTACHMENTS)
        except FileValidationError as exc:
            self.toaster.error(exc.message)
            return False
        if warning:
            self.toaster.warning(warning)
        self.response_files = kept
        return True

    async def add_response(self) -> bool:
        if self.modal.kind != ModalKind.RESPOND:
            raise RuntimeError("Response form is not open")
        if not self.response_content.strip():
            self.toaster.error("Please enter your response")
            return False

        complaint = self.modal.target
        files = [f.as_multipart("attachments") for f in self.response_files]
        ok = await self._send(
            lambda: self.api.send_form(
                "POST", f"{self.endpoint}/{complaint.id}/responses", {"content": self.response_content}, files
            ),
            success="Response submitted successfully",
            failure="Failed to submit response",
        )
        if ok:
            self.modal.close()
            await self.view(complaint.id)
        return ok

    # FEEDBACK
    def rate(self, **ratings: Any) -> None:
        self.feedback.update(**ratings)

    async def submit_feedback(self) -> bool:
        if self.modal.kind != ModalKind.FEEDBACK:
            raise RuntimeError("Feedback form is not open")
        if not self.feedback.validate():
            return False

        complaint = self.modal.target
        body = {"complaintId": complaint.id, **self.feedback.draft.model_dump(by_alias=True)}
        ok = await self._send(
            lambda: self.api.post("/api/feedback", json=body),
            success="Feedback submitted successfully! Thank you for your input.",
            failure="Failed to submit feedback",
        )
        if ok:
            self.modal.close()
            await self.view(complaint.id)
        return ok

    async def _send(self, request, *, success: str, failure: str) -> bool:
        self.submitting = True
        try:
            envelope = await request()
        except ApiError as exc:
            logger.error("%s: %s", failure, exc.server_message or exc.status_code)
            self.toaster.error(failure)
            return False
        finally:
            self.submitting = False
        if not envelope.success:
            self.toaster.error(envelope.message or failure)
            return False
        self.toaster.success(success)
        return True

"""
Staff management, paged and sorted on the server.

Status changes do not use a toggle endpoint: deactivating is a soft
DELETE and reactivating is a plain update. Only inactive members can be
deleted for good, and an admin can never act on their own account.
"""

import logging
from typing import Any, Dict, Optional

from portal.api.client import ApiClient
from portal.core.files import FileUpload
from portal.core.forms import MIN_PASSWORD_LENGTH
from portal.core.modals import ModalKind
from portal.core.panel import CRUD_MODALS, AdminContext, ServerPagedPanel
from portal.core.toasts import Toaster
from portal.exceptions import ApiError
from portal.staff.schemas import Staff, StaffDraft, StaffRole

logger = logging.getLogger(__name__)


class StaffPanel(ServerPagedPanel[Staff, StaffDraft]):
    endpoint = "/api/admin/staff"
    entity = Staff
    draft = StaffDraft
    label = "staff member"
    plural = "staff data"
    modal_kinds = CRUD_MODALS + (ModalKind.RESET_PASSWORD,)
    image_field = "profileImage"
    sortable = True

    def __init__(
        self,
        api: ApiClient,
        context: Optional[AdminContext] = None,
        toaster: Optional[Toaster] = None,
        **kwargs,
    ):
        super().__init__(api, context, toaster, **kwargs)
        self.role_filter: Optional[StaffRole] = None
        # "active" hides deactivated members, "all" shows everyone
        self.status_filter = "active"
        self.new_password = ""
        self.confirm_password = ""
        self.modal.add_close_hook(self._clear_passwords)

    def _clear_passwords(self) -> None:
        self.new_password = ""
        self.confirm_password = ""

    def filter_params(self) -> Dict[str, Any]:
        return {
            "includeInactive": self.status_filter == "all",
            "role": self.role_filter.value if self.role_filter else None,
        }

    async def set_role_filter(self, role: Optional[str]) -> bool:
        self.role_filter = StaffRole(role) if role else None
        return await self.filters_changed()

    async def set_status_filter(self, choice: str) -> bool:
        if choice not in ("active", "all"):
            raise ValueError(f"Unknown status filter: {choice!r}")
        self.status_filter = choice
        return await self.filters_changed()

    def is_self(self, staff: Staff) -> bool:
        return staff.id == self.context.admin_id

    # FORM
    def draft_values(self, staff: Staff) -> Dict[str, Any]:
        return {"name": staff.name, "email": staff.email, "role": staff.role.value, "password": ""}

    def image_url(self, staff: Staff) -> Optional[str]:
        return staff.profile_image

    def choose_image(self, file: Optional[FileUpload]) -> bool:
        return self.form.attach_image(file, field="profileImage")

    def form_fields(self, draft: StaffDraft) -> Dict[str, Any]:
        fields = {"name": draft.name, "email": draft.email, "role": draft.role}
        if draft.password:
            fields["password"] = draft.password
        return fields

    # STATUS / DELETE
    async def toggle_status(self, staff: Staff) -> bool:
        if self.is_self(staff):
            self.toaster.error("You cannot change your own status")
            return False
        if staff.is_active:
            request = lambda: self.api.delete(f"{self.endpoint}/{staff.id}")
            success, failure = "Staff member deactivated successfully", "Failed to deactivate staff member"
        else:
            request = lambda: self.api.put(f"{self.endpoint}/{staff.id}", json={"isActive": True})
            success, failure = "Staff member activated successfully", "Failed to activate staff member"
        envelope = await self.actions.dispatch(
            request,
            success=success,
            failure=failure,
            fallback="An error occurred while updating staff status",
        )
        return envelope is not None

    def open_delete(self, staff: Staff) -> None:
        if self.is_self(staff):
            self.toaster.error("You cannot delete your own account")
            return
        if staff.is_active:
            self.toaster.error("Deactivate the staff member before deleting")
            return
        super().open_delete(staff)

    async def delete(self) -> bool:
        """Permanently remove the (already deactivated) target."""
        if self.modal.kind != ModalKind.DELETE:
            raise RuntimeError("Delete modal is not open")
        target = self.modal.target
        envelope = await self.actions.dispatch(
            lambda: self.api.delete(f"{self.endpoint}/{target.id}/permanent"),
            success="Staff member permanently deleted",
            failure="Failed to delete staff member",
            fallback="An error occurred while deleting staff member",
        )
        if envelope is None:
            return False
        self.modal.close()
        return True

    # PASSWORDS
    async def send_reset_link(self, staff: Staff) -> bool:
        envelope = await self.actions.dispatch(
            lambda: self.api.post(f"{self.endpoint}/reset-password/{staff.id}"),
            success="Password reset link sent to the staff member",
            failure="Failed to send password reset link",
            fallback="An error occurred while sending password reset link",
            refresh=False,
        )
        return envelope is not None

    def open_reset_password(self, staff: Staff) -> None:
        self.modal.open(ModalKind.RESET_PASSWORD, staff)
        self._clear_passwords()

    def _password_error(self) -> Optional[Dict[str, str]]:
        if not self.new_password:
            return {"newPassword": "New password is required"}
        if len(self.new_password) < MIN_PASSWORD_LENGTH:
            return {"newPassword": f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"}
        if self.new_password != self.confirm_password:
            return {"confirmPassword": "Passwords do not match"}
        return None

    async def change_password(self) -> bool:
        """Set the target's password directly from the reset-password modal."""
        if self.modal.kind != ModalKind.RESET_PASSWORD:
            raise RuntimeError("Reset password modal is not open")
        self.form.errors.pop("newPassword", None)
        self.form.errors.pop("confirmPassword", None)
        error = self._password_error()
        if error:
            self.form.errors.update(error)
            return False

        target = self.modal.target
        self.actions.busy = True
        try:
            envelope = await self.api.post(
                f"{self.endpoint}/change-password/{target.id}",
                json={"newPassword": self.new_password},
            )
        except ApiError as exc:
            logger.error("Error changing password: %s", exc.server_message or exc.status_code)
            self.toaster.error(exc.message_or("An error occurred while changing password"))
            return False
        finally:
            self.actions.busy = False

        if not envelope.success:
            self.toaster.error(envelope.message or "Failed to change password")
            return False
        self.toaster.success("Password changed successfully")
        self.modal.close()
        return True

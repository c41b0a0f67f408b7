"""
Registered-user management. Admins can edit, (de)activate and hand out
one-time access codes for password resets; users are never created or
deleted from here.
"""

from typing import Any, Dict, Optional

from portal.api.client import ApiClient
from portal.core.files import FileUpload
from portal.core.modals import ModalKind
from portal.core.panel import AdminContext, ServerPagedPanel
from portal.core.toasts import Toaster
from portal.users.schemas import StandardUser, UserDraft


class UserPanel(ServerPagedPanel[StandardUser, UserDraft]):
    endpoint = "/api/admin/users"
    entity = StandardUser
    draft = UserDraft
    label = "user"
    plural = "users"
    modal_kinds = (ModalKind.EDIT, ModalKind.VIEW, ModalKind.RESET_PASSWORD)
    image_field = "profileImage"

    def __init__(
        self,
        api: ApiClient,
        context: Optional[AdminContext] = None,
        toaster: Optional[Toaster] = None,
        **kwargs,
    ):
        super().__init__(api, context, toaster, **kwargs)
        self.active_filter: Optional[bool] = None
        self.verified_filter: Optional[bool] = None
        self.access_code: Optional[str] = None
        self.modal.add_close_hook(self._forget_access_code)

    def _forget_access_code(self) -> None:
        self.access_code = None

    def filter_params(self) -> Dict[str, Any]:
        return {
            "isActive": self.active_filter,
            "isVerified": self.verified_filter,
            "adminId": self.context.admin_id,
        }

    async def set_filters(self, *, active: Optional[bool] = None, verified: Optional[bool] = None) -> bool:
        self.active_filter = active
        self.verified_filter = verified
        return await self.filters_changed()

    async def clear_filters(self) -> bool:
        self.search = ""
        self._search_debouncer.cancel()
        self.active_filter = None
        self.verified_filter = None
        return await self.filters_changed()

    # FORM
    def draft_values(self, user: StandardUser) -> Dict[str, Any]:
        return {
            "name": user.name,
            "email": user.email,
            "phone": user.phone or "",
            "is_active": user.is_active,
        }

    def image_url(self, user: StandardUser) -> Optional[str]:
        return user.profile_image

    def choose_image(self, file: Optional[FileUpload]) -> bool:
        return self.form.attach_image(file, field="profileImage")

    def form_fields(self, draft: UserDraft) -> Dict[str, Any]:
        return {
            "name": draft.name,
            "email": draft.email,
            "phone": draft.phone,
            "isActive": draft.is_active,
        }

    def status_audit(self) -> Dict[str, Any]:
        return self.context.admin_fields()

    # ACCESS CODES
    def open_reset_password(self, user: StandardUser) -> None:
        self.modal.open(ModalKind.RESET_PASSWORD, user)
        self.access_code = None

    async def generate_access_code(self) -> Optional[str]:
        """Ask the server for a reset code for the reset-password target; kept for display."""
        if self.modal.kind != ModalKind.RESET_PASSWORD:
            raise RuntimeError("Reset password modal is not open")
        target = self.modal.target
        envelope = await self.actions.dispatch(
            lambda: self.api.post(
                f"/api/admin/generate-access-code/user/{target.id}",
                json=self.context.admin_fields(),
            ),
            success="Access code generated successfully",
            failure="Failed to generate access code",
            fallback="An error occurred while generating access code",
            refresh=False,
        )
        if envelope is None:
            return None
        self.access_code = envelope.access_code
        return self.access_code
